"""Fixtures — fake Redis audit store, sample markup."""

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from src.store.redis import AuditStore

GOOD_WORDS = " ".join(f"word{i}" for i in range(250))

GOOD_PAGE = f"""\
<!DOCTYPE html>
<html lang="en">
<head>
  <title>Trattoria Roma - Authentic Italian Food</title>
  <meta name="description" content="Family-run Italian trattoria serving handmade pasta, wood-fired pizza and seasonal dishes since 1982.">
  <meta name="viewport" content="width=device-width, initial-scale=1">
</head>
<body>
  <header><nav><a href="/menu">Menu</a> <a href="/about">About</a></nav></header>
  <main>
    <h1>Welcome to Trattoria Roma</h1>
    <a class="cta" href="/contact">Contact us</a>
    <p>{GOOD_WORDS}</p>
    <img src="/pasta.jpg" alt="Fresh pasta">
    <form>
      <label for="email">Email</label>
      <input id="email" type="email">
      <button type="submit">Send</button>
    </form>
  </main>
  <footer>Via Roma 1</footer>
</body>
</html>
"""


@pytest.fixture
def good_page() -> str:
    return GOOD_PAGE


@pytest_asyncio.fixture
async def audit_store():
    """AuditStore backed by an in-memory FakeRedis instance."""
    client = FakeRedis(decode_responses=True)
    store = AuditStore(client, default_ttl=3600)
    yield store
    await client.aclose()
