"""Crawler tests.

``respx`` patches ``httpx`` at the transport layer so no real network calls
are made; a catch-all route answers anything not explicitly mocked with 404.
"""

import httpx
import pytest
import respx

from src.audit.crawler import (
    CrawlOptions,
    CrawlSession,
    crawl,
    extract_links,
    normalize_url,
    resolve_href,
)


def _page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">link</a>' for h in hrefs)
    return f"<html><body>{anchors}</body></html>"


def _mock_site(router: respx.MockRouter, pages: dict[str, str]) -> None:
    for url, html in pages.items():
        router.get(url).respond(200, html=html)
    router.route().respond(404, text="not found")


# --- URL helpers (sync) ---


def test_normalize_url_lowercases_and_strips_fragment():
    assert normalize_url("HTTPS://Example.COM/About/#team") == "https://example.com/About"


def test_normalize_url_keeps_root_slash():
    assert normalize_url("https://example.com") == "https://example.com/"
    assert normalize_url("https://example.com/") == "https://example.com/"


def test_normalize_url_keeps_query():
    assert normalize_url("https://example.com/search/?q=1") == "https://example.com/search?q=1"


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com/file", "/relative/path", "http://", "http://[::1"])
def test_normalize_url_rejects_unusable(url):
    assert normalize_url(url) is None


@pytest.mark.parametrize(
    "href",
    ["mailto:someone@example.com", "tel:+39123456", "javascript:void(0)", "#top", "", "   ",
     "data:text/html,hello"],
)
def test_resolve_href_discards(href):
    assert resolve_href(href, "https://example.com/page") is None


def test_resolve_href_relative():
    assert resolve_href("contact.html", "https://example.com/about/") == "https://example.com/about/contact.html"
    assert resolve_href("/menu", "https://example.com/about/") == "https://example.com/menu"


def test_extract_links_classifies_and_deduplicates():
    html = _page("/a", "/a#frag", "https://example.com/b/", "https://other.org/x", "https://other.org/x",
                 "mailto:x@example.com", "https://sub.example.com/")
    internal, external = extract_links(html, "https://example.com/", "example.com")
    assert internal == ["https://example.com/a", "https://example.com/b"]
    assert external == ["https://other.org/x", "https://sub.example.com/"]


def test_session_marks_seen_on_enqueue():
    session = CrawlSession.start("https://example.com", CrawlOptions())
    assert session is not None
    assert session.domain == "example.com"
    assert session.enqueue("https://example.com/", 1) is False
    assert session.enqueue("https://example.com/a", 1) is True
    assert session.enqueue("https://example.com/a", 2) is False
    assert list(session.queue) == [("https://example.com/", 0), ("https://example.com/a", 1)]


def test_session_rejects_malformed_seed():
    assert CrawlSession.start("nope", CrawlOptions()) is None


# --- Full crawl (async, respx) ---


@pytest.mark.asyncio
async def test_crawl_malformed_seed_returns_empty():
    assert await crawl("not-a-url") == []


@pytest.mark.asyncio
async def test_crawl_max_pages_one_returns_only_seed():
    with respx.mock(assert_all_called=False) as router:
        _mock_site(router, {"https://example.com/": _page("/a", "/b", "/c")})
        results = await crawl("https://example.com", CrawlOptions(max_pages=1, max_depth=3))

    assert len(results) == 1
    assert results[0].url == "https://example.com/"
    assert results[0].depth == 0
    assert results[0].internal_links == [
        "https://example.com/a",
        "https://example.com/b",
        "https://example.com/c",
    ]


@pytest.mark.asyncio
async def test_crawl_bfs_order_depths_and_depth_limit():
    site = {
        "https://example.com/": _page("/a", "/b"),
        "https://example.com/a": _page("/b", "/c", "/"),
        "https://example.com/b": _page("/a"),
        "https://example.com/c": _page("/d"),
        "https://example.com/d": _page(),
    }
    with respx.mock(assert_all_called=False) as router:
        _mock_site(router, site)
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=2))

    assert [(r.url, r.depth) for r in results] == [
        ("https://example.com/", 0),
        ("https://example.com/a", 1),
        ("https://example.com/b", 1),
        ("https://example.com/c", 2),
    ]
    urls = [r.url for r in results]
    assert len(urls) == len(set(urls))
    assert all(r.depth <= 2 for r in results)


@pytest.mark.asyncio
async def test_crawl_depth_zero_fetches_only_seed():
    with respx.mock(assert_all_called=False) as router:
        _mock_site(router, {"https://example.com/": _page("/a")})
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=0))
    assert [r.url for r in results] == ["https://example.com/"]


@pytest.mark.asyncio
async def test_crawl_respects_max_pages():
    site = {"https://example.com/": _page(*[f"/p{i}" for i in range(10)])}
    site.update({f"https://example.com/p{i}": _page() for i in range(10)})
    with respx.mock(assert_all_called=False) as router:
        _mock_site(router, site)
        results = await crawl("https://example.com/", CrawlOptions(max_pages=4, max_depth=2))
    assert len(results) == 4


@pytest.mark.asyncio
async def test_crawl_never_fetches_external_links():
    with respx.mock(assert_all_called=False) as router:
        _mock_site(router, {"https://example.com/": _page("https://other.org/page")})
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=2))
        external_calls = [c for c in router.calls if c.request.url.host == "other.org"]

    assert len(results) == 1
    assert results[0].external_links == ["https://other.org/page"]
    assert external_calls == []


@pytest.mark.asyncio
async def test_crawl_records_network_failure_and_continues():
    with respx.mock(assert_all_called=False) as router:
        router.get("https://example.com/").respond(200, html=_page("/down", "/ok"))
        router.get("https://example.com/down").mock(side_effect=httpx.ConnectError("refused"))
        router.get("https://example.com/ok").respond(200, html=_page())
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=1))

    by_url = {r.url: r for r in results}
    assert by_url["https://example.com/down"].status_code == 0
    assert by_url["https://example.com/down"].fetch_error
    assert by_url["https://example.com/down"].raw_markup == ""
    assert by_url["https://example.com/ok"].fetch_error is None


@pytest.mark.asyncio
async def test_crawl_flags_non_html_response():
    with respx.mock(assert_all_called=False) as router:
        router.get("https://example.com/").respond(200, html=_page("/feed"))
        router.get("https://example.com/feed").respond(200, json={"items": []})
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=1))

    feed = results[1]
    assert feed.status_code == 200
    assert "non-HTML" in feed.fetch_error
    assert feed.raw_markup == ""


@pytest.mark.asyncio
async def test_crawl_error_status_keeps_markup_but_skips_links():
    with respx.mock(assert_all_called=False) as router:
        router.get("https://example.com/").respond(200, html=_page("/missing"))
        router.get("https://example.com/missing").respond(404, html=_page("/secret"))
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=3))

    missing = results[1]
    assert missing.status_code == 404
    assert missing.fetch_error is None
    assert "/secret" in missing.raw_markup
    assert missing.internal_links == []
    assert len(results) == 2


@pytest.mark.asyncio
async def test_crawl_does_not_queue_assets():
    with respx.mock(assert_all_called=False) as router:
        _mock_site(router, {
            "https://example.com/": _page("/brochure.pdf", "/logo.PNG", "/about"),
            "https://example.com/about": _page(),
        })
        results = await crawl("https://example.com/", CrawlOptions(max_pages=10, max_depth=2))

    assert [r.url for r in results] == ["https://example.com/", "https://example.com/about"]
    assert "https://example.com/brochure.pdf" in results[0].internal_links


@pytest.mark.asyncio
async def test_crawl_sends_user_agent():
    with respx.mock(assert_all_called=False) as router:
        route = router.get("https://example.com/").respond(200, html=_page())
        await crawl("https://example.com/", CrawlOptions(user_agent="TestBot/9"))
    assert route.calls.last.request.headers["User-Agent"] == "TestBot/9"
