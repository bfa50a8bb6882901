"""Breadth-first same-domain crawler built on httpx."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlparse, urlunparse

import httpx
from bs4 import BeautifulSoup

from src.api.schemas import PageFetchResult

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = {"http", "https"}

_ASSET_EXTENSIONS = (
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico",
    ".css", ".js", ".zip", ".gz", ".mp3", ".mp4", ".woff", ".woff2",
)

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(frozen=True)
class CrawlOptions:
    """Limits applied to a single crawl."""

    max_pages: int = 20
    max_depth: int = 2
    timeout: float = 10.0
    user_agent: str = "SiteAuditBot/1.0"


def normalize_url(url: str) -> str | None:
    """Return a canonical absolute http(s) URL, or ``None`` if *url* is unusable.

    Lower-cases scheme and host, drops the fragment and strips the trailing
    slash from every path except the root.
    """
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in _HTTP_SCHEMES or not hostname:
        return None

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/") or "/"

    return urlunparse((scheme, parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def resolve_href(href: str, base_url: str) -> str | None:
    """Resolve an anchor href against *base_url*; ``None`` for links to discard."""
    href = href.strip()
    if not href or href.startswith("#"):
        return None
    try:
        absolute = urljoin(base_url, href)
    except ValueError:
        return None
    return normalize_url(absolute)


def extract_links(markup: str, base_url: str, domain: str) -> tuple[list[str], list[str]]:
    """Split the page's anchors into ordered, duplicate-free (internal, external) lists."""
    soup = BeautifulSoup(markup, "html.parser")
    internal: list[str] = []
    external: list[str] = []
    seen: set[str] = set()

    for anchor in soup.find_all("a", href=True):
        url = resolve_href(anchor["href"], base_url)
        if url is None or url in seen:
            continue
        seen.add(url)
        if urlparse(url).hostname == domain:
            internal.append(url)
        else:
            external.append(url)

    return internal, external


def _is_asset(url: str) -> bool:
    return urlparse(url).path.lower().endswith(_ASSET_EXTENSIONS)


@dataclass
class CrawlSession:
    """State for one crawl: the fixed domain, the seen-set and the BFS queue."""

    seed_url: str
    domain: str
    options: CrawlOptions
    seen: set[str] = field(default_factory=set)
    queue: deque[tuple[str, int]] = field(default_factory=deque)
    results: list[PageFetchResult] = field(default_factory=list)

    @classmethod
    def start(cls, seed_url: str, options: CrawlOptions) -> CrawlSession | None:
        normalized = normalize_url(seed_url)
        if normalized is None:
            return None
        session = cls(
            seed_url=normalized,
            domain=urlparse(normalized).hostname or "",
            options=options,
        )
        session.enqueue(normalized, 0)
        return session

    def enqueue(self, url: str, depth: int) -> bool:
        """Queue *url* unless it was already seen. Returns whether it was queued."""
        if url in self.seen:
            return False
        self.seen.add(url)
        self.queue.append((url, depth))
        return True

    @property
    def finished(self) -> bool:
        return not self.queue or len(self.results) >= self.options.max_pages


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    depth: int,
    domain: str,
) -> PageFetchResult:
    """GET a single page. Failures are returned as data, never raised."""
    try:
        response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("page fetch failed", extra={"url": url, "error": repr(exc)})
        return PageFetchResult(
            url=url,
            depth=depth,
            fetch_error=str(exc) or type(exc).__name__,
        )

    content_type = response.headers.get("content-type", "").lower()
    if not any(t in content_type for t in _HTML_CONTENT_TYPES):
        logger.debug("skipping non-html response", extra={"url": url, "content_type": content_type})
        return PageFetchResult(
            url=url,
            status_code=response.status_code,
            depth=depth,
            fetch_error=f"non-HTML content type: {content_type or 'unknown'}",
        )

    try:
        markup = response.text
    except (UnicodeDecodeError, LookupError) as exc:
        logger.warning("page body could not be decoded", extra={"url": url})
        return PageFetchResult(
            url=url,
            status_code=response.status_code,
            depth=depth,
            fetch_error=f"unreadable body: {exc}",
        )

    internal: list[str] = []
    external: list[str] = []
    if 200 <= response.status_code < 400:
        internal, external = extract_links(markup, str(response.url), domain)

    return PageFetchResult(
        url=url,
        raw_markup=markup,
        status_code=response.status_code,
        depth=depth,
        internal_links=internal,
        external_links=external,
    )


async def crawl(
    seed_url: str,
    options: CrawlOptions | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[PageFetchResult]:
    """Crawl breadth-first from *seed_url* and return results in visitation order.

    Pages are fetched one at a time. Internal links are followed only from
    pages shallower than ``options.max_depth``; a malformed seed yields ``[]``.
    """
    options = options or CrawlOptions()
    session = CrawlSession.start(seed_url, options)
    if session is None:
        logger.warning("invalid seed url", extra={"url": seed_url})
        return []

    logger.info(
        "crawl started",
        extra={
            "seed_url": session.seed_url,
            "domain": session.domain,
            "max_pages": options.max_pages,
            "max_depth": options.max_depth,
        },
    )

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            headers={"User-Agent": options.user_agent, "Accept": "text/html"},
            timeout=options.timeout,
            follow_redirects=True,
        )

    try:
        while not session.finished:
            url, depth = session.queue.popleft()
            logger.debug("crawling", extra={"url": url, "depth": depth})
            result = await fetch_page(client, url, depth, session.domain)
            session.results.append(result)

            if depth < options.max_depth:
                for link in result.internal_links:
                    if not _is_asset(link):
                        session.enqueue(link, depth + 1)
    finally:
        if owns_client:
            await client.aclose()

    logger.info(
        "crawl completed",
        extra={
            "seed_url": session.seed_url,
            "pages": len(session.results),
            "failed": sum(1 for r in session.results if r.fetch_error),
        },
    )
    return session.results
