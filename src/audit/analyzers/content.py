"""Content and structure analyzer — page type and internal link liveness."""

from __future__ import annotations

import logging

import httpx

from src.api.schemas import Category, ContentData, PageFetchResult, Severity

from .models import AnalyzerResult, make_issue, parse_markup

logger = logging.getLogger(__name__)

# Checked in order; first match wins.
_PAGE_TYPES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("contact", ("contact",)),
    ("about", ("about",)),
    ("menu", ("menu", "services")),
    ("home", ("home",)),
)

# Only pages this shallow get their links probed.
PROBE_MAX_DEPTH = 1


def classify_page_type(url: str, title: str, heading: str) -> str:
    combined = f"{url} {title} {heading}".lower()
    for page_type, keywords in _PAGE_TYPES:
        if any(keyword in combined for keyword in keywords):
            return page_type
    return "generic"


async def probe_links(
    links: list[str],
    timeout: float = 5.0,
    max_redirects: int = 2,
    user_agent: str = "SiteAuditBot/1.0",
) -> list[str]:
    """HEAD each link and return the ones that error or answer with status >= 400."""
    broken: list[str] = []
    async with httpx.AsyncClient(
        headers={"User-Agent": user_agent},
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
    ) as client:
        for link in links:
            try:
                response = await client.head(link)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.debug("link probe failed", extra={"url": link, "error": repr(exc)})
                broken.append(link)
                continue
            if response.status_code >= 400:
                broken.append(link)
    return broken


async def analyze_content(
    page: PageFetchResult,
    inbound_links: int = 0,
    probe_limit: int = 5,
    probe_timeout: float = 5.0,
    probe_max_redirects: int = 2,
    user_agent: str = "SiteAuditBot/1.0",
) -> AnalyzerResult:
    """Classify the page and probe a bounded sample of its internal links."""
    soup = parse_markup(page.raw_markup)
    title_tag = soup.find("title")
    h1_tag = soup.find("h1")
    page_type = classify_page_type(
        page.url,
        title_tag.get_text(strip=True) if title_tag else "",
        h1_tag.get_text(" ", strip=True) if h1_tag else "",
    )

    issues = []
    broken_links: list[str] = []
    sample = page.internal_links[:probe_limit]
    if page.depth <= PROBE_MAX_DEPTH and sample:
        broken_links = await probe_links(
            sample,
            timeout=probe_timeout,
            max_redirects=probe_max_redirects,
            user_agent=user_agent,
        )
        if broken_links:
            issues.append(make_issue(
                Category.CONTENT, "BROKEN_INTERNAL_LINK", Severity.MAJOR,
                f"{len(broken_links)} internal links appear broken", page.url,
            ))

    data = ContentData(
        page_type=page_type,
        internal_link_count=len(page.internal_links),
        external_link_count=len(page.external_links),
        broken_links=broken_links,
        inbound_links=inbound_links,
        outbound_links=len(page.internal_links),
    )
    return AnalyzerResult(data=data, issues=issues)
