"""Link-graph postprocessing over a finished crawl."""

from __future__ import annotations

from src.api.schemas import Category, Issue, PageFetchResult, Severity
from src.audit.analyzers.models import make_issue


def build_inbound_counts(results: list[PageFetchResult]) -> dict[str, int]:
    """Count, for every crawled URL, how many other crawled pages link to it."""
    counts = {r.url: 0 for r in results}
    for result in results:
        for link in set(result.internal_links):
            if link != result.url and link in counts:
                counts[link] += 1
    return counts


def orphan_issue(result: PageFetchResult, inbound_links: int) -> Issue | None:
    """Flag non-seed pages nothing else links to."""
    if result.depth == 0 or inbound_links > 0:
        return None
    return make_issue(
        Category.CONTENT,
        "ORPHAN_PAGE",
        Severity.MAJOR,
        "No internal links point to this page",
        result.url,
    )
