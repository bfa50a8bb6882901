"""Inbound link counting and orphan detection."""

from src.api.schemas import Category, PageFetchResult, Severity
from src.audit.links import build_inbound_counts, orphan_issue


def _result(url: str, depth: int, *links: str) -> PageFetchResult:
    return PageFetchResult(url=url, status_code=200, depth=depth, internal_links=list(links))


def test_inbound_counts_distinct_linking_pages():
    results = [
        _result("https://example.com/", 0, "https://example.com/a", "https://example.com/a"),
        _result("https://example.com/a", 1, "https://example.com/", "https://example.com/a"),
        _result("https://example.com/b", 1, "https://example.com/a", "https://example.com/uncrawled"),
    ]
    counts = build_inbound_counts(results)
    assert counts == {
        "https://example.com/": 1,
        "https://example.com/a": 2,
        "https://example.com/b": 0,
    }


def test_orphan_detected_for_deep_unlinked_page():
    page = _result("https://example.com/hidden", 2)
    issue = orphan_issue(page, 0)
    assert issue is not None
    assert issue.code == "ORPHAN_PAGE"
    assert issue.category is Category.CONTENT
    assert issue.severity is Severity.MAJOR
    assert issue.message == "No internal links point to this page"
    assert issue.page_url == "https://example.com/hidden"


def test_seed_page_never_orphaned():
    assert orphan_issue(_result("https://example.com/", 0), 0) is None


def test_linked_page_not_orphaned():
    assert orphan_issue(_result("https://example.com/a", 1), 1) is None
