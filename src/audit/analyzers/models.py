"""Data models shared by the page analyzers."""

from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

from src.api.schemas import (
    AccessibilityData,
    CategoryData,
    Category,
    ContentData,
    DesignUxData,
    Issue,
    PerformanceData,
    SeoData,
    Severity,
)

_INVISIBLE_TAGS = {"script", "style", "noscript", "template"}


@dataclass
class AnalyzerResult:
    """Issues and evidence produced by one analyzer for one page."""

    data: CategoryData
    issues: list[Issue] = field(default_factory=list)


@dataclass
class PageAnalysis:
    """Merged output of every analyzer that ran on a page."""

    issues: list[Issue] = field(default_factory=list)
    seo_data: SeoData | None = None
    performance_data: PerformanceData | None = None
    accessibility_data: AccessibilityData | None = None
    content_data: ContentData | None = None
    design_ux_data: DesignUxData | None = None


def make_issue(
    category: Category,
    code: str,
    severity: Severity,
    message: str,
    page_url: str,
) -> Issue:
    """Build an issue without an id; ids are assigned once the page is known."""
    return Issue(
        category=category,
        code=code,
        severity=severity,
        message=message,
        page_url=page_url,
    )


def parse_markup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def visible_text(soup: BeautifulSoup) -> str:
    """Body text with script/style content and comments removed."""
    root = soup.body or soup
    chunks = [
        s.strip()
        for s in root.find_all(string=True)
        if not isinstance(s, PreformattedString)
        and s.parent is not None
        and s.parent.name not in _INVISIBLE_TAGS
    ]
    return " ".join(c for c in chunks if c)
