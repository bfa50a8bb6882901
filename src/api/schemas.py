"""Request/response and audit record Pydantic models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.audit.status import AuditStatus


class Category(str, Enum):
    SEO = "seo"
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    CONTENT = "content"
    UX_DESIGN = "uxDesign"


class Severity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class AuditRequest(BaseModel):
    url: str
    mode: Literal["stream", "background"] = "background"
    preset: Literal["quick", "standard", "deep"] | None = None
    max_pages: int | None = Field(default=None, ge=1, le=500)
    max_depth: int | None = Field(default=None, ge=0, le=10)


class Issue(BaseModel):
    """A single flagged condition on a page."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    category: Category
    code: str
    severity: Severity
    message: str
    page_url: str = ""


class PageFetchResult(BaseModel):
    """Raw crawler output for one visited URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    raw_markup: str = ""
    status_code: int = 0
    depth: int = 0
    internal_links: list[str] = []
    external_links: list[str] = []
    fetch_error: str | None = None


# --- Per-analyzer snapshots (tagged by ``category``) ---


class SeoData(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Literal["seo"] = "seo"
    title: str = ""
    meta_description: str | None = None
    h1_text: str = ""
    h1_count: int = 0
    h2_count: int = 0
    word_count: int = 0
    images_total: int = 0
    images_without_alt: int = 0
    canonical: str | None = None
    robots: str | None = None


class Landmarks(BaseModel):
    model_config = ConfigDict(frozen=True)

    main: bool = False
    nav: bool = False
    header: bool = False
    footer: bool = False


class AccessibilityData(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Literal["accessibility"] = "accessibility"
    has_lang_attribute: bool = False
    landmarks: Landmarks = Landmarks()
    labeled_inputs: int = 0
    unlabeled_inputs: int = 0
    empty_buttons: int = 0


class ContentData(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Literal["content"] = "content"
    page_type: str = "generic"
    internal_link_count: int = 0
    external_link_count: int = 0
    broken_links: list[str] = []
    inbound_links: int = 0
    outbound_links: int = 0


class DesignUxData(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Literal["uxDesign"] = "uxDesign"
    has_navigation: bool = False
    primary_cta_found: bool = False
    primary_cta_above_fold: bool = False
    font_count: int = 0
    color_count: int = 0
    has_viewport_meta: bool = False


class PerformanceData(BaseModel):
    """PageSpeed metrics, or an absence marker when ``source`` is not ``pagespeed``."""

    model_config = ConfigDict(frozen=True)

    category: Literal["performance"] = "performance"
    source: Literal["pagespeed", "unconfigured", "failed"] = "unconfigured"
    performance_score: int | None = None
    first_contentful_paint_ms: float | None = None
    largest_contentful_paint_ms: float | None = None
    total_blocking_time_ms: float | None = None
    cumulative_layout_shift: float | None = None
    strategy: str | None = None
    error: str | None = None


CategoryData = Annotated[
    Union[SeoData, AccessibilityData, ContentData, DesignUxData, PerformanceData],
    Field(discriminator="category"),
]


# --- Scores and audit records ---


class Scores(BaseModel):
    overall: int = 0
    seo: int = 0
    performance: int = 0
    accessibility: int = 0
    content: int = 0
    ux_design: int = 0

    def for_category(self, category: Category) -> int:
        return getattr(self, _SCORE_FIELDS[category])


_SCORE_FIELDS: dict[Category, str] = {
    Category.SEO: "seo",
    Category.PERFORMANCE: "performance",
    Category.ACCESSIBILITY: "accessibility",
    Category.CONTENT: "content",
    Category.UX_DESIGN: "ux_design",
}


def _empty_by_category() -> dict[Category, int]:
    return {category: 0 for category in Category}


class IssuesSummary(BaseModel):
    critical: int = 0
    major: int = 0
    minor: int = 0
    by_category: dict[Category, int] = Field(default_factory=_empty_by_category)


class PageData(BaseModel):
    """An analyzed and scored page."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    status_code: int = 0
    depth: int = 0
    issues: list[Issue] = []
    scores: Scores = Scores()
    seo_data: SeoData | None = None
    performance_data: PerformanceData | None = None
    accessibility_data: AccessibilityData | None = None
    content_data: ContentData | None = None
    design_ux_data: DesignUxData | None = None


class Audit(BaseModel):
    id: str
    url: str
    status: AuditStatus = AuditStatus.QUEUED
    created_at: datetime
    completed_at: datetime | None = None
    scores: Scores = Scores()
    issues_summary: IssuesSummary = IssuesSummary()
    pages: list[PageData] = []
    report_markdown: str | None = None


class ReportResponse(BaseModel):
    markdown: str = ""
