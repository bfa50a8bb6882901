"""Page analyzer suite."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.api.schemas import PageFetchResult

from .accessibility import analyze_accessibility
from .content import analyze_content
from .design import analyze_design_ux
from .models import AnalyzerResult, PageAnalysis, make_issue
from .performance import analyze_performance
from .seo import analyze_seo

if TYPE_CHECKING:
    from src.config import Settings

__all__ = [
    "AnalysisConfig",
    "AnalyzerResult",
    "PageAnalysis",
    "analyze_accessibility",
    "analyze_content",
    "analyze_design_ux",
    "analyze_page",
    "analyze_performance",
    "analyze_seo",
    "make_issue",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """Network-facing knobs for the analyzers that make requests."""

    pagespeed_api_key: str = ""
    pagespeed_strategy: str = "mobile"
    pagespeed_timeout: float = 30.0
    probe_limit: int = 5
    probe_timeout: float = 5.0
    probe_max_redirects: int = 2
    user_agent: str = "SiteAuditBot/1.0"

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalysisConfig:
        return cls(
            pagespeed_api_key=settings.pagespeed_api_key,
            pagespeed_strategy=settings.pagespeed_strategy,
            pagespeed_timeout=settings.pagespeed_timeout_seconds,
            probe_limit=settings.link_probe_limit,
            probe_timeout=settings.link_probe_timeout_seconds,
            probe_max_redirects=settings.link_probe_max_redirects,
            user_agent=settings.crawl_user_agent,
        )


async def analyze_page(
    page: PageFetchResult,
    inbound_links: int = 0,
    config: AnalysisConfig | None = None,
) -> PageAnalysis:
    """Run every analyzer against a fetched page and merge their output.

    Performance only runs for the seed page (depth 0).
    """
    config = config or AnalysisConfig()
    html, url = page.raw_markup, page.url

    seo = analyze_seo(html, url)
    accessibility = analyze_accessibility(html, url)
    design = analyze_design_ux(html, url)
    content = await analyze_content(
        page,
        inbound_links=inbound_links,
        probe_limit=config.probe_limit,
        probe_timeout=config.probe_timeout,
        probe_max_redirects=config.probe_max_redirects,
        user_agent=config.user_agent,
    )
    performance = None
    if page.depth == 0:
        performance = await analyze_performance(
            url,
            api_key=config.pagespeed_api_key,
            strategy=config.pagespeed_strategy,
            timeout=config.pagespeed_timeout,
        )

    issues = [
        *seo.issues,
        *(performance.issues if performance else []),
        *accessibility.issues,
        *content.issues,
        *design.issues,
    ]
    logger.debug("page analyzed", extra={"url": url, "issues": len(issues)})

    return PageAnalysis(
        issues=issues,
        seo_data=seo.data,
        performance_data=performance.data if performance else None,
        accessibility_data=accessibility.data,
        content_data=content.data,
        design_ux_data=design.data,
    )
