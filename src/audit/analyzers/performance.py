"""PageSpeed Insights performance analyzer (seed page only)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.api.schemas import Category, PerformanceData, Severity
from src.audit.scoring import clamp_score

from .models import AnalyzerResult, make_issue

logger = logging.getLogger(__name__)

PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

LCP_CRITICAL_MS = 4000
LCP_MAJOR_MS = 2500
CLS_MAJOR = 0.25
CLS_MINOR = 0.1
TBT_MAJOR_MS = 600
POOR_SCORE = 50


def _section(parent: Any, key: str) -> dict[str, Any]:
    """``parent[key]`` as a dict; missing sections are empty, malformed ones raise ValueError."""
    if not isinstance(parent, dict):
        raise ValueError(f"PageSpeed response has unexpected shape near {key!r}")
    value = parent.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"PageSpeed response field {key!r} is not an object")
    return value


def _numeric(audits: dict[str, Any], key: str) -> float | None:
    value = _section(audits, key).get("numericValue")
    if isinstance(value, bool):
        return None
    return float(value) if isinstance(value, (int, float)) else None


def parse_lighthouse(payload: Any, strategy: str) -> PerformanceData:
    """Extract the normalized score and core web vitals from a PageSpeed response.

    Raises ValueError when the payload has no usable score or an unexpected shape.
    """
    lighthouse = _section(payload, "lighthouseResult")
    category = _section(_section(lighthouse, "categories"), "performance")
    score = category.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("PageSpeed response has no performance score")

    audits = _section(lighthouse, "audits")
    return PerformanceData(
        source="pagespeed",
        performance_score=clamp_score(score * 100),
        first_contentful_paint_ms=_numeric(audits, "first-contentful-paint"),
        largest_contentful_paint_ms=_numeric(audits, "largest-contentful-paint"),
        total_blocking_time_ms=_numeric(audits, "total-blocking-time"),
        cumulative_layout_shift=_numeric(audits, "cumulative-layout-shift"),
        strategy=strategy,
    )


def _metric_issues(data: PerformanceData, url: str) -> list:
    perf = Category.PERFORMANCE
    issues = []

    lcp = data.largest_contentful_paint_ms
    if lcp is not None and lcp > LCP_CRITICAL_MS:
        issues.append(make_issue(perf, "SLOW_LCP", Severity.CRITICAL, f"LCP is {lcp / 1000:.1f}s", url))
    elif lcp is not None and lcp > LCP_MAJOR_MS:
        issues.append(make_issue(perf, "SLOW_LCP", Severity.MAJOR, f"LCP is {lcp / 1000:.1f}s", url))

    cls = data.cumulative_layout_shift
    if cls is not None and cls > CLS_MAJOR:
        issues.append(make_issue(perf, "HIGH_CLS", Severity.MAJOR, f"Cumulative layout shift is {cls:.2f}", url))
    elif cls is not None and cls > CLS_MINOR:
        issues.append(make_issue(perf, "HIGH_CLS", Severity.MINOR, f"Cumulative layout shift is {cls:.2f}", url))

    tbt = data.total_blocking_time_ms
    if tbt is not None and tbt > TBT_MAJOR_MS:
        issues.append(make_issue(perf, "HIGH_TBT", Severity.MAJOR, f"Total blocking time is {tbt:.0f}ms", url))

    if data.performance_score is not None and data.performance_score < POOR_SCORE:
        issues.append(make_issue(
            perf, "POOR_PERFORMANCE_SCORE", Severity.CRITICAL,
            f"Performance score is {data.performance_score}/100", url,
        ))
    return issues


async def analyze_performance(
    url: str,
    api_key: str = "",
    strategy: str = "mobile",
    timeout: float = 30.0,
) -> AnalyzerResult:
    """Query PageSpeed Insights for *url*; degrade to an absence marker when unavailable."""
    perf = Category.PERFORMANCE
    if not api_key:
        logger.debug("pagespeed api key not configured", extra={"url": url})
        return AnalyzerResult(
            data=PerformanceData(source="unconfigured"),
            issues=[make_issue(
                perf, "PERFORMANCE_DATA_UNAVAILABLE", Severity.MINOR,
                "PageSpeed API key not configured; using placeholder score", url,
            )],
        )

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(
                PAGESPEED_API_URL,
                params={"url": url, "strategy": strategy, "key": api_key},
            )
            response.raise_for_status()
            data = parse_lighthouse(response.json(), strategy)
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("pagespeed request failed", extra={"url": url}, exc_info=True)
        return AnalyzerResult(
            data=PerformanceData(source="failed", error=str(exc) or type(exc).__name__),
            issues=[make_issue(
                perf, "PERFORMANCE_DATA_UNAVAILABLE", Severity.MINOR,
                "Failed to retrieve PageSpeed data", url,
            )],
        )

    logger.info(
        "pagespeed data received",
        extra={"url": url, "performance_score": data.performance_score},
    )
    return AnalyzerResult(data=data, issues=_metric_issues(data, url))
