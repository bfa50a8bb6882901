"""Page and audit scoring."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass

from src.api.schemas import Category, Issue, IssuesSummary, PageData, Scores, Severity


@dataclass(frozen=True)
class ScoringConfig:
    """Penalty constants for the scoring model.

    The extra penalties are empirical; they are kept here so deployments can
    tune them without touching the formulas.
    """

    critical_penalty: float = 25
    major_penalty: float = 15
    minor_penalty: float = 7

    seo_base: float = 100
    accessibility_base: float = 100
    ux_design_base: float = 100
    content_base: float = 95
    performance_base: float = 80

    performance_unconfigured_placeholder: float = 70
    performance_failed_placeholder: float = 50

    thin_content_words: int = 120
    thin_content_penalty: float = 5
    unlabeled_inputs_penalty: float = 5
    no_internal_links_penalty: float = 10
    broken_links_penalty: float = 5
    orphan_penalty: float = 10
    missing_navigation_penalty: float = 10

    def severity_penalty(self, severity: Severity) -> float:
        return {
            Severity.CRITICAL: self.critical_penalty,
            Severity.MAJOR: self.major_penalty,
            Severity.MINOR: self.minor_penalty,
        }[severity]


DEFAULT_SCORING = ScoringConfig()


def clamp_score(score: float) -> int:
    """Round half up and clamp to [0, 100]."""
    return max(0, min(100, math.floor(score + 0.5)))


def _issue_penalty(issues: list[Issue], category: Category, config: ScoringConfig) -> float:
    return sum(config.severity_penalty(i.severity) for i in issues if i.category == category)


def _score_category(
    base: float,
    issues: list[Issue],
    category: Category,
    config: ScoringConfig,
    extra_penalty: float = 0,
) -> int:
    return clamp_score(base - _issue_penalty(issues, category, config) - extra_penalty)


def _score_performance(page: PageData, config: ScoringConfig) -> int:
    data = page.performance_data
    if data is None:
        return _score_category(config.performance_base, page.issues, Category.PERFORMANCE, config)
    if data.source == "pagespeed" and data.performance_score is not None:
        # Blend the external score with half-weight issue penalties.
        penalty = _issue_penalty(page.issues, Category.PERFORMANCE, config) / 2
        return clamp_score(data.performance_score - penalty)
    if data.source == "failed":
        return clamp_score(config.performance_failed_placeholder)
    return clamp_score(config.performance_unconfigured_placeholder)


def score_page(page: PageData, config: ScoringConfig = DEFAULT_SCORING) -> Scores:
    """Compute the five category scores and the overall mean for one page."""
    issues = page.issues
    seo_data = page.seo_data
    content_data = page.content_data
    design_data = page.design_ux_data
    a11y_data = page.accessibility_data

    seo_penalty = 0.0
    if seo_data and 0 < seo_data.word_count < config.thin_content_words:
        seo_penalty = config.thin_content_penalty
    seo = _score_category(config.seo_base, issues, Category.SEO, config, seo_penalty)

    a11y_penalty = config.unlabeled_inputs_penalty if a11y_data and a11y_data.unlabeled_inputs else 0
    accessibility = _score_category(
        config.accessibility_base, issues, Category.ACCESSIBILITY, config, a11y_penalty,
    )

    content_penalty = 0.0
    if content_data:
        if content_data.internal_link_count == 0:
            content_penalty += config.no_internal_links_penalty
        if content_data.broken_links:
            content_penalty += config.broken_links_penalty
        if content_data.inbound_links == 0 and page.depth > 0:
            content_penalty += config.orphan_penalty
    content = _score_category(config.content_base, issues, Category.CONTENT, config, content_penalty)

    ux_penalty = config.missing_navigation_penalty if design_data and not design_data.has_navigation else 0
    ux_design = _score_category(config.ux_design_base, issues, Category.UX_DESIGN, config, ux_penalty)

    performance = _score_performance(page, config)

    overall = clamp_score((seo + accessibility + content + ux_design + performance) / 5)
    return Scores(
        overall=overall,
        seo=seo,
        performance=performance,
        accessibility=accessibility,
        content=content,
        ux_design=ux_design,
    )


def summarize_issues(pages: list[PageData]) -> IssuesSummary:
    """Tally every page's issues by severity and by category."""
    issues = [issue for page in pages for issue in page.issues]
    by_severity = Counter(i.severity for i in issues)
    by_category = Counter(i.category for i in issues)
    return IssuesSummary(
        critical=by_severity[Severity.CRITICAL],
        major=by_severity[Severity.MAJOR],
        minor=by_severity[Severity.MINOR],
        by_category={category: by_category[category] for category in Category},
    )


def score_audit(
    pages: list[PageData],
    config: ScoringConfig = DEFAULT_SCORING,
) -> tuple[Scores, IssuesSummary]:
    """Depth-weighted mean of page scores (weight ``1 / (1 + depth)``) plus the issue summary."""
    summary = summarize_issues(pages)
    if not pages:
        return Scores(), summary

    fields = list(Scores.model_fields)
    totals = dict.fromkeys(fields, 0.0)
    total_weight = 0.0
    for page in pages:
        weight = 1 / (1 + page.depth)
        total_weight += weight
        for name in fields:
            totals[name] += getattr(page.scores, name) * weight

    scores = Scores(**{name: clamp_score(totals[name] / total_weight) for name in fields})
    return scores, summary
