"""Prompt template for the narrative audit report."""

from datetime import date

from src.api.schemas import IssuesSummary, Scores

REPORT_PROMPT = """\
You are an expert web audit consultant. Generate a comprehensive Markdown audit \
report for {url} based on the following analysis data.

**Overall Score**: {overall}/100
**Scores Breakdown**:
- SEO: {seo}
- Performance: {performance}
- Accessibility: {accessibility}
- Content: {content}
- UX/Design: {ux_design}

**Issues Summary**:
- Critical: {critical}
- Major: {major}
- Minor: {minor}

**Issues by Category**:
{by_category}

The report should include:
1. **Executive Summary**: Interpret the overall health and critical issues.
2. **Detailed Analysis**: Strengths and weaknesses in SEO, Performance, \
Accessibility, Content and UX.
3. **Action Plan**: Prioritized list of fixes, critical issues first.

Requirements:
- Professional, actionable, formatted in Markdown
- Use ## for major sections
- Current date: {date}
- Language: English
"""


def format_report_prompt(url: str, scores: Scores, summary: IssuesSummary) -> str:
    by_category = "\n".join(
        f"- {category.value}: {count}" for category, count in summary.by_category.items()
    )
    return REPORT_PROMPT.format(
        url=url,
        overall=scores.overall,
        seo=scores.seo,
        performance=scores.performance,
        accessibility=scores.accessibility,
        content=scores.content,
        ux_design=scores.ux_design,
        critical=summary.critical,
        major=summary.major,
        minor=summary.minor,
        by_category=by_category,
        date=date.today().isoformat(),
    )
