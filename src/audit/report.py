"""Narrative report generation — LLM via PydanticAI with a templated fallback."""

from __future__ import annotations

import logging

from pydantic_ai import Agent

from src.api.schemas import Category, IssuesSummary, Scores
from src.audit.prompts import format_report_prompt
from src.config import Settings

logger = logging.getLogger(__name__)

_CATEGORY_LABELS: dict[Category, str] = {
    Category.SEO: "SEO",
    Category.PERFORMANCE: "Performance",
    Category.ACCESSIBILITY: "Accessibility",
    Category.CONTENT: "Content",
    Category.UX_DESIGN: "UX/Design",
}

_NEXT_STEPS = (
    "Fix every **critical** issue first; they have the largest impact on the score.",
    "If the SEO score is low, check page titles, meta descriptions and H1 headings.",
    "If the Accessibility score is low, add a `lang` attribute, a `<main>` landmark and form labels.",
    "If the UX/Design score is low, make sure a viewport meta tag, navigation and a clear call-to-action exist.",
    "Re-run the audit after changes to track progress.",
)


def render_template_report(url: str, scores: Scores, summary: IssuesSummary) -> str:
    """Deterministic Markdown report built only from scores and the issue summary."""
    lines = [
        f"# Audit Report for {url}",
        "",
        "## Executive Summary",
        "",
        f"**Overall Score: {scores.overall}/100**",
        "",
        f"We found **{summary.critical} critical**, **{summary.major} major** and "
        f"**{summary.minor} minor** issues.",
        "",
        "## Score Breakdown",
        "",
        "| Category | Score |",
        "| --- | --- |",
    ]
    lines.extend(
        f"| {label} | {scores.for_category(category)} |"
        for category, label in _CATEGORY_LABELS.items()
    )
    lines.extend([
        "",
        "## Issues Summary",
        "",
        "| Severity | Count |",
        "| --- | --- |",
        f"| Critical | {summary.critical} |",
        f"| Major | {summary.major} |",
        f"| Minor | {summary.minor} |",
        "",
        "| Category | Issues |",
        "| --- | --- |",
    ])
    lines.extend(
        f"| {label} | {summary.by_category.get(category, 0)} |"
        for category, label in _CATEGORY_LABELS.items()
    )
    lines.extend(["", "## Next Steps", ""])
    lines.extend(f"- {step}" for step in _NEXT_STEPS)
    return "\n".join(lines) + "\n"


class ReportWriter:
    """Writes the audit narrative with the configured LLM, or falls back to the template."""

    _API_KEY_MAP = {
        "openai": "openai_api_key",
        "anthropic": "anthropic_api_key",
        "google-gla": "gemini_api_key",
        "google": "gemini_api_key",
    }

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._model = f"{settings.llm_provider}:{settings.report_llm}"

    @property
    def configured(self) -> bool:
        attr = self._API_KEY_MAP.get(self._settings.llm_provider)
        return bool(attr and getattr(self._settings, attr, ""))

    async def write(self, url: str, scores: Scores, summary: IssuesSummary) -> str:
        if self.configured:
            try:
                writer = Agent(self._model)
                result = await writer.run(format_report_prompt(url, scores, summary))
                report = (result.output or "").strip()
                if report:
                    logger.info(
                        "report generated",
                        extra={"url": url, "model": self._model, "report_words": len(report.split())},
                    )
                    return report
                logger.warning("report model returned empty output", extra={"url": url, "model": self._model})
            except Exception:
                logger.warning("report generation failed, using template", extra={"url": url}, exc_info=True)
        else:
            logger.debug("report model not configured, using template", extra={"url": url})

        return render_template_report(url, scores, summary)
