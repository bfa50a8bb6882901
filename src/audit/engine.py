"""Audit engine — crawl -> analyze -> score -> report pipeline orchestrator."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine

from src.api.schemas import (
    Audit,
    Category,
    Issue,
    PageData,
    PageFetchResult,
    Scores,
    Severity,
)
from src.audit.analyzers import AnalysisConfig, analyze_page, make_issue
from src.audit.crawler import CrawlOptions, crawl
from src.audit.links import build_inbound_counts, orphan_issue
from src.audit.presets import resolve_limits
from src.audit.report import ReportWriter
from src.audit.scoring import DEFAULT_SCORING, ScoringConfig, score_audit, score_page
from src.audit.status import AuditStatus, advance, can_advance
from src.config import Settings
from src.store.redis import AuditStore

logger = logging.getLogger(__name__)

# Type alias for the SSE event callback used across the pipeline.
EventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


async def emit_event(
    on_event: EventCallback | None,
    event: str,
    data: dict[str, Any] | None = None,
) -> None:
    """Emit a pipeline event if a callback is registered."""
    if on_event:
        logger.debug("sse event emitted", extra={"event": event})
        await on_event(event, data or {})


class AuditStoreError(RuntimeError):
    """The store rejected or lost an audit update."""


def _generate_page_id() -> str:
    return uuid.uuid4().hex[:12]


def assign_issue_ids(page_id: str, issues: list[Issue]) -> list[Issue]:
    """Give each issue a page-scoped sequential id."""
    return [issue.model_copy(update={"id": f"{page_id}-{i}"}) for i, issue in enumerate(issues)]


class AuditEngine:
    """Drives a queued audit through crawl, analysis, scoring and reporting."""

    def __init__(
        self,
        settings: Settings,
        store: AuditStore,
        scoring: ScoringConfig = DEFAULT_SCORING,
        report_writer: ReportWriter | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._scoring = scoring
        self._analysis = AnalysisConfig.from_settings(settings)
        self._report_writer = report_writer or ReportWriter(settings)

    async def start_audit(
        self,
        audit_id: str,
        max_pages: int,
        max_depth: int | None = None,
        on_event: EventCallback | None = None,
    ) -> Audit | None:
        """Run the pipeline for a QUEUED audit until it reaches a terminal state.

        Returns the final record, the unchanged record when the audit was not
        QUEUED, or ``None`` when the audit does not exist.
        """
        audit = await self._store.get(audit_id)
        if audit is None:
            logger.warning("audit not found", extra={"audit_id": audit_id})
            return None
        if audit.status is not AuditStatus.QUEUED:
            logger.warning(
                "audit already processed",
                extra={"audit_id": audit_id, "status": audit.status.value},
            )
            return audit

        if max_depth is None:
            _, max_depth = resolve_limits(self._settings.crawl_preset, max_pages, None)

        try:
            audit = await self._transition(audit, AuditStatus.RUNNING)
            await emit_event(on_event, "status", {"audit_id": audit.id, "status": audit.status.value})
            return await self._run(audit, max_pages, max_depth, on_event)
        except Exception:
            logger.exception("audit pipeline failed", extra={"audit_id": audit_id})
            failed = await self._fail(audit)
            await emit_event(on_event, "error", {"audit_id": audit_id, "message": "Audit failed"})
            return failed

    async def _run(
        self,
        audit: Audit,
        max_pages: int,
        max_depth: int,
        on_event: EventCallback | None,
    ) -> Audit:
        logger.info(
            "audit pipeline started",
            extra={
                "audit_id": audit.id,
                "url": audit.url,
                "max_pages": max_pages,
                "max_depth": max_depth,
            },
        )

        # --- Stage 1: Crawl ---
        await emit_event(on_event, "status", {"step": "crawling", "message": f"Crawling {audit.url}..."})
        results = await crawl(
            audit.url,
            CrawlOptions(
                max_pages=max_pages,
                max_depth=max_depth,
                timeout=self._settings.crawl_timeout_seconds,
                user_agent=self._settings.crawl_user_agent,
            ),
        )
        if not results or all(r.fetch_error for r in results):
            logger.warning(
                "crawl produced no usable pages",
                extra={"audit_id": audit.id, "pages": len(results)},
            )
            failed = await self._fail(audit)
            await emit_event(on_event, "error", {"audit_id": audit.id, "message": "No pages could be crawled"})
            return failed

        # --- Stage 2: Link graph ---
        inbound = build_inbound_counts(results)

        # --- Stage 3: Analyze and score each page ---
        await emit_event(
            on_event, "status", {"step": "analyzing", "message": f"Analyzing {len(results)} pages..."},
        )
        pages: list[PageData] = []
        for result in results:
            page = await self._build_page(result, inbound.get(result.url, 0))
            pages.append(page)
            await emit_event(on_event, "page", {
                "url": page.url,
                "depth": page.depth,
                "overall": page.scores.overall,
                "issues": len(page.issues),
            })

        # --- Stage 4: Audit scores ---
        scores, summary = score_audit(pages, self._scoring)
        logger.info(
            "audit scored",
            extra={
                "audit_id": audit.id,
                "pages": len(pages),
                "overall": scores.overall,
                "critical": summary.critical,
                "major": summary.major,
                "minor": summary.minor,
            },
        )

        # --- Stage 5: Report ---
        await emit_event(on_event, "status", {"step": "writing", "message": "Generating report..."})
        report = await self._report_writer.write(audit.url, scores, summary)

        # --- Stage 6: Persist ---
        completed = await self._transition(
            audit,
            AuditStatus.COMPLETED,
            completed_at=datetime.now(timezone.utc),
            scores=scores,
            issues_summary=summary,
            pages=pages,
            report_markdown=report,
        )
        logger.info(
            "audit pipeline completed",
            extra={"audit_id": audit.id, "pages": len(pages), "overall": scores.overall},
        )

        await emit_event(on_event, "result", {
            "audit_id": completed.id,
            "status": completed.status.value,
            "scores": completed.scores.model_dump(),
            "issues_summary": completed.issues_summary.model_dump(mode="json"),
        })
        await emit_event(on_event, "done", {})
        return completed

    async def _build_page(self, result: PageFetchResult, inbound_links: int) -> PageData:
        page_id = _generate_page_id()

        if result.fetch_error:
            unreachable = make_issue(
                Category.CONTENT,
                "PAGE_UNREACHABLE",
                Severity.CRITICAL,
                f"Page could not be retrieved: {result.fetch_error}",
                result.url,
            )
            return PageData(
                id=page_id,
                url=result.url,
                status_code=result.status_code,
                depth=result.depth,
                issues=assign_issue_ids(page_id, [unreachable]),
                scores=Scores(),
            )

        analysis = await analyze_page(result, inbound_links=inbound_links, config=self._analysis)
        issues = list(analysis.issues)
        orphan = orphan_issue(result, inbound_links)
        if orphan is not None:
            issues.append(orphan)

        page = PageData(
            id=page_id,
            url=result.url,
            status_code=result.status_code,
            depth=result.depth,
            issues=assign_issue_ids(page_id, issues),
            seo_data=analysis.seo_data,
            performance_data=analysis.performance_data,
            accessibility_data=analysis.accessibility_data,
            content_data=analysis.content_data,
            design_ux_data=analysis.design_ux_data,
        )
        return page.model_copy(update={"scores": score_page(page, self._scoring)})

    async def _transition(self, audit: Audit, target: AuditStatus, **fields: Any) -> Audit:
        status = advance(audit.status, target)
        updated = await self._store.update(audit.id, status=status, **fields)
        if updated is None:
            raise AuditStoreError(f"audit {audit.id} could not be updated to {target.value}")
        logger.info("audit status changed", extra={"audit_id": audit.id, "status": status.value})
        return updated

    async def _fail(self, audit: Audit) -> Audit:
        """Mark a RUNNING audit FAILED; only the status and timestamp are persisted.

        An audit whose QUEUED -> RUNNING write was rejected by the store is left
        QUEUED, so a later ``start_audit`` call can pick it up again.
        """
        if audit.status is AuditStatus.QUEUED:
            logger.error(
                "audit could not be started, left queued",
                extra={"audit_id": audit.id, "status": audit.status.value},
            )
            return audit
        if not can_advance(audit.status, AuditStatus.FAILED):
            logger.error(
                "audit cannot be marked failed",
                extra={"audit_id": audit.id, "status": audit.status.value},
            )
            return audit
        completed_at = datetime.now(timezone.utc)
        try:
            return await self._transition(audit, AuditStatus.FAILED, completed_at=completed_at)
        except AuditStoreError:
            logger.exception("failed to persist audit failure", extra={"audit_id": audit.id})
            return audit.model_copy(update={"status": AuditStatus.FAILED, "completed_at": completed_at})
