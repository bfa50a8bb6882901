"""Background task runner for audits."""

from __future__ import annotations

import logging

from src.audit.engine import AuditEngine

logger = logging.getLogger(__name__)


async def run_background_audit(
    engine: AuditEngine,
    audit_id: str,
    max_pages: int,
    max_depth: int | None = None,
) -> None:
    """Run an audit to a terminal state; the result is persisted by the engine."""
    try:
        audit = await engine.start_audit(audit_id, max_pages=max_pages, max_depth=max_depth)
        logger.info(
            "background audit finished",
            extra={
                "audit_id": audit_id,
                "status": audit.status.value if audit else None,
            },
        )
    except Exception:
        logger.exception("background audit failed for audit_id=%r", audit_id)
