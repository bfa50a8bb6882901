"""Service layer — orchestrates audit operations for the API routes."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

from src.api.schemas import Audit
from src.audit.engine import AuditEngine
from src.audit.tasks import run_background_audit
from src.store.redis import AuditStore

logger = logging.getLogger(__name__)

# Strong references so fire-and-forget tasks are not garbage collected mid-run.
_background_tasks: set[asyncio.Task] = set()


def _spawn(coro) -> asyncio.Task:
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def start_background_audit(
    engine: AuditEngine,
    store: AuditStore,
    url: str,
    max_pages: int,
    max_depth: int,
) -> Audit | None:
    """Create a QUEUED audit, launch the pipeline without awaiting it, and return the record."""
    audit = await store.create(url)
    if audit is None:
        return None
    logger.info(
        "background audit started",
        extra={
            "audit_id": audit.id,
            "url": url,
            "max_pages": max_pages,
            "max_depth": max_depth,
        },
    )
    _spawn(run_background_audit(engine, audit.id, max_pages=max_pages, max_depth=max_depth))
    return audit


async def stream_audit(
    engine: AuditEngine,
    store: AuditStore,
    url: str,
    max_pages: int,
    max_depth: int,
) -> AsyncGenerator[dict[str, str], None]:
    """Yield SSE-formatted events from the audit pipeline.

    If the client disconnects, the audit task continues in the background
    so the result still gets persisted.
    """
    audit = await store.create(url)
    if audit is None:
        yield {"event": "error", "data": json.dumps({"message": "Audit could not be created"})}
        return

    logger.info(
        "streaming audit started",
        extra={"audit_id": audit.id, "url": url, "max_pages": max_pages, "max_depth": max_depth},
    )
    yield {"event": "started", "data": json.dumps({"audit_id": audit.id, "status": audit.status.value})}

    queue: asyncio.Queue[tuple[str, dict[str, Any]] | None] = asyncio.Queue()

    async def on_event(event: str, data: dict[str, Any]) -> None:
        await queue.put((event, data))

    async def run_and_signal_done() -> None:
        try:
            await engine.start_audit(audit.id, max_pages=max_pages, max_depth=max_depth, on_event=on_event)
        except Exception:
            logger.exception("streaming audit failed", extra={"audit_id": audit.id})
            await queue.put(("error", {"message": "Audit failed"}))
        finally:
            await queue.put(None)  # sentinel

    _spawn(run_and_signal_done())

    while True:
        item = await queue.get()
        if item is None:
            break
        event, data = item
        yield {"event": event, "data": json.dumps(data)}


async def list_audits(store: AuditStore) -> list[Audit]:
    """All audits, newest first."""
    audits = await store.get_all()
    return sorted(audits, key=lambda a: a.created_at, reverse=True)


async def get_audit(store: AuditStore, audit_id: str) -> Audit | None:
    return await store.get(audit_id)
