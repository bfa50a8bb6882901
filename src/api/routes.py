"""POST /audits, GET /audits, GET /audits/{id}, GET /audits/{id}/report handlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from src.api.schemas import Audit, AuditRequest, ReportResponse
from src.api.service import get_audit, list_audits, start_background_audit, stream_audit
from src.audit.crawler import normalize_url
from src.audit.engine import AuditEngine
from src.audit.presets import resolve_limits
from src.auth.dependencies import require_api_key
from src.config import Settings
from src.store.redis import AuditStore

router = APIRouter(dependencies=[Depends(require_api_key)])


def _get_engine(request: Request) -> AuditEngine:
    return request.app.state.engine


def _get_store(request: Request) -> AuditStore:
    return request.app.state.store


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.post("/audits", status_code=201)
async def create_audit(
    body: AuditRequest,
    engine: AuditEngine = Depends(_get_engine),
    store: AuditStore = Depends(_get_store),
    settings: Settings = Depends(_get_settings),
):
    url = normalize_url(body.url)
    if url is None:
        raise HTTPException(status_code=422, detail="url must be an absolute http(s) URL")

    max_pages, max_depth = resolve_limits(
        body.preset, body.max_pages, body.max_depth, default_preset=settings.crawl_preset,
    )

    if body.mode == "background":
        audit = await start_background_audit(engine, store, url, max_pages, max_depth)
        if audit is None:
            raise HTTPException(status_code=503, detail="Audit store unavailable")
        return audit

    return EventSourceResponse(stream_audit(engine, store, url, max_pages, max_depth))


@router.get("/audits", response_model=list[Audit])
async def get_audits(store: AuditStore = Depends(_get_store)):
    return await list_audits(store)


@router.get("/audits/{audit_id}", response_model=Audit)
async def get_audit_detail(audit_id: str, store: AuditStore = Depends(_get_store)):
    audit = await get_audit(store, audit_id)
    if audit is None:
        raise HTTPException(status_code=404, detail="Audit not found")
    return audit


@router.get("/audits/{audit_id}/report", response_model=ReportResponse)
async def get_audit_report(audit_id: str, store: AuditStore = Depends(_get_store)):
    audit = await get_audit(store, audit_id)
    if audit is None:
        raise HTTPException(status_code=404, detail="Audit not found")
    return ReportResponse(markdown=audit.report_markdown or "")
