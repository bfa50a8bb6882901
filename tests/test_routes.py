"""Audit route tests — store and engine are mocked, the router is real."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.routes import router
from src.api.schemas import Audit
from src.audit.status import AuditStatus
from src.config import Settings, get_settings

API_KEY = "test-secret-key"
HEADERS = {"X-API-Key": API_KEY}
CREATED = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _audit(audit_id: str = "abc123", **fields) -> Audit:
    values = dict(id=audit_id, url="https://example.com/", created_at=CREATED)
    values.update(fields)
    return Audit(**values)


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock()
    store.get = AsyncMock(return_value=None)
    store.get_all = AsyncMock(return_value=[])
    store.create = AsyncMock(return_value=_audit())
    return store


@pytest.fixture
def client(store: MagicMock) -> TestClient:
    settings = Settings(api_key=API_KEY, crawl_preset="standard")  # type: ignore[call-arg]
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.settings = settings
    app.state.store = store
    app.state.engine = MagicMock()
    return TestClient(app)


# --- POST /audits ---


@patch("src.api.routes.start_background_audit", new_callable=AsyncMock)
def test_create_background_audit(mock_start, client: TestClient):
    mock_start.return_value = _audit()

    resp = client.post("/audits", json={"url": "https://Example.com/#top"}, headers=HEADERS)

    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == "abc123"
    assert body["status"] == "queued"
    assert body["pages"] == []
    _, _, url, max_pages, max_depth = mock_start.call_args.args
    assert url == "https://example.com/"
    assert (max_pages, max_depth) == (20, 2)


@patch("src.api.routes.start_background_audit", new_callable=AsyncMock)
def test_create_audit_preset_and_overrides(mock_start, client: TestClient):
    mock_start.return_value = _audit()

    client.post("/audits", json={"url": "https://example.com", "preset": "deep"}, headers=HEADERS)
    assert mock_start.call_args.args[3:] == (50, 3)

    client.post(
        "/audits",
        json={"url": "https://example.com", "preset": "quick", "max_pages": 8},
        headers=HEADERS,
    )
    assert mock_start.call_args.args[3:] == (8, 1)


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com/", "/relative"])
def test_create_audit_rejects_bad_url(url, client: TestClient):
    resp = client.post("/audits", json={"url": url}, headers=HEADERS)
    assert resp.status_code == 422


@pytest.mark.parametrize(
    "body",
    [
        {"url": "https://example.com", "max_pages": 0},
        {"url": "https://example.com", "max_depth": -1},
        {"url": "https://example.com", "preset": "huge"},
        {"url": "https://example.com", "mode": "later"},
        {},
    ],
)
def test_create_audit_validates_body(body, client: TestClient):
    assert client.post("/audits", json=body, headers=HEADERS).status_code == 422


@patch("src.api.routes.start_background_audit", new_callable=AsyncMock)
def test_create_audit_store_unavailable(mock_start, client: TestClient):
    mock_start.return_value = None
    resp = client.post("/audits", json={"url": "https://example.com"}, headers=HEADERS)
    assert resp.status_code == 503


# --- GET /audits ---


def test_list_audits_newest_first(client: TestClient, store: MagicMock):
    store.get_all.return_value = [
        _audit("old", created_at=CREATED),
        _audit("new", created_at=CREATED + timedelta(hours=2)),
        _audit("mid", created_at=CREATED + timedelta(hours=1)),
    ]
    resp = client.get("/audits", headers=HEADERS)
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == ["new", "mid", "old"]


def test_get_audit(client: TestClient, store: MagicMock):
    store.get.return_value = _audit(status=AuditStatus.COMPLETED, report_markdown="# Report")
    resp = client.get("/audits/abc123", headers=HEADERS)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "completed"
    assert body["issues_summary"]["by_category"]["uxDesign"] == 0
    store.get.assert_awaited_once_with("abc123")


def test_get_audit_not_found(client: TestClient):
    resp = client.get("/audits/missing", headers=HEADERS)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Audit not found"


# --- GET /audits/{id}/report ---


def test_get_report(client: TestClient, store: MagicMock):
    store.get.return_value = _audit(status=AuditStatus.COMPLETED, report_markdown="# Audit Report")
    resp = client.get("/audits/abc123/report", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"markdown": "# Audit Report"}


def test_get_report_pending_is_empty(client: TestClient, store: MagicMock):
    store.get.return_value = _audit(status=AuditStatus.RUNNING)
    resp = client.get("/audits/abc123/report", headers=HEADERS)
    assert resp.json() == {"markdown": ""}


def test_get_report_not_found(client: TestClient):
    assert client.get("/audits/missing/report", headers=HEADERS).status_code == 404
