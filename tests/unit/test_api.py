"""Tests for the FastAPI surface over in-memory backends."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from paydesk.api.app import create_app
from paydesk.api.routes import admin
from paydesk.core.config import AppSettings
from tests.fakes import payslip_page


@pytest.fixture
def client(pipeline):
    with TestClient(create_app(pipeline=pipeline, settings=AppSettings())) as c:
        yield c


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/ready").json()["status"] == "healthy"


def test_ingest_list_and_dispatch(client, transport):
    resp = client.post("/payslips/ingest", json={
        "source_label": "december.pdf",
        "pages": ["표지", payslip_page(code="1001"), payslip_page(code="1002", name="이영희")],
    })
    assert resp.status_code == 200
    assert resp.json()["created"] == 2
    assert resp.json()["missing_address"] == ["1001", "1002"]

    resp = client.post(
        "/admin/employees/import",
        content="employeeCode,email\n1001,minsu@example.com\n".encode("utf-8"),
        headers={"Content-Type": "text/csv"},
    )
    assert resp.json()["updated"] == 1

    records = [o["record"] for o in client.get("/payslips", params={"period": "2024-12"}).json()]
    assert len(records) == 2

    resp = client.post("/payslips/dispatch", json={"record_ids": [r["record_id"] for r in records]})
    body = resp.json()
    assert body["sent"] == 1
    assert body["failed"] == 0
    assert len(body["errors"]) == 1
    assert len(transport.sent) == 1

    sent_id = next(r["record_id"] for r in records if r["record_id"] not in {e["key"] for e in body["errors"]})
    log = client.get(f"/payslips/{sent_id}/dispatch-log").json()
    assert [e["status"] for e in log] == ["sent"]


def test_preview_sample(client):
    body = client.get("/payslips/preview-template").json()
    assert body["subject"] == "[2024-12] 급여명세서 안내"
    assert "홍길동" in body["html"]


def test_preview_unknown_record_is_404(client):
    assert client.get("/payslips/preview-template/missing").status_code == 404


def test_listing_carries_latest_dispatch_and_recent_log(client, pipeline):
    client.post("/payslips/ingest", json={
        "source_label": "two months.pdf",
        "pages": [payslip_page(code="1001", month=11), payslip_page(code="1001", month=12)],
    })
    pipeline.import_registry("employeeCode,email\n1001,minsu@example.com\n")

    overviews = client.get("/payslips").json()
    assert [o["record"]["period"] for o in overviews] == ["2024-11", "2024-12"]
    assert all(o["latest_dispatch"] is None for o in overviews)
    assert overviews[0]["employee"]["email"] == "minsu@example.com"

    december = overviews[1]["record"]["record_id"]
    client.post("/payslips/dispatch", json={"record_ids": [december]})

    latest = client.get(f"/payslips/{december}/dispatch-log/latest").json()
    assert latest["status"] == "sent"
    assert client.get(f"/payslips/{overviews[0]['record']['record_id']}/dispatch-log/latest").json() is None

    recent = client.get("/payslips/dispatch-log", params={"limit": 10}).json()
    assert [e["record_id"] for e in recent] == [december]
    assert client.get("/payslips").json()[1]["latest_dispatch"]["status"] == "sent"


def test_registry_import_runs_off_the_event_loop(client, monkeypatch):
    calls = []
    real = admin.run_in_threadpool

    async def recording(func, *args, **kwargs):
        calls.append(func.__name__)
        return await real(func, *args, **kwargs)

    monkeypatch.setattr(admin, "run_in_threadpool", recording)
    resp = client.post(
        "/admin/employees/import",
        content="사원코드,사원명\n1001,김민수\n".encode("utf-8"),
        headers={"Content-Type": "text/csv"},
    )
    assert resp.json()["created"] == 1
    assert calls == ["import_registry"]
