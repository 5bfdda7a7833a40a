"""Payslip ingestion, dispatch and template preview endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from paydesk.models.outputs import RenderedReport
from paydesk.models.pipeline import DispatchLogEntry, DispatchSummary, IngestSummary, PayslipOverview

router = APIRouter(tags=["payslips"])


class IngestRequest(BaseModel):
    """Page texts of one payslip document, in page order."""

    source_label: str
    pages: list[str] = Field(default_factory=list)


class DispatchRequest(BaseModel):
    record_ids: list[str]


@router.post("/ingest")
def ingest(body: IngestRequest, request: Request) -> IngestSummary:
    return request.app.state.pipeline.ingest(body.pages, body.source_label)


@router.get("")
def list_records(request: Request, period: str | None = None) -> list[PayslipOverview]:
    return request.app.state.pipeline.list_records(period)


@router.post("/dispatch")
def dispatch(body: DispatchRequest, request: Request) -> DispatchSummary:
    return request.app.state.pipeline.dispatch(body.record_ids)


@router.get("/preview-template")
def preview_sample(request: Request) -> RenderedReport:
    return request.app.state.pipeline.preview_template()


@router.get("/preview-template/{record_id}")
def preview_record(record_id: str, request: Request) -> RenderedReport:
    return request.app.state.pipeline.preview_template(record_id)


@router.get("/{record_id}/dispatch-log")
def dispatch_log(record_id: str, request: Request) -> list[DispatchLogEntry]:
    return request.app.state.pipeline.dispatch_history(record_id)


@router.get("/{record_id}/dispatch-log/latest")
def latest_dispatch(record_id: str, request: Request) -> DispatchLogEntry | None:
    return request.app.state.pipeline.latest_dispatch(record_id)


@router.get("/dispatch-log")
def recent_dispatches(request: Request, limit: int = Query(100, ge=1, le=1000)) -> list[DispatchLogEntry]:
    return request.app.state.pipeline.recent_dispatches(limit)
