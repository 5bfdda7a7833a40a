"""Ingestion batch, dispatch log, and summary models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from paydesk.models.employee import Employee
from paydesk.models.payslip import PayslipRecord


class DispatchStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not DispatchStatus.PENDING


class IngestionBatch(BaseModel):
    """Metadata for one ingestion run. Written once, never updated."""

    batch_id: str
    source_label: str
    period: str = ""
    total_pages: int = 0
    parsed_count: int = 0
    created_at: Optional[datetime] = None


class DispatchLogEntry(BaseModel):
    """One send attempt for one payslip record."""

    log_id: str
    record_id: str
    recipient: str
    subject: str
    status: DispatchStatus = DispatchStatus.PENDING
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_at: datetime


class ItemError(BaseModel):
    """Per-item failure reported alongside batch results."""

    key: str  # employee code, "unknown", or record id
    message: str


class IngestOutcome(BaseModel):
    """Result of reconciling a single parsed page."""

    employee_code: str
    created: bool = False
    updated: bool = False
    has_address: bool = False
    error: Optional[str] = None


class IngestSummary(BaseModel):
    """Aggregate ingest counts, folded by value from per-page outcomes.

    ``with_address``/``without_address`` count stored payslips by whether
    their employee can be dispatched to; ``missing_address`` lists the
    employee codes that need a registry email first.
    """

    batch: Optional[IngestionBatch] = None
    created: int = 0
    updated: int = 0
    with_address: int = 0
    without_address: int = 0
    missing_address: list[str] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)

    def add(self, outcome: IngestOutcome) -> IngestSummary:
        errors = self.errors
        if outcome.error is not None:
            errors = [*errors, ItemError(key=outcome.employee_code or "unknown", message=outcome.error)]
        return self.model_copy(update={
            "created": self.created + int(outcome.created),
            "updated": self.updated + int(outcome.updated),
            **_address_counts(self, outcome),
            "errors": errors,
        })


def _address_counts(summary: IngestSummary, outcome: IngestOutcome) -> dict:
    if outcome.error is not None:
        return {}
    if outcome.has_address:
        return {"with_address": summary.with_address + 1}
    missing = summary.missing_address
    if outcome.employee_code not in missing:
        missing = [*missing, outcome.employee_code]
    return {"without_address": summary.without_address + 1, "missing_address": missing}


class DispatchOutcome(BaseModel):
    """Result of dispatching a single record.

    ``attempted`` is False for precondition failures (unknown record, no
    address), which leave no dispatch-log row.
    ``sent`` with an ``error`` means the message went out but its log
    entry could not be marked sent.
    """

    record_id: str
    sent: bool = False
    attempted: bool = False
    log_id: Optional[str] = None
    error: Optional[str] = None


class DispatchSummary(BaseModel):
    """Aggregate dispatch counts, folded by value from per-record outcomes."""

    sent: int = 0
    failed: int = 0
    errors: list[ItemError] = Field(default_factory=list)

    def add(self, outcome: DispatchOutcome) -> DispatchSummary:
        errors = self.errors
        if outcome.error is not None:
            errors = [*errors, ItemError(key=outcome.record_id, message=outcome.error)]
        return self.model_copy(update={
            "sent": self.sent + int(outcome.sent),
            "failed": self.failed + int(outcome.attempted and not outcome.sent),
            "errors": errors,
        })


class RegistrySummary(BaseModel):
    """Result of an employee registry import."""

    created: int = 0
    updated: int = 0
    errors: list[ItemError] = Field(default_factory=list)


class PayslipOverview(BaseModel):
    """A stored payslip with its owner and its most recent send attempt."""

    record: PayslipRecord
    employee: Optional[Employee] = None
    latest_dispatch: Optional[DispatchLogEntry] = None
