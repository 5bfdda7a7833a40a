"""Protocol interfaces for all PayDesk abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from paydesk.models.employee import Employee, EmployeeProfile
from paydesk.models.payslip import PayslipRecord, UpsertResult
from paydesk.models.pipeline import DispatchLogEntry, IngestionBatch


# ---------------------------------------------------------------------------
# Persistence: Employee Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IEmployeeStore(Protocol):
    """Employee registry keyed by the natural employee code."""

    def get(self, employee_id: str) -> Employee | None: ...

    def get_by_code(self, employee_code: str) -> Employee | None: ...

    def create_if_absent(
        self, employee_code: str, name: str, hire_date: date | None
    ) -> tuple[Employee, bool]: ...

    def save_profile(self, profile: EmployeeProfile) -> tuple[Employee, bool]: ...

    def deactivate(self, employee_id: str) -> Employee: ...


# ---------------------------------------------------------------------------
# Persistence: Payslip Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IPayslipStore(Protocol):
    """Payslip records, unique per (employee_id, period)."""

    def upsert(self, employee_id: str, period: str, amounts: dict[str, int]) -> UpsertResult: ...

    def get(self, record_id: str) -> PayslipRecord | None: ...

    def find(self, employee_id: str, period: str) -> PayslipRecord | None: ...

    def list_by_period(self, period: str) -> list[PayslipRecord]: ...

    def list_all(self) -> list[PayslipRecord]: ...


# ---------------------------------------------------------------------------
# Persistence: Dispatch Log
# ---------------------------------------------------------------------------

@runtime_checkable
class IDispatchLogStore(Protocol):
    """Append-only audit of send attempts with one pending->terminal transition."""

    def create_pending(self, record_id: str, recipient: str, subject: str) -> DispatchLogEntry: ...

    def mark_sent(self, entry: DispatchLogEntry, sent_at: datetime) -> DispatchLogEntry: ...

    def mark_failed(self, entry: DispatchLogEntry, error_message: str) -> DispatchLogEntry: ...

    def list_for_record(self, record_id: str) -> list[DispatchLogEntry]: ...

    def latest_for_record(self, record_id: str) -> DispatchLogEntry | None: ...

    def list_recent(self, limit: int = 100) -> list[DispatchLogEntry]: ...


# ---------------------------------------------------------------------------
# Persistence: Ingestion Batches
# ---------------------------------------------------------------------------

@runtime_checkable
class IBatchStore(Protocol):
    """Write-once ingestion batch metadata."""

    def create(self, batch: IngestionBatch) -> IngestionBatch: ...

    def get(self, batch_id: str) -> IngestionBatch | None: ...


# ---------------------------------------------------------------------------
# Delivery Transport
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransport(Protocol):
    """Opaque, fail-fast message transport. Raises TransportError on failure."""

    def send(self, address: str, subject: str, body: str) -> None: ...
