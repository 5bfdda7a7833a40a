"""In-memory backends for unit tests: dict-backed fakes.

Each public method holds the store lock for its whole body, standing in for
a single atomic storage write.
"""

from __future__ import annotations

import threading
import uuid
from datetime import date, datetime

from paydesk.core.clock import SystemClock
from paydesk.core.exceptions import EmployeeNotFoundError, StorageError
from paydesk.models.employee import Employee, EmployeeProfile, employee_id_for
from paydesk.models.payslip import FINANCIAL_FIELDS, PayslipRecord, UpsertResult, record_id_for
from paydesk.models.pipeline import DispatchLogEntry, DispatchStatus, IngestionBatch


class MemoryEmployeeStore:
    """Dict-backed IEmployeeStore for unit tests."""

    def __init__(self, clock=None) -> None:
        self._clock = clock or SystemClock()
        self._employees: dict[str, Employee] = {}
        self._lock = threading.Lock()

    def get(self, employee_id: str) -> Employee | None:
        return self._employees.get(employee_id)

    def get_by_code(self, employee_code: str) -> Employee | None:
        return self._employees.get(employee_id_for(employee_code))

    def create_if_absent(
        self, employee_code: str, name: str, hire_date: date | None
    ) -> tuple[Employee, bool]:
        employee_id = employee_id_for(employee_code)
        with self._lock:
            existing = self._employees.get(employee_id)
            if existing is not None:
                return existing, False
            now = self._clock.now()
            employee = Employee(
                employee_id=employee_id, employee_code=employee_code, name=name,
                hire_date=hire_date, created_at=now, updated_at=now,
            )
            self._employees[employee_id] = employee
            return employee, True

    def save_profile(self, profile: EmployeeProfile) -> tuple[Employee, bool]:
        employee_id = employee_id_for(profile.employee_code)
        changes = {
            k: v for k, v in profile.model_dump(exclude={"employee_code"}).items() if v
        }
        with self._lock:
            now = self._clock.now()
            existing = self._employees.get(employee_id)
            if existing is None:
                employee = Employee(
                    employee_id=employee_id, employee_code=profile.employee_code,
                    created_at=now, updated_at=now, **changes,
                )
            else:
                employee = existing.model_copy(update={**changes, "updated_at": now})
            self._employees[employee_id] = employee
            return employee, existing is None

    def deactivate(self, employee_id: str) -> Employee:
        with self._lock:
            existing = self._employees.get(employee_id)
            if existing is None:
                raise EmployeeNotFoundError(employee_id)
            employee = existing.model_copy(update={"is_active": False, "updated_at": self._clock.now()})
            self._employees[employee_id] = employee
            return employee

    def set_email(self, employee_code: str, email: str | None) -> Employee:
        """Test helper: register an address out-of-band."""
        employee_id = employee_id_for(employee_code)
        with self._lock:
            employee = self._employees[employee_id].model_copy(update={"email": email})
            self._employees[employee_id] = employee
            return employee


class MemoryPayslipStore:
    """Dict-backed IPayslipStore for unit tests."""

    def __init__(self, clock=None) -> None:
        self._clock = clock or SystemClock()
        self._records: dict[str, PayslipRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, employee_id: str, period: str, amounts: dict[str, int]) -> UpsertResult:
        record_id = record_id_for(employee_id, period)
        fields = {name: amounts.get(name, 0) for name in FINANCIAL_FIELDS}
        with self._lock:
            now = self._clock.now()
            existing = self._records.get(record_id)
            record = PayslipRecord(
                record_id=record_id, employee_id=employee_id, period=period,
                created_at=existing.created_at if existing else now, updated_at=now,
                **fields,
            )
            self._records[record_id] = record
            return UpsertResult(record=record, created=existing is None)

    def get(self, record_id: str) -> PayslipRecord | None:
        return self._records.get(record_id)

    def find(self, employee_id: str, period: str) -> PayslipRecord | None:
        return self._records.get(record_id_for(employee_id, period))

    def list_by_period(self, period: str) -> list[PayslipRecord]:
        return [r for r in self._records.values() if r.period == period]

    def list_all(self) -> list[PayslipRecord]:
        return list(self._records.values())

    def count(self) -> int:
        return len(self._records)


class MemoryDispatchLogStore:
    """List-backed IDispatchLogStore for unit tests."""

    def __init__(self, clock=None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, DispatchLogEntry] = {}
        self._lock = threading.Lock()

    def create_pending(self, record_id: str, recipient: str, subject: str) -> DispatchLogEntry:
        entry = DispatchLogEntry(
            log_id=uuid.uuid4().hex, record_id=record_id, recipient=recipient,
            subject=subject, created_at=self._clock.now(),
        )
        with self._lock:
            self._entries[entry.log_id] = entry
        return entry

    def _transition(self, entry: DispatchLogEntry, **changes) -> DispatchLogEntry:
        with self._lock:
            current = self._entries.get(entry.log_id)
            if current is None or current.status is not DispatchStatus.PENDING:
                raise StorageError(f"Dispatch log {entry.log_id!r} is not pending")
            updated = current.model_copy(update=changes)
            self._entries[entry.log_id] = updated
            return updated

    def mark_sent(self, entry: DispatchLogEntry, sent_at: datetime) -> DispatchLogEntry:
        return self._transition(entry, status=DispatchStatus.SENT, sent_at=sent_at)

    def mark_failed(self, entry: DispatchLogEntry, error_message: str) -> DispatchLogEntry:
        return self._transition(entry, status=DispatchStatus.FAILED, error_message=error_message)

    def list_for_record(self, record_id: str) -> list[DispatchLogEntry]:
        # Newest first; equal timestamps fall back to reverse insertion order
        entries = [e for e in reversed(self._entries.values()) if e.record_id == record_id]
        return sorted(entries, key=lambda e: e.created_at, reverse=True)

    def latest_for_record(self, record_id: str) -> DispatchLogEntry | None:
        entries = self.list_for_record(record_id)
        return entries[0] if entries else None

    def list_recent(self, limit: int = 100) -> list[DispatchLogEntry]:
        with self._lock:
            snapshot = list(self._entries.values())
        entries = sorted(reversed(snapshot), key=lambda e: e.created_at, reverse=True)
        return entries[:limit]

    def all(self) -> list[DispatchLogEntry]:
        return list(self._entries.values())


class MemoryBatchStore:
    """Dict-backed IBatchStore for unit tests."""

    def __init__(self) -> None:
        self._batches: dict[str, IngestionBatch] = {}
        self._lock = threading.Lock()

    def create(self, batch: IngestionBatch) -> IngestionBatch:
        with self._lock:
            if batch.batch_id in self._batches:
                raise StorageError(f"Batch {batch.batch_id!r} already exists")
            self._batches[batch.batch_id] = batch
        return batch

    def get(self, batch_id: str) -> IngestionBatch | None:
        return self._batches.get(batch_id)
