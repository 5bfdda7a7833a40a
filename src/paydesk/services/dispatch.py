"""DispatchEngine: renders payslip notices, sends them, and audits each attempt.

Per record the audit row moves pending -> sent | failed exactly once:

1. Load record and employee. No address -> MissingAddressError, no row.
2. Create a pending row (recipient + subject).
3. Render from the snapshot taken in step 1.
4. Send. Success marks the row sent; any error marks it failed and is
   re-raised as DeliveryError. If the status update itself fails, the
   row stays pending: a failed send still raises DeliveryError (carrying
   the audit error), a completed send raises UnrecordedDeliveryError so
   callers count it as delivered and do not retry.

The log store and the transport share no transaction. A crash between the
send and the status update leaves a pending row behind; sweeping stale
pending rows is not done here.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from functools import reduce

from paydesk.core.clock import SystemClock
from paydesk.core.exceptions import (
    DeliveryError,
    EmployeeNotFoundError,
    MissingAddressError,
    PayDeskError,
    RecordNotFoundError,
    UnrecordedDeliveryError,
)
from paydesk.core.logging_config import get_logger
from paydesk.core.protocols import IDispatchLogStore, IEmployeeStore, IPayslipStore, ITransport
from paydesk.models.pipeline import DispatchLogEntry, DispatchOutcome, DispatchSummary
from paydesk.rendering.template import TemplateRenderer, render_subject

logger = get_logger(__name__)


class DispatchEngine:
    """Sends payslip notices one record at a time."""

    def __init__(
        self,
        *,
        payslips: IPayslipStore,
        employees: IEmployeeStore,
        dispatch_log: IDispatchLogStore,
        transport: ITransport,
        renderer: TemplateRenderer,
        clock=None,
        max_workers: int = 4,
    ) -> None:
        self._payslips = payslips
        self._employees = employees
        self._log = dispatch_log
        self._transport = transport
        self._renderer = renderer
        self._clock = clock or SystemClock()
        self._max_workers = max_workers

    def dispatch(self, record_id: str) -> DispatchLogEntry:
        """Send one record's notice; returns the sent log entry.

        Raises:
            RecordNotFoundError: unknown record, nothing logged.
            MissingAddressError: employee has no email, nothing logged.
            DeliveryError: transport failed, log entry marked failed.
            UnrecordedDeliveryError: delivered, but the entry could not be
                marked sent and is still pending.
        """
        record = self._payslips.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        employee = self._employees.get(record.employee_id)
        if employee is None:
            raise EmployeeNotFoundError(record.employee_id)
        if not employee.has_address:
            raise MissingAddressError(record_id, employee.employee_code)

        entry = self._log.create_pending(record_id, employee.email, render_subject(record.period))
        try:
            report = self._renderer.render(record, employee)
            self._transport.send(employee.email, report.subject, report.html)
        except Exception as exc:
            logger.warning("Dispatch %s for record %s failed: %s", entry.log_id, record_id, exc)
            try:
                self._log.mark_failed(entry, str(exc))
            except PayDeskError as audit_exc:
                logger.error("Dispatch %s left pending: %s", entry.log_id, audit_exc)
                raise DeliveryError(record_id, entry.log_id, str(exc), audit_error=str(audit_exc)) from exc
            raise DeliveryError(record_id, entry.log_id, str(exc)) from exc

        try:
            sent = self._log.mark_sent(entry, self._clock.now())
        except PayDeskError as exc:
            logger.error("Dispatch %s for record %s delivered but left pending: %s", entry.log_id, record_id, exc)
            raise UnrecordedDeliveryError(record_id, entry.log_id, str(exc)) from exc
        logger.info("Dispatch %s for record %s sent to %s", entry.log_id, record_id, employee.email)
        return sent

    def dispatch_one(self, record_id: str) -> DispatchOutcome:
        """Like ``dispatch`` but reports failures as an outcome value."""
        try:
            entry = self.dispatch(record_id)
        except MissingAddressError as exc:
            logger.info("Record %s skipped: %s", record_id, exc)
            return DispatchOutcome(record_id=record_id, error=str(exc))
        except UnrecordedDeliveryError as exc:
            return DispatchOutcome(
                record_id=record_id, sent=True, attempted=True, log_id=exc.log_id, error=str(exc),
            )
        except DeliveryError as exc:
            return DispatchOutcome(record_id=record_id, attempted=True, log_id=exc.log_id, error=str(exc))
        except PayDeskError as exc:
            logger.warning("Record %s not dispatched: %s", record_id, exc)
            return DispatchOutcome(record_id=record_id, error=str(exc))
        return DispatchOutcome(record_id=record_id, sent=True, attempted=True, log_id=entry.log_id)

    def dispatch_many(self, record_ids: Iterable[str]) -> DispatchSummary:
        """Dispatch each record independently and fold the outcomes.

        ``failed`` counts attempts recorded as failed; precondition failures
        (unknown record, missing address) appear only in ``errors``.
        """
        ids = list(dict.fromkeys(record_ids))
        if self._max_workers <= 1 or len(ids) <= 1:
            outcomes = [self.dispatch_one(i) for i in ids]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                outcomes = list(pool.map(self.dispatch_one, ids))
        summary = reduce(DispatchSummary.add, outcomes, DispatchSummary())
        logger.info(
            "Dispatched %d records: sent=%d failed=%d errors=%d",
            len(ids), summary.sent, summary.failed, len(summary.errors),
        )
        return summary

    def history(self, record_id: str) -> list[DispatchLogEntry]:
        """All attempts for a record, newest first."""
        return self._log.list_for_record(record_id)

    def latest(self, record_id: str) -> DispatchLogEntry | None:
        return self._log.latest_for_record(record_id)

    def recent(self, limit: int = 100) -> list[DispatchLogEntry]:
        """Most recent attempts across all records, newest first."""
        return self._log.list_recent(limit)
