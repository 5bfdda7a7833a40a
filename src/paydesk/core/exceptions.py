"""PayDesk exception hierarchy."""

from __future__ import annotations


class PayDeskError(Exception):
    """Base exception for all PayDesk errors."""


class StorageError(PayDeskError):
    """Employee, payslip or dispatch-log storage operation failed."""


class RecordNotFoundError(PayDeskError):
    """No payslip record exists for the given id."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"Payslip record {record_id!r} not found")


class EmployeeNotFoundError(PayDeskError):
    """No employee exists for the given id or code."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Employee {key!r} not found")


class TransportError(PayDeskError):
    """Outbound mail transport rejected or failed to deliver a message."""


class DispatchError(PayDeskError):
    """A payslip could not be dispatched to its owner."""

    def __init__(self, record_id: str, message: str) -> None:
        self.record_id = record_id
        super().__init__(message)


class MissingAddressError(DispatchError):
    """Employee has no registered email address. No attempt is recorded."""

    def __init__(self, record_id: str, employee_code: str) -> None:
        self.employee_code = employee_code
        super().__init__(record_id, f"Employee {employee_code} has no registered email address")


class DeliveryError(DispatchError):
    """Transport failed; the attempt is recorded as failed in the dispatch log.

    ``audit_error`` is set when that update itself failed and the entry is
    still pending.
    """

    def __init__(self, record_id: str, log_id: str, message: str, audit_error: str | None = None) -> None:
        self.log_id = log_id
        self.audit_error = audit_error
        if audit_error is not None:
            message = f"{message} (dispatch log not updated: {audit_error})"
        super().__init__(record_id, message)


class UnrecordedDeliveryError(DispatchError):
    """Message was delivered but its log entry could not be marked sent.

    The entry stays pending. The record must not be re-sent.
    """

    def __init__(self, record_id: str, log_id: str, message: str) -> None:
        self.log_id = log_id
        super().__init__(record_id, f"Delivered, but dispatch log {log_id} not updated: {message}")
