"""EmployeeResolver: find-or-create employees discovered on payslips."""

from __future__ import annotations

from datetime import date

from paydesk.core.logging_config import get_logger
from paydesk.core.protocols import IEmployeeStore
from paydesk.models.employee import Employee

logger = get_logger(__name__)


def parse_hire_date(value: str | None) -> date | None:
    """ISO date from the payslip, or None when absent or unparseable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class EmployeeResolver:
    """Resolves a payslip's employee block against the registry.

    Ingestion is not authoritative for master data: an existing employee is
    returned exactly as stored. New employees get no email address.
    """

    def __init__(self, employees: IEmployeeStore) -> None:
        self._employees = employees

    def resolve(self, employee_code: str, employee_name: str, hire_date: str | None) -> Employee:
        existing = self._employees.get_by_code(employee_code)
        if existing is not None:
            return existing
        employee, created = self._employees.create_if_absent(
            employee_code, employee_name, parse_hire_date(hire_date),
        )
        if created:
            logger.info("Registered employee %s (%s) from payslip", employee_code, employee_name)
        return employee
