"""Payslip records: the parsed page form and the stored form.

Amounts are whole won, so they are plain ``int`` rather than ``Decimal``.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

_RECORD_NAMESPACE = uuid.UUID("b4d0e0f5-3c7a-4f7e-8a51-95d3c1f8e2a4")

PAYMENT_FIELDS: tuple[str, ...] = (
    "basic_salary",
    "meal_allowance",
    "overtime_pay",
    "incentive",
    "other_allowance",
)

DEDUCTION_FIELDS: tuple[str, ...] = (
    "national_pension",
    "health_insurance",
    "employment_insurance",
    "long_term_care",
    "income_tax",
    "local_income_tax",
)

TOTAL_FIELDS: tuple[str, ...] = ("total_payment", "total_deduction", "net_payment")

FINANCIAL_FIELDS: tuple[str, ...] = PAYMENT_FIELDS + DEDUCTION_FIELDS + TOTAL_FIELDS


def record_id_for(employee_id: str, period: str) -> str:
    """Record id derived from the (employee, period) composite key."""
    return uuid.uuid5(_RECORD_NAMESPACE, f"{employee_id}|{period}").hex


class PayslipAmounts(BaseModel):
    """Financial fields of one payslip, as printed on the source page."""

    # --- Payments ---
    basic_salary: int = 0
    meal_allowance: int = 0
    overtime_pay: int = 0
    incentive: int = 0
    other_allowance: int = 0
    total_payment: int = 0

    # --- Deductions ---
    national_pension: int = 0
    health_insurance: int = 0
    employment_insurance: int = 0
    long_term_care: int = 0
    income_tax: int = 0
    local_income_tax: int = 0
    total_deduction: int = 0

    net_payment: int = 0  # Trusted from source, never recomputed

    def amounts(self) -> dict[str, int]:
        """Financial fields only, in fixed report order."""
        return {name: getattr(self, name) for name in FINANCIAL_FIELDS}

    @property
    def is_balanced(self) -> bool:
        """True when the printed net equals printed payments minus deductions."""
        return self.total_payment - self.total_deduction == self.net_payment


class ParsedPayslip(PayslipAmounts):
    """One payslip page after extraction, before reconciliation."""

    employee_code: str
    employee_name: str
    hire_date: Optional[str] = None  # Verbatim from page, not validated
    period: str = ""
    page_number: int


class PayslipRecord(PayslipAmounts):
    """Stored payslip, unique per (employee_id, period)."""

    record_id: str
    employee_id: str
    period: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UpsertResult(BaseModel):
    """Outcome of a composite-key upsert."""

    record: PayslipRecord
    created: bool
