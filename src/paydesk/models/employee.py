"""Employee master data."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

_EMPLOYEE_NAMESPACE = uuid.UUID("6f1c2a52-8d0e-4c43-9d7b-2f7a0c9e5b11")


def employee_id_for(employee_code: str) -> str:
    """Surrogate id derived from the natural key.

    Keying storage by this id makes the employee-code uniqueness a primary
    key constraint instead of a lookup-then-insert.
    """
    return uuid.uuid5(_EMPLOYEE_NAMESPACE, employee_code).hex


class Employee(BaseModel):
    """A registered (or ingestion-discovered) employee."""

    employee_id: str
    employee_code: str
    name: str = ""
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"str_strip_whitespace": True}

    @property
    def has_address(self) -> bool:
        return bool(self.email)


class EmployeeProfile(BaseModel):
    """Registry row used to create or update an employee.

    Blank optional fields leave the stored value untouched.
    """

    employee_code: str
    name: str = ""
    email: str = ""
    department: str = ""
    position: str = ""

    model_config = {"str_strip_whitespace": True}
