"""RegistryImporter: bulk create/update employees from a registry CSV."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping

from paydesk.core.exceptions import PayDeskError
from paydesk.core.logging_config import get_logger
from paydesk.core.protocols import IEmployeeStore
from paydesk.models.employee import EmployeeProfile
from paydesk.models.pipeline import ItemError, RegistrySummary

logger = get_logger(__name__)

# Registry exports use either English or Korean headers.
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "employee_code": ("employeeCode", "employee_code", "사원코드"),
    "name": ("name", "사원명"),
    "email": ("email", "이메일"),
    "department": ("department", "부서"),
    "position": ("position", "직급"),
}


def normalize_row(row: Mapping[str, str | None]) -> dict[str, str]:
    """Map a raw CSV row onto EmployeeProfile field names."""
    out: dict[str, str] = {}
    for field, aliases in HEADER_ALIASES.items():
        value = next((row[a] for a in aliases if row.get(a)), "")
        out[field] = (value or "").strip()
    return out


class RegistryImporter:
    """Creates unknown employees and updates known ones.

    Blank cells keep the stored value, so a registry without an email column
    never erases addresses.
    """

    def __init__(self, employees: IEmployeeStore) -> None:
        self._employees = employees

    def import_rows(self, rows: Iterable[Mapping[str, str | None]]) -> RegistrySummary:
        created = updated = 0
        errors: list[ItemError] = []
        for row in rows:
            fields = normalize_row(row)
            code = fields["employee_code"]
            if not code:
                errors.append(ItemError(key="unknown", message="Missing employee code"))
                continue
            try:
                _, was_created = self._employees.save_profile(EmployeeProfile(**fields))
            except PayDeskError as exc:
                errors.append(ItemError(key=code, message=str(exc)))
                continue
            if was_created:
                created += 1
            else:
                updated += 1
        logger.info("Registry import: created=%d updated=%d errors=%d", created, updated, len(errors))
        return RegistrySummary(created=created, updated=updated, errors=errors)

    def import_csv(self, text: str) -> RegistrySummary:
        reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
        if reader.fieldnames:
            reader.fieldnames = [name.strip() for name in reader.fieldnames]
        return self.import_rows(reader)
