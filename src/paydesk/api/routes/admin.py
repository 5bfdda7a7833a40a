"""Admin endpoints for the employee registry."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool

from paydesk.models.employee import Employee
from paydesk.models.pipeline import RegistrySummary

router = APIRouter(tags=["admin"])


@router.post("/employees/import")
async def import_registry(request: Request) -> RegistrySummary:
    """Create or update employees from a raw registry CSV body."""
    csv_text = (await request.body()).decode("utf-8-sig")
    return await run_in_threadpool(request.app.state.pipeline.import_registry, csv_text)


@router.delete("/employees/{employee_id}")
def deactivate_employee(employee_id: str, request: Request) -> Employee:
    return request.app.state.pipeline.deactivate_employee(employee_id)
