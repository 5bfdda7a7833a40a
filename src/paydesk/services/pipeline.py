"""PayslipPipeline: caller-facing ingest / dispatch / preview operations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from paydesk.core.config import AppSettings
from paydesk.core.exceptions import EmployeeNotFoundError, RecordNotFoundError
from paydesk.core.protocols import ITransport
from paydesk.extraction.parser import RecordParser
from paydesk.models.employee import Employee
from paydesk.models.outputs import RenderedReport
from paydesk.models.pipeline import (
    DispatchLogEntry,
    DispatchSummary,
    IngestSummary,
    PayslipOverview,
    RegistrySummary,
)
from paydesk.persistence import Persistence, create_persistence
from paydesk.rendering.template import TemplateRenderer
from paydesk.services.base import BaseService
from paydesk.services.dispatch import DispatchEngine
from paydesk.services.ingestion import IngestionService
from paydesk.services.registry import RegistryImporter
from paydesk.services.resolver import EmployeeResolver
from paydesk.transports import create_transport


class PayslipPipeline(BaseService):
    """Wires parser, resolver, stores, renderer and transport together."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        persistence: Persistence,
        transport: ITransport,
        clock=None,
    ) -> None:
        super().__init__(settings=settings)
        self._persistence = persistence
        self._renderer = TemplateRenderer(
            logo_url=settings.template.logo_url,
            footer=settings.template.footer_contact,
        )
        self._ingestion = IngestionService(
            parser=RecordParser(),
            resolver=EmployeeResolver(persistence.employees),
            payslips=persistence.payslips,
            batches=persistence.batches,
            clock=clock,
            parse_workers=settings.pipeline.parse_workers,
            ingest_workers=settings.pipeline.ingest_workers,
        )
        self._dispatcher = DispatchEngine(
            payslips=persistence.payslips,
            employees=persistence.employees,
            dispatch_log=persistence.dispatch_log,
            transport=transport,
            renderer=self._renderer,
            clock=clock,
            max_workers=settings.pipeline.dispatch_workers,
        )
        self._registry = RegistryImporter(persistence.employees)

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> PayslipPipeline:
        settings = settings or AppSettings()
        return cls(
            settings=settings,
            persistence=create_persistence(settings),
            transport=create_transport(settings),
        )

    # ---- ingestion ----

    def ingest(self, pages: Sequence[str], source_label: str) -> IngestSummary:
        return self._ingestion.ingest(pages, source_label)

    def import_registry(self, csv_text: str) -> RegistrySummary:
        return self._registry.import_csv(csv_text)

    def deactivate_employee(self, employee_id: str) -> Employee:
        return self._persistence.employees.deactivate(employee_id)

    def list_records(self, period: str | None = None) -> list[PayslipOverview]:
        """Stored payslips (all periods when none given) with owner and latest attempt.

        Ordered by employee code, then period.
        """
        payslips = self._persistence.payslips
        records = payslips.list_by_period(period) if period else payslips.list_all()
        employees: dict[str, Employee | None] = {}
        overviews = []
        for record in records:
            if record.employee_id not in employees:
                employees[record.employee_id] = self._persistence.employees.get(record.employee_id)
            overviews.append(PayslipOverview(
                record=record,
                employee=employees[record.employee_id],
                latest_dispatch=self._dispatcher.latest(record.record_id),
            ))
        overviews.sort(key=lambda o: (o.employee.employee_code if o.employee else "", o.record.period))
        return overviews

    # ---- dispatch ----

    def dispatch(self, record_ids: Iterable[str]) -> DispatchSummary:
        return self._dispatcher.dispatch_many(record_ids)

    def dispatch_history(self, record_id: str) -> list[DispatchLogEntry]:
        return self._dispatcher.history(record_id)

    def latest_dispatch(self, record_id: str) -> DispatchLogEntry | None:
        return self._dispatcher.latest(record_id)

    def recent_dispatches(self, limit: int = 100) -> list[DispatchLogEntry]:
        return self._dispatcher.recent(limit)

    def preview_template(self, record_id: str | None = None) -> RenderedReport:
        """Render a stored record, or the fixed sample when no id is given."""
        if record_id is None:
            return self._renderer.render_sample()
        record = self._persistence.payslips.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        employee = self._persistence.employees.get(record.employee_id)
        if employee is None:
            raise EmployeeNotFoundError(record.employee_id)
        return self._renderer.render(record, employee)
