"""IngestionService: parse a payslip document and upsert its records."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import reduce

from paydesk.core.clock import SystemClock
from paydesk.core.exceptions import PayDeskError
from paydesk.core.logging_config import get_logger
from paydesk.core.protocols import IBatchStore, IPayslipStore
from paydesk.extraction.parser import RecordParser
from paydesk.models.payslip import ParsedPayslip
from paydesk.models.pipeline import IngestionBatch, IngestOutcome, IngestSummary, ItemError
from paydesk.services.resolver import EmployeeResolver

logger = get_logger(__name__)


class IngestionService:
    """Turns page texts into stored payslips.

    Each parsed page is reconciled independently; its failure is reported
    in the summary and never aborts the rest of the batch.
    """

    def __init__(
        self,
        *,
        parser: RecordParser,
        resolver: EmployeeResolver,
        payslips: IPayslipStore,
        batches: IBatchStore,
        clock=None,
        parse_workers: int = 4,
        ingest_workers: int = 4,
    ) -> None:
        self._parser = parser
        self._resolver = resolver
        self._payslips = payslips
        self._batches = batches
        self._clock = clock or SystemClock()
        self._parse_workers = parse_workers
        self._ingest_workers = ingest_workers

    def ingest(self, pages: Sequence[str], source_label: str) -> IngestSummary:
        parsed = self._parser.parse_pages(pages, max_workers=self._parse_workers)
        summary = IngestSummary()

        first = min(parsed, key=lambda p: p.page_number) if parsed else None
        batch = IngestionBatch(
            batch_id=uuid.uuid4().hex,
            source_label=source_label,
            period=first.period if first else "",
            total_pages=len(pages),
            parsed_count=len(parsed),
            created_at=self._clock.now(),
        )
        try:
            summary = summary.model_copy(update={"batch": self._batches.create(batch)})
        except PayDeskError as exc:
            logger.warning("Batch metadata for %r not recorded: %s", source_label, exc)
            summary = summary.model_copy(update={
                "errors": [ItemError(key="unknown", message=f"Batch metadata not recorded: {exc}")],
            })

        if self._ingest_workers <= 1 or len(parsed) <= 1:
            outcomes = [self.ingest_one(p) for p in parsed]
        else:
            with ThreadPoolExecutor(max_workers=self._ingest_workers) as pool:
                outcomes = list(pool.map(self.ingest_one, parsed))

        summary = reduce(IngestSummary.add, outcomes, summary)
        logger.info(
            "Ingested %r: pages=%d parsed=%d created=%d updated=%d errors=%d",
            source_label, len(pages), len(parsed), summary.created, summary.updated, len(summary.errors),
        )
        return summary

    def ingest_one(self, parsed: ParsedPayslip) -> IngestOutcome:
        """Resolve the employee and upsert one payslip."""
        try:
            employee = self._resolver.resolve(parsed.employee_code, parsed.employee_name, parsed.hire_date)
            result = self._payslips.upsert(employee.employee_id, parsed.period, parsed.amounts())
        except PayDeskError as exc:
            logger.warning("Page %d (%s) not ingested: %s", parsed.page_number, parsed.employee_code, exc)
            return IngestOutcome(employee_code=parsed.employee_code, error=str(exc))
        return IngestOutcome(
            employee_code=parsed.employee_code,
            created=result.created,
            updated=not result.created,
            has_address=employee.has_address,
        )
