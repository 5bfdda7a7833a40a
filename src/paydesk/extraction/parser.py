"""RecordParser: turns one page of payslip text into a ParsedPayslip."""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from paydesk.core.logging_config import get_logger
from paydesk.extraction.fields import (
    DEDUCTION_PATTERNS,
    EMPLOYEE_BLOCK_PATTERN,
    PAYMENT_PATTERNS,
    TOTAL_DEDUCTION_PATTERN,
    TOTALS_PATTERN,
    extract_amount,
    extract_amounts,
    extract_period,
    extract_text,
)
from paydesk.models.payslip import ParsedPayslip

logger = get_logger(__name__)


class RecordParser:
    """Stateless payslip page parser.

    The employee block (사원코드/사원명/입사일) is the only acceptance gate:
    cover pages, summary pages and blank pages have none and are skipped.
    Every other field degrades to zero or empty when missing.
    """

    def parse(self, page_text: str, page_number: int) -> ParsedPayslip | None:
        period = extract_period(page_text)

        block = EMPLOYEE_BLOCK_PATTERN.search(page_text)
        if block is None:
            logger.debug("Page %d has no employee block, skipping", page_number)
            return None
        employee_code, employee_name = block.group(1), block.group(2)
        hire_date = extract_text(page_text, EMPLOYEE_BLOCK_PATTERN, group=3)

        total_payment, net_payment = extract_amounts(page_text, TOTALS_PATTERN) or (0, 0)
        amounts = {name: extract_amount(page_text, p) for name, p in PAYMENT_PATTERNS.items()}
        amounts.update({name: extract_amount(page_text, p) for name, p in DEDUCTION_PATTERNS.items()})

        record = ParsedPayslip(
            employee_code=employee_code,
            employee_name=employee_name,
            hire_date=hire_date,
            period=period,
            page_number=page_number,
            total_payment=total_payment,
            total_deduction=extract_amount(page_text, TOTAL_DEDUCTION_PATTERN),
            net_payment=net_payment,
            **amounts,
        )
        logger.info(
            "Page %d parsed: employee=%s period=%s total_payment=%d net_payment=%d",
            page_number, employee_code, period or "?", record.total_payment, record.net_payment,
        )
        return record

    def parse_pages(self, pages: Sequence[str], max_workers: int = 4) -> list[ParsedPayslip]:
        """Parse a whole document; page numbers are 1-based.

        Pages are independent, so they are parsed on a thread pool. Callers
        must not rely on the order of the returned records.
        """
        numbered = list(enumerate(pages, start=1))
        if max_workers <= 1 or len(numbered) <= 1:
            results = [self.parse(text, number) for number, text in numbered]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(lambda item: self.parse(item[1], item[0]), numbered))
        parsed = [r for r in results if r is not None]
        logger.info("Parsed %d payslips from %d pages", len(parsed), len(numbered))
        return parsed
