"""Shared test doubles: re-export memory backends plus payslip page builders."""

from __future__ import annotations

from paydesk.core.clock import FixedClock
from paydesk.persistence import Persistence
from paydesk.persistence.memory_backend import (
    MemoryBatchStore,
    MemoryDispatchLogStore,
    MemoryEmployeeStore,
    MemoryPayslipStore,
)
from paydesk.transports.memory_transport import MemoryTransport

__all__ = [
    "FixedClock",
    "MemoryBatchStore",
    "MemoryDispatchLogStore",
    "MemoryEmployeeStore",
    "MemoryPayslipStore",
    "MemoryTransport",
    "SAMPLE_AMOUNTS",
    "memory_persistence",
    "payslip_page",
]

SAMPLE_AMOUNTS: dict[str, int] = {
    "basic_salary": 3_500_000,
    "meal_allowance": 200_000,
    "overtime_pay": 150_000,
    "incentive": 500_000,
    "other_allowance": 100_000,
    "total_payment": 4_450_000,
    "national_pension": 157_500,
    "health_insurance": 124_950,
    "employment_insurance": 36_540,
    "long_term_care": 14_400,
    "income_tax": 89_000,
    "local_income_tax": 8_900,
    "total_deduction": 431_290,
    "net_payment": 4_018_710,
}


def memory_persistence(clock: FixedClock | None = None) -> Persistence:
    """All four stores backed by dicts, sharing one clock."""
    clock = clock or FixedClock()
    return Persistence(
        employees=MemoryEmployeeStore(clock),
        payslips=MemoryPayslipStore(clock),
        dispatch_log=MemoryDispatchLogStore(clock),
        batches=MemoryBatchStore(),
    )


def payslip_page(
    code: str = "1001",
    name: str = "김민수",
    hire_date: str = "2022-03-01",
    year: int = 2024,
    month: int = 12,
    with_totals: bool = True,
    **overrides: int,
) -> str:
    """Page text in the layout the payroll system exports (no separators)."""
    a = {**SAMPLE_AMOUNTS, **overrides}
    text = (
        f"(주)테스트상사 {year}년{month}월분 급여명세서"
        f"사원코드:{code}사원명:{name}입사일:{hire_date}부서:개발팀"
        f"지급내역기본급{a['basic_salary']:,}식대{a['meal_allowance']:,}"
        f"시간외수당{a['overtime_pay']:,}기타인센티브{a['incentive']:,}"
        f"기타수당{a['other_allowance']:,}"
        f"공제내역국민연금{a['national_pension']:,}건강보험{a['health_insurance']:,}"
        f"고용보험{a['employment_insurance']:,}장기요양보험료{a['long_term_care']:,}"
        f"소득세{a['income_tax']:,}지방소득세{a['local_income_tax']:,}"
    )
    if with_totals:
        text += (
            f"지급액계{a['total_payment']:,}차인지급액{a['net_payment']:,}"
            f"공제액계{a['total_deduction']:,}"
        )
    return text + "귀하의 노고에 감사드립니다."
