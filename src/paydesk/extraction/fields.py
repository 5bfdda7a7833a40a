"""Field extraction from raw payslip page text.

Every numeric extractor is total: a missing marker or a non-numeric token
yields ``0``. An absent line item means nothing was paid or withheld.
"""

from __future__ import annotations

import re

# Amounts immediately follow their label; a gap means the value is absent.
_AMOUNT = r"([\d,]+)"

PERIOD_PATTERN = re.compile(r"(\d{4})\s*년\s*(\d{1,2})\s*월분")

EMPLOYEE_BLOCK_PATTERN = re.compile(
    r"사원코드\s*:\s*(\d+)\s*사원명\s*:\s*([가-힣]+)\s*입사일\s*:\s*([\d-]*)"
)

# 지급액계 and 차인지급액 are printed side by side, so they are read together.
TOTALS_PATTERN = re.compile(r"지급액계" + _AMOUNT + r"차인지급액" + _AMOUNT)
TOTAL_DEDUCTION_PATTERN = re.compile(r"공제액계" + _AMOUNT)

PAYMENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "basic_salary": re.compile(r"기본급" + _AMOUNT),
    "meal_allowance": re.compile(r"식대" + _AMOUNT),
    "overtime_pay": re.compile(r"시간외수당" + _AMOUNT),
    "incentive": re.compile(r"기타인센티브" + _AMOUNT),
    "other_allowance": re.compile(r"기타수당" + _AMOUNT),
}

DEDUCTION_PATTERNS: dict[str, re.Pattern[str]] = {
    "national_pension": re.compile(r"국민연금" + _AMOUNT),
    "health_insurance": re.compile(r"건강보험" + _AMOUNT),
    "employment_insurance": re.compile(r"고용보험" + _AMOUNT),
    "long_term_care": re.compile(r"장기요양보험료" + _AMOUNT),
    "income_tax": re.compile(r"(?<!지방)소득세" + _AMOUNT),
    "local_income_tax": re.compile(r"지방소득세" + _AMOUNT),
}


def to_amount(token: str | None) -> int:
    """Parse a grouped numeric token ("3,500,000") to an int, 0 if not numeric."""
    if not token:
        return 0
    digits = token.replace(",", "")
    return int(digits) if digits.isdigit() else 0


def extract_amount(text: str, pattern: re.Pattern[str]) -> int:
    """First amount following the pattern's marker, or 0."""
    match = pattern.search(text)
    return to_amount(match.group(1)) if match else 0


def extract_amounts(text: str, pattern: re.Pattern[str]) -> tuple[int, ...] | None:
    """All amount groups of a combined marker, or None when it is absent."""
    match = pattern.search(text)
    if match is None:
        return None
    return tuple(to_amount(group) for group in match.groups())


def extract_text(text: str, pattern: re.Pattern[str], group: int = 1) -> str | None:
    """Optional string value; empty captures are treated as absent."""
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(group) or None


def extract_period(text: str) -> str:
    """Normalize "2024년3월분" to "2024-03"; empty string when absent."""
    match = PERIOD_PATTERN.search(text)
    if match is None:
        return ""
    year, month = match.groups()
    return f"{year}-{int(month):02d}"
