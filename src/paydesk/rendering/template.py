"""Payslip notice rendering.

Rendering is a pure function of the record and employee snapshot: no clock,
no storage, no locale lookups. Identical inputs give byte-identical HTML.
"""

from __future__ import annotations

from html import escape
from string import Template

from paydesk.models.employee import Employee, employee_id_for
from paydesk.models.outputs import RenderedReport
from paydesk.models.payslip import PayslipAmounts, PayslipRecord, record_id_for

SUBJECT_TEMPLATE = "[{period}] 급여명세서 안내"

PAYMENT_LINES: tuple[tuple[str, str], ...] = (
    ("basic_salary", "기본급"),
    ("meal_allowance", "식대"),
    ("overtime_pay", "시간외수당"),
    ("incentive", "기타인센티브"),
    ("other_allowance", "기타수당"),
)

DEDUCTION_LINES: tuple[tuple[str, str], ...] = (
    ("national_pension", "국민연금"),
    ("health_insurance", "건강보험"),
    ("employment_insurance", "고용보험"),
    ("long_term_care", "장기요양보험료"),
    ("income_tax", "소득세"),
    ("local_income_tax", "지방소득세"),
)

_PAGE = Template("""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="margin: 0; padding: 0; background-color: #f0f4f8; font-family: 'Malgun Gothic', 'Apple SD Gothic Neo', sans-serif;">
<table cellpadding="0" cellspacing="0" border="0" width="600" align="center" style="max-width: 600px;">
<tr><td style="background-color: #1e3a5f; padding: 30px; text-align: center;">
$logo<h1 style="margin: 0; color: #ffffff; font-size: 26px;">$period</h1>
<p style="margin: 8px 0 0 0; color: #a3c4e8; font-size: 16px;">급여명세서</p>
</td></tr>
<tr><td style="background-color: #ffffff; padding: 25px;">
<table cellpadding="0" cellspacing="0" border="0" width="100%">
<tr>
<td width="50%"><span style="color: #64748b; font-size: 12px;">사원코드</span><p style="margin: 4px 0 0 0; font-weight: 700;">$employee_code</p></td>
<td width="50%" style="text-align: right;"><span style="color: #64748b; font-size: 12px;">사원명</span><p style="margin: 4px 0 0 0; font-weight: 700;">$employee_name</p></td>
</tr>
</table>
</td></tr>
$payment_section
$deduction_section
<tr><td style="background-color: #1e3a5f; padding: 30px; text-align: center;">
<p style="margin: 0 0 8px 0; color: #a3c4e8; font-size: 14px;">실수령액</p>
<p style="margin: 0; color: #ffffff; font-size: 42px; font-weight: 800;">$net_payment<span style="font-size: 24px;">원</span></p>
</td></tr>
<tr><td style="background-color: #f8fafc; padding: 25px; text-align: center;">
<p style="margin: 0 0 8px 0; color: #64748b; font-size: 13px;">본 메일은 자동 발송되었습니다.</p>
<p style="margin: 0; color: #94a3b8; font-size: 12px;">$footer</p>
</td></tr>
</table>
</body>
</html>
""")

_SECTION = Template("""<tr><td style="background-color: #ffffff; padding: 0 25px 25px 25px;">
<table cellpadding="0" cellspacing="0" border="0" width="100%" style="border: 1px solid #e2e8f0;">
<tr><td colspan="2" style="background-color: $accent; padding: 14px 20px; color: #ffffff; font-weight: 700;">$title</td></tr>
$rows<tr><td style="padding: 16px 20px; font-weight: 700; border-top: 2px solid $accent;">$total_label</td><td style="padding: 16px 20px; text-align: right; font-weight: 700; border-top: 2px solid $accent;">$total원</td></tr>
</table>
</td></tr>""")

_ROW = Template("""<tr><td style="padding: 14px 20px; color: #374151;">$label</td><td style="padding: 14px 20px; text-align: right; font-weight: 600;">$amount원</td></tr>
""")


def format_amount(value: int) -> str:
    """Korean won grouping: 4450000 -> "4,450,000"."""
    return f"{value:,}"


def render_subject(period: str) -> str:
    return SUBJECT_TEMPLATE.format(period=period)


def _section(
    record: PayslipAmounts, lines: tuple[tuple[str, str], ...],
    title: str, total_label: str, total: int, accent: str,
) -> str:
    rows = "".join(
        _ROW.substitute(label=label, amount=format_amount(getattr(record, name)))
        for name, label in lines
    )
    return _SECTION.substitute(
        title=title, rows=rows, total_label=total_label,
        total=format_amount(total), accent=accent,
    )


class TemplateRenderer:
    """Renders payslip notices. Knows nothing about where its inputs came from."""

    def __init__(self, logo_url: str = "", footer: str = "문의사항은 인사팀으로 연락 바랍니다.") -> None:
        self._logo_url = logo_url
        self._footer = footer

    def render(self, record: PayslipRecord, employee: Employee) -> RenderedReport:
        logo = ""
        if self._logo_url:
            logo = f'<img src="{escape(self._logo_url)}" alt="Company Logo" style="max-width: 240px; max-height: 120px; margin-bottom: 15px;" />'
        html = _PAGE.substitute(
            logo=logo,
            period=escape(record.period),
            employee_code=escape(employee.employee_code),
            employee_name=escape(employee.name),
            payment_section=_section(
                record, PAYMENT_LINES, "지급 내역", "지급액 계", record.total_payment, "#16a34a",
            ),
            deduction_section=_section(
                record, DEDUCTION_LINES, "공제 내역", "공제액 계", record.total_deduction, "#dc2626",
            ),
            net_payment=format_amount(record.net_payment),
            footer=escape(self._footer),
        )
        return RenderedReport(subject=render_subject(record.period), html=html)

    def render_sample(self) -> RenderedReport:
        """Preview the template with fixed placeholder data."""
        employee, record = sample_payslip()
        return self.render(record, employee)


def sample_payslip() -> tuple[Employee, PayslipRecord]:
    """Fixed employee/record pair used for template previews."""
    employee = Employee(
        employee_id=employee_id_for("EMP001"),
        employee_code="EMP001",
        name="홍길동",
    )
    record = PayslipRecord(
        record_id=record_id_for(employee.employee_id, "2024-12"),
        employee_id=employee.employee_id,
        period="2024-12",
        basic_salary=3_500_000,
        meal_allowance=200_000,
        overtime_pay=150_000,
        incentive=500_000,
        other_allowance=100_000,
        total_payment=4_450_000,
        national_pension=157_500,
        health_insurance=124_950,
        employment_insurance=36_540,
        long_term_care=14_400,
        income_tax=89_000,
        local_income_tax=8_900,
        total_deduction=431_290,
        net_payment=4_018_710,
    )
    return employee, record
