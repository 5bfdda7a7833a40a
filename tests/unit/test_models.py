"""Tests for payslip, employee and summary models."""

from __future__ import annotations

from paydesk.models.employee import Employee, employee_id_for
from paydesk.models.payslip import FINANCIAL_FIELDS, PayslipAmounts, record_id_for
from paydesk.models.pipeline import (
    DispatchOutcome,
    DispatchStatus,
    DispatchSummary,
    IngestOutcome,
    IngestSummary,
)
from tests.fakes import SAMPLE_AMOUNTS


def test_default_amounts_are_zero():
    assert set(PayslipAmounts().amounts().values()) == {0}


def test_amounts_in_report_order():
    assert tuple(PayslipAmounts().amounts()) == FINANCIAL_FIELDS


def test_is_balanced_uses_printed_totals():
    assert PayslipAmounts(**SAMPLE_AMOUNTS).is_balanced
    assert not PayslipAmounts(**{**SAMPLE_AMOUNTS, "net_payment": 1}).is_balanced


def test_ids_are_stable_per_natural_key():
    assert employee_id_for("1001") == employee_id_for("1001")
    assert employee_id_for("1001") != employee_id_for("1002")
    eid = employee_id_for("1001")
    assert record_id_for(eid, "2024-12") == record_id_for(eid, "2024-12")
    assert record_id_for(eid, "2024-12") != record_id_for(eid, "2025-01")


def test_employee_without_email_has_no_address():
    emp = Employee(employee_id="x", employee_code="1", name="김민수", email="")
    assert not emp.has_address


def test_dispatch_status_terminality():
    assert not DispatchStatus.PENDING.is_terminal
    assert DispatchStatus.SENT.is_terminal
    assert DispatchStatus.FAILED.is_terminal


class TestSummaryFolding:
    def test_ingest_summary_is_immutable_fold(self):
        start = IngestSummary()
        after = start.add(IngestOutcome(employee_code="1", created=True))
        after = after.add(IngestOutcome(employee_code="2", updated=True))
        after = after.add(IngestOutcome(employee_code="", error="boom"))
        assert (start.created, start.updated, start.errors) == (0, 0, [])
        assert (after.created, after.updated) == (1, 1)
        assert after.errors[0].key == "unknown"

    def test_ingest_summary_address_counts_skip_errors(self):
        summary = IngestSummary()
        summary = summary.add(IngestOutcome(employee_code="1", created=True, has_address=True))
        summary = summary.add(IngestOutcome(employee_code="2", created=True))
        summary = summary.add(IngestOutcome(employee_code="2", updated=True))
        summary = summary.add(IngestOutcome(employee_code="3", error="boom"))
        assert (summary.with_address, summary.without_address) == (1, 2)
        assert summary.missing_address == ["2"]

    def test_dispatch_summary_counts_only_attempts_as_failed(self):
        summary = DispatchSummary()
        summary = summary.add(DispatchOutcome(record_id="a", sent=True, attempted=True))
        summary = summary.add(DispatchOutcome(record_id="b", error="no address"))
        summary = summary.add(DispatchOutcome(record_id="c", attempted=True, error="smtp down"))
        assert summary.sent == 1
        assert summary.failed == 1
        assert [e.key for e in summary.errors] == ["b", "c"]
