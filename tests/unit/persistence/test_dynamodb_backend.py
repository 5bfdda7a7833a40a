"""Unit tests for the DynamoDB backends using moto."""

from __future__ import annotations

from datetime import date

import boto3
import pytest
from moto import mock_aws

from paydesk.core.exceptions import EmployeeNotFoundError, StorageError
from paydesk.models.employee import EmployeeProfile, employee_id_for
from paydesk.models.pipeline import DispatchStatus, IngestionBatch
from paydesk.persistence.dynamodb_backend import (
    DynamoDBBatchStore,
    DynamoDBDispatchLogStore,
    DynamoDBEmployeeStore,
    DynamoDBPayslipStore,
)
from tests.fakes import SAMPLE_AMOUNTS, FixedClock

TABLE_SUFFIX = "-test"
REGION = "ap-northeast-2"

# ---------- helpers ----------

def _create_table(client, name: str, pk: str = "PK", sk: str = "SK"):
    """Create a DynamoDB table with PK/SK key schema."""
    client.create_table(
        TableName=name,
        KeySchema=[
            {"AttributeName": pk, "KeyType": "HASH"},
            {"AttributeName": sk, "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": pk, "AttributeType": "S"},
            {"AttributeName": sk, "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


# ---------- fixtures ----------

@pytest.fixture
def aws():
    with mock_aws():
        ddb = boto3.resource("dynamodb", region_name=REGION)
        client = boto3.client("dynamodb", region_name=REGION)

        for name in ["paydesk-employees", "paydesk-payslips", "paydesk-dispatch-log", "paydesk-batches"]:
            _create_table(client, f"{name}{TABLE_SUFFIX}")

        yield ddb


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def employees(aws, clock):
    return DynamoDBEmployeeStore(table_suffix=TABLE_SUFFIX, region=REGION, clock=clock)


@pytest.fixture
def payslips(aws, clock):
    return DynamoDBPayslipStore(table_suffix=TABLE_SUFFIX, region=REGION, clock=clock)


@pytest.fixture
def dispatch_log(aws, clock):
    return DynamoDBDispatchLogStore(table_suffix=TABLE_SUFFIX, region=REGION, clock=clock)


@pytest.fixture
def batches(aws, clock):
    return DynamoDBBatchStore(table_suffix=TABLE_SUFFIX, region=REGION, clock=clock)


# ---------- employees ----------

class TestEmployeeStore:
    def test_create_if_absent_creates_once(self, employees):
        first, created = employees.create_if_absent("1001", "김민수", date(2022, 3, 1))
        again, created_again = employees.create_if_absent("1001", "다른이름", None)
        assert created is True
        assert created_again is False
        assert again.name == "김민수"
        assert again.hire_date == date(2022, 3, 1)
        assert again.email is None
        assert again.employee_id == first.employee_id == employee_id_for("1001")

    def test_get_by_code_missing(self, employees):
        assert employees.get_by_code("404") is None

    def test_save_profile_creates_and_merges(self, employees):
        emp, created = employees.save_profile(EmployeeProfile(
            employee_code="1001", name="김민수", email="minsu@example.com", department="개발팀",
        ))
        assert created is True
        assert emp.is_active is True

        emp, created = employees.save_profile(EmployeeProfile(employee_code="1001", position="대리"))
        assert created is False
        assert emp.position == "대리"
        assert emp.email == "minsu@example.com"
        assert employees.get_by_code("1001") == emp

    def test_save_profile_keeps_ingested_hire_date(self, employees):
        employees.create_if_absent("1001", "김민수", date(2022, 3, 1))
        emp, created = employees.save_profile(EmployeeProfile(employee_code="1001", email="m@example.com"))
        assert created is False
        assert emp.hire_date == date(2022, 3, 1)
        assert emp.name == "김민수"

    def test_deactivate(self, employees):
        emp, _ = employees.create_if_absent("1001", "김민수", None)
        assert employees.deactivate(emp.employee_id).is_active is False
        assert employees.get(emp.employee_id).is_active is False

    def test_deactivate_missing(self, employees):
        with pytest.raises(EmployeeNotFoundError):
            employees.deactivate("nobody")


# ---------- payslips ----------

class TestPayslipStore:
    def test_upsert_creates_then_overwrites(self, payslips, clock):
        eid = employee_id_for("1001")
        first = payslips.upsert(eid, "2024-12", SAMPLE_AMOUNTS)
        clock.advance(60)
        second = payslips.upsert(eid, "2024-12", {**SAMPLE_AMOUNTS, "basic_salary": 1})
        assert first.created is True
        assert second.created is False
        assert second.record.record_id == first.record.record_id
        assert second.record.created_at == first.record.created_at

        stored = payslips.get(first.record.record_id)
        assert stored.basic_salary == 1
        assert stored.net_payment == SAMPLE_AMOUNTS["net_payment"]

    def test_missing_fields_overwrite_to_zero(self, payslips):
        eid = employee_id_for("1001")
        payslips.upsert(eid, "2024-12", SAMPLE_AMOUNTS)
        payslips.upsert(eid, "2024-12", {"basic_salary": 5})
        stored = payslips.find(eid, "2024-12")
        assert stored.basic_salary == 5
        assert stored.total_payment == 0

    def test_list_by_period(self, payslips):
        payslips.upsert(employee_id_for("1001"), "2024-12", SAMPLE_AMOUNTS)
        payslips.upsert(employee_id_for("1002"), "2024-12", SAMPLE_AMOUNTS)
        payslips.upsert(employee_id_for("1001"), "2024-11", SAMPLE_AMOUNTS)
        assert len(payslips.list_by_period("2024-12")) == 2
        assert payslips.list_by_period("2023-01") == []

    def test_list_all(self, payslips):
        payslips.upsert(employee_id_for("1001"), "2024-12", SAMPLE_AMOUNTS)
        payslips.upsert(employee_id_for("1001"), "2024-11", SAMPLE_AMOUNTS)
        assert sorted(r.period for r in payslips.list_all()) == ["2024-11", "2024-12"]

    def test_get_missing(self, payslips):
        assert payslips.get("nope") is None


# ---------- dispatch log ----------

class TestDispatchLogStore:
    def test_pending_then_sent(self, dispatch_log, clock):
        entry = dispatch_log.create_pending("r1", "minsu@example.com", "[2024-12] 급여명세서 안내")
        assert entry.status is DispatchStatus.PENDING
        sent = dispatch_log.mark_sent(entry, clock.now())
        assert sent.status is DispatchStatus.SENT
        assert sent.sent_at == clock.now()
        assert dispatch_log.latest_for_record("r1") == sent

    def test_failed_keeps_message(self, dispatch_log):
        entry = dispatch_log.create_pending("r1", "a@example.com", "s")
        failed = dispatch_log.mark_failed(entry, "550 rejected")
        assert failed.status is DispatchStatus.FAILED
        assert failed.error_message == "550 rejected"

    def test_transition_happens_once(self, dispatch_log, clock):
        entry = dispatch_log.create_pending("r1", "a@example.com", "s")
        dispatch_log.mark_failed(entry, "boom")
        with pytest.raises(StorageError):
            dispatch_log.mark_sent(entry, clock.now())

    def test_history_newest_first(self, dispatch_log, clock):
        first = dispatch_log.create_pending("r1", "a@example.com", "s")
        clock.advance(10)
        second = dispatch_log.create_pending("r1", "a@example.com", "s")
        dispatch_log.create_pending("r2", "b@example.com", "s")
        history = dispatch_log.list_for_record("r1")
        assert [e.log_id for e in history] == [second.log_id, first.log_id]
        assert dispatch_log.latest_for_record("r1").log_id == second.log_id
        assert dispatch_log.latest_for_record("r3") is None

    def test_recent_spans_records(self, dispatch_log, clock):
        older = dispatch_log.create_pending("r1", "a@example.com", "s")
        clock.advance(10)
        newer = dispatch_log.create_pending("r2", "b@example.com", "s")
        assert [e.log_id for e in dispatch_log.list_recent()] == [newer.log_id, older.log_id]
        assert [e.log_id for e in dispatch_log.list_recent(limit=1)] == [newer.log_id]


# ---------- batches ----------

class TestBatchStore:
    def test_create_and_get(self, batches, clock):
        batch = IngestionBatch(
            batch_id="b1", source_label="december.pdf", period="2024-12",
            total_pages=10, parsed_count=8, created_at=clock.now(),
        )
        batches.create(batch)
        assert batches.get("b1") == batch

    def test_batches_are_write_once(self, batches):
        batch = IngestionBatch(batch_id="b1", source_label="x")
        batches.create(batch)
        with pytest.raises(StorageError):
            batches.create(batch)
