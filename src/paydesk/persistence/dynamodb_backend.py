"""DynamoDB backends for employees, payslips, dispatch log and batches.

Uniqueness lives in the primary keys: employees are keyed by an id derived
from the employee code, payslips by an id derived from (employee, period).
Creation races and double transitions are settled by condition
expressions inside DynamoDB, never by read-then-write in Python.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from paydesk.core.clock import SystemClock
from paydesk.core.exceptions import EmployeeNotFoundError, StorageError
from paydesk.models.employee import Employee, EmployeeProfile, employee_id_for
from paydesk.models.payslip import FINANCIAL_FIELDS, PayslipRecord, UpsertResult, record_id_for
from paydesk.models.pipeline import DispatchLogEntry, DispatchStatus, IngestionBatch

EMPLOYEES_TABLE = "paydesk-employees"
PAYSLIPS_TABLE = "paydesk-payslips"
DISPATCH_LOG_TABLE = "paydesk-dispatch-log"
BATCHES_TABLE = "paydesk-batches"

_CONDITION_FAILED = "ConditionalCheckFailedException"


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, Decimal):
            out[k] = int(v) if v == int(v) else float(v)
        elif isinstance(v, dict):
            out[k] = _decode_decimals(v)
        else:
            out[k] = v
    return out


def _encode(value: Any) -> Any:
    """Dates and timestamps are stored as ISO strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _condition_failed(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == _CONDITION_FAILED


def _update_expression(values: dict[str, Any], keep: dict[str, Any] | None = None):
    """Build SET clauses; ``keep`` attributes are only written when absent."""
    names: dict[str, str] = {}
    attr_values: dict[str, Any] = {}
    clauses: list[str] = []
    for i, (name, value) in enumerate(values.items()):
        names[f"#v{i}"] = name
        attr_values[f":v{i}"] = _encode(value)
        clauses.append(f"#v{i} = :v{i}")
    for i, (name, value) in enumerate((keep or {}).items()):
        names[f"#k{i}"] = name
        attr_values[f":k{i}"] = _encode(value)
        clauses.append(f"#k{i} = if_not_exists(#k{i}, :k{i})")
    return "SET " + ", ".join(clauses), names, attr_values


class _DynamoBackend:
    """Shared table access and error wrapping."""

    def __init__(self, table_suffix: str = "", region: str = "ap-northeast-2",
                 endpoint_url: str | None = None, clock: Any = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        self._clock = clock or SystemClock()
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    def _get_item(self, table_base: str, pk: str, sk: str) -> dict[str, Any] | None:
        try:
            resp = self._table(table_base).get_item(Key={"PK": pk, "SK": sk})
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB get failed for {pk!r}: {exc}") from exc
        item = resp.get("Item")
        return _decode_decimals(item) if item else None

    def _scan(self, table_base: str, condition: Any = None) -> list[dict[str, Any]]:
        """Full paginated scan, optionally filtered."""
        tbl = self._table(table_base)
        kwargs: dict[str, Any] = {}
        if condition is not None:
            kwargs["FilterExpression"] = condition
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = tbl.scan(**kwargs)
                items.extend(_decode_decimals(i) for i in resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB scan of {table_base!r} failed: {exc}") from exc
        return items


class DynamoDBEmployeeStore(_DynamoBackend):
    """Production IEmployeeStore. PK=EMPLOYEE#{employee_id}, SK=PROFILE."""

    @staticmethod
    def _key(employee_id: str) -> dict[str, str]:
        return {"PK": f"EMPLOYEE#{employee_id}", "SK": "PROFILE"}

    @staticmethod
    def _to_model(item: dict[str, Any]) -> Employee:
        return Employee.model_validate({k: v for k, v in item.items() if k not in ("PK", "SK")})

    def get(self, employee_id: str) -> Employee | None:
        key = self._key(employee_id)
        item = self._get_item(EMPLOYEES_TABLE, key["PK"], key["SK"])
        return self._to_model(item) if item else None

    def get_by_code(self, employee_code: str) -> Employee | None:
        return self.get(employee_id_for(employee_code))

    def create_if_absent(
        self, employee_code: str, name: str, hire_date: date | None
    ) -> tuple[Employee, bool]:
        employee_id = employee_id_for(employee_code)
        now = self._clock.now()
        employee = Employee(
            employee_id=employee_id, employee_code=employee_code, name=name,
            hire_date=hire_date, created_at=now, updated_at=now,
        )
        item = {
            **self._key(employee_id),
            **employee.model_dump(mode="json", exclude_none=True),
        }
        try:
            self._table(EMPLOYEES_TABLE).put_item(
                Item=item, ConditionExpression="attribute_not_exists(PK)",
            )
        except ClientError as exc:
            if not _condition_failed(exc):
                raise StorageError(f"DynamoDB put failed for employee {employee_code!r}: {exc}") from exc
            existing = self.get(employee_id)
            if existing is None:
                raise StorageError(f"Employee {employee_code!r} vanished after conflict") from exc
            return existing, False
        except BotoCoreError as exc:
            raise StorageError(f"DynamoDB put failed for employee {employee_code!r}: {exc}") from exc
        return employee, True

    def save_profile(self, profile: EmployeeProfile) -> tuple[Employee, bool]:
        employee_id = employee_id_for(profile.employee_code)
        now = self._clock.now()
        changes = {k: v for k, v in profile.model_dump(exclude={"employee_code"}).items() if v}
        defaults = {
            "employee_id": employee_id,
            "employee_code": profile.employee_code,
            "name": "",
            "is_active": True,
            "created_at": now,
        }
        keep = {k: v for k, v in defaults.items() if k not in changes}
        expression, names, values = _update_expression({**changes, "updated_at": now}, keep)
        try:
            resp = self._table(EMPLOYEES_TABLE).update_item(
                Key=self._key(employee_id),
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB update failed for employee {profile.employee_code!r}: {exc}") from exc
        old = _decode_decimals(resp.get("Attributes") or {})
        merged = {**{k: _encode(v) for k, v in defaults.items()}, **old}
        merged.update({k: _encode(v) for k, v in changes.items()})
        merged["updated_at"] = now.isoformat()
        return self._to_model(merged), not old

    def deactivate(self, employee_id: str) -> Employee:
        try:
            resp = self._table(EMPLOYEES_TABLE).update_item(
                Key=self._key(employee_id),
                UpdateExpression="SET #active = :false, #updated = :now",
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames={"#active": "is_active", "#updated": "updated_at"},
                ExpressionAttributeValues={":false": False, ":now": self._clock.now().isoformat()},
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _condition_failed(exc):
                raise EmployeeNotFoundError(employee_id) from exc
            raise StorageError(f"DynamoDB update failed for employee {employee_id!r}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"DynamoDB update failed for employee {employee_id!r}: {exc}") from exc
        return self._to_model(_decode_decimals(resp["Attributes"]))


class DynamoDBPayslipStore(_DynamoBackend):
    """Production IPayslipStore. PK=PAYSLIP#{record_id}, SK=RECORD."""

    @staticmethod
    def _key(record_id: str) -> dict[str, str]:
        return {"PK": f"PAYSLIP#{record_id}", "SK": "RECORD"}

    @staticmethod
    def _to_model(item: dict[str, Any]) -> PayslipRecord:
        return PayslipRecord.model_validate({k: v for k, v in item.items() if k not in ("PK", "SK")})

    def upsert(self, employee_id: str, period: str, amounts: dict[str, int]) -> UpsertResult:
        record_id = record_id_for(employee_id, period)
        now = self._clock.now()
        fields = {name: int(amounts.get(name, 0)) for name in FINANCIAL_FIELDS}
        expression, names, values = _update_expression(
            {"record_id": record_id, "employee_id": employee_id, "period": period,
             **fields, "updated_at": now},
            {"created_at": now},
        )
        try:
            resp = self._table(PAYSLIPS_TABLE).update_item(
                Key=self._key(record_id),
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB upsert failed for payslip {employee_id}/{period}: {exc}") from exc
        old = resp.get("Attributes") or {}
        record = PayslipRecord(
            record_id=record_id, employee_id=employee_id, period=period,
            created_at=old.get("created_at", now), updated_at=now, **fields,
        )
        return UpsertResult(record=record, created=not old)

    def get(self, record_id: str) -> PayslipRecord | None:
        key = self._key(record_id)
        item = self._get_item(PAYSLIPS_TABLE, key["PK"], key["SK"])
        return self._to_model(item) if item else None

    def find(self, employee_id: str, period: str) -> PayslipRecord | None:
        return self.get(record_id_for(employee_id, period))

    def list_by_period(self, period: str) -> list[PayslipRecord]:
        items = self._scan(PAYSLIPS_TABLE, Attr("period").eq(period))
        return [self._to_model(i) for i in items]

    def list_all(self) -> list[PayslipRecord]:
        return [self._to_model(i) for i in self._scan(PAYSLIPS_TABLE)]


class DynamoDBDispatchLogStore(_DynamoBackend):
    """Production IDispatchLogStore.

    PK=PAYSLIP#{record_id}, SK=LOG#{created_at}#{log_id}, so a descending
    query on the record's partition returns the newest attempt first.
    """

    @staticmethod
    def _key(entry: DispatchLogEntry) -> dict[str, str]:
        return {
            "PK": f"PAYSLIP#{entry.record_id}",
            "SK": f"LOG#{entry.created_at.isoformat()}#{entry.log_id}",
        }

    @staticmethod
    def _to_model(item: dict[str, Any]) -> DispatchLogEntry:
        return DispatchLogEntry.model_validate({k: v for k, v in item.items() if k not in ("PK", "SK")})

    def create_pending(self, record_id: str, recipient: str, subject: str) -> DispatchLogEntry:
        entry = DispatchLogEntry(
            log_id=uuid.uuid4().hex, record_id=record_id, recipient=recipient,
            subject=subject, created_at=self._clock.now(),
        )
        item = {
            **self._key(entry),
            **entry.model_dump(mode="json", exclude_none=True),
        }
        try:
            self._table(DISPATCH_LOG_TABLE).put_item(
                Item=item, ConditionExpression="attribute_not_exists(PK)",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB put failed for dispatch log of {record_id!r}: {exc}") from exc
        return entry

    def _transition(self, entry: DispatchLogEntry, changes: dict[str, Any]) -> DispatchLogEntry:
        expression, names, values = _update_expression(changes)
        names["#status"] = "status"
        values[":pending"] = DispatchStatus.PENDING.value
        try:
            resp = self._table(DISPATCH_LOG_TABLE).update_item(
                Key=self._key(entry),
                UpdateExpression=expression,
                ConditionExpression="#status = :pending",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _condition_failed(exc):
                raise StorageError(f"Dispatch log {entry.log_id!r} is not pending") from exc
            raise StorageError(f"DynamoDB update failed for dispatch log {entry.log_id!r}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"DynamoDB update failed for dispatch log {entry.log_id!r}: {exc}") from exc
        return self._to_model(_decode_decimals(resp["Attributes"]))

    def mark_sent(self, entry: DispatchLogEntry, sent_at: datetime) -> DispatchLogEntry:
        return self._transition(entry, {"status": DispatchStatus.SENT.value, "sent_at": sent_at})

    def mark_failed(self, entry: DispatchLogEntry, error_message: str) -> DispatchLogEntry:
        return self._transition(entry, {"status": DispatchStatus.FAILED.value, "error_message": error_message})

    def _query(self, record_id: str, limit: int | None = None) -> list[DispatchLogEntry]:
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": Key("PK").eq(f"PAYSLIP#{record_id}") & Key("SK").begins_with("LOG#"),
            "ScanIndexForward": False,
        }
        if limit is not None:
            kwargs["Limit"] = limit
        try:
            resp = self._table(DISPATCH_LOG_TABLE).query(**kwargs)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB query failed for dispatch log of {record_id!r}: {exc}") from exc
        return [self._to_model(_decode_decimals(i)) for i in resp.get("Items", [])]

    def list_for_record(self, record_id: str) -> list[DispatchLogEntry]:
        return self._query(record_id)

    def latest_for_record(self, record_id: str) -> DispatchLogEntry | None:
        entries = self._query(record_id, limit=1)
        return entries[0] if entries else None

    def list_recent(self, limit: int = 100) -> list[DispatchLogEntry]:
        """Newest attempts across all records.

        Log rows are partitioned by record, so this scans the table.
        """
        items = self._scan(DISPATCH_LOG_TABLE, Attr("SK").begins_with("LOG#"))
        entries = [self._to_model(i) for i in items]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries[:limit]


class DynamoDBBatchStore(_DynamoBackend):
    """Production IBatchStore. PK=BATCH#{batch_id}, SK=META."""

    def create(self, batch: IngestionBatch) -> IngestionBatch:
        item = {
            "PK": f"BATCH#{batch.batch_id}", "SK": "META",
            **batch.model_dump(mode="json", exclude_none=True),
        }
        try:
            self._table(BATCHES_TABLE).put_item(
                Item=item, ConditionExpression="attribute_not_exists(PK)",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB put failed for batch {batch.batch_id!r}: {exc}") from exc
        return batch

    def get(self, batch_id: str) -> IngestionBatch | None:
        item = self._get_item(BATCHES_TABLE, f"BATCH#{batch_id}", "META")
        if item is None:
            return None
        return IngestionBatch.model_validate({k: v for k, v in item.items() if k not in ("PK", "SK")})
