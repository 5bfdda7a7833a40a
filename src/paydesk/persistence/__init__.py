"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from dataclasses import dataclass

from paydesk.core.config import AppSettings
from paydesk.core.protocols import IBatchStore, IDispatchLogStore, IEmployeeStore, IPayslipStore
from paydesk.persistence.dynamodb_backend import (
    DynamoDBBatchStore,
    DynamoDBDispatchLogStore,
    DynamoDBEmployeeStore,
    DynamoDBPayslipStore,
)


@dataclass(frozen=True)
class Persistence:
    """The four stores the pipeline needs, wired together."""

    employees: IEmployeeStore
    payslips: IPayslipStore
    dispatch_log: IDispatchLogStore
    batches: IBatchStore


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up DynamoDB persistence backends from application settings."""
    if settings is None:
        settings = AppSettings()

    kwargs = {
        "table_suffix": settings.dynamodb.table_suffix,
        "region": settings.dynamodb.region,
        "endpoint_url": settings.dynamodb.endpoint_url,
    }
    return Persistence(
        employees=DynamoDBEmployeeStore(**kwargs),
        payslips=DynamoDBPayslipStore(**kwargs),
        dispatch_log=DynamoDBDispatchLogStore(**kwargs),
        batches=DynamoDBBatchStore(**kwargs),
    )
