"""Create PayDesk DynamoDB tables and optionally load an employee registry.

Usage:
    python scripts/create_tables.py --endpoint-url http://localhost:4566
    python scripts/create_tables.py --table-suffix -dev --registry employees.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

import boto3

TABLE_DEFINITIONS: list[dict[str, Any]] = [
    {"name": "paydesk-employees"},
    {"name": "paydesk-payslips"},
    {"name": "paydesk-dispatch-log"},
    {"name": "paydesk-batches"},
]


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create all PayDesk tables. Skips if table already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for defn in TABLE_DEFINITIONS:
        table_name = f"{defn['name']}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"  Created table {table_name}")


def load_registry(path: Path, suffix: str, region: str, endpoint_url: str | None) -> None:
    """Import an employee registry CSV into the employees table."""
    from paydesk.persistence.dynamodb_backend import DynamoDBEmployeeStore
    from paydesk.services.registry import RegistryImporter

    store = DynamoDBEmployeeStore(table_suffix=suffix, region=region, endpoint_url=endpoint_url)
    summary = RegistryImporter(store).import_csv(path.read_text(encoding="utf-8-sig"))
    print(f"  Registry: {summary.created} created, {summary.updated} updated, {len(summary.errors)} errors")
    for error in summary.errors:
        print(f"    {error.key}: {error.message}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create DynamoDB tables for PayDesk")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="ap-northeast-2", help="AWS region")
    parser.add_argument("--registry", type=Path, default=None, help="Employee registry CSV to import")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    if args.registry is not None:
        print("Importing registry...")
        load_registry(args.registry, args.table_suffix, args.region, args.endpoint_url)

    print("Done!")


if __name__ == "__main__":
    main()
