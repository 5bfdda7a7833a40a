"""Integration test fixtures: LocalStack DynamoDB."""

from __future__ import annotations

import os
import sys
import uuid

import boto3
import pytest

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REGION = "ap-northeast-2"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("dynamodb", region_name=REGION, endpoint_url=LOCALSTACK_URL)
        client.list_tables()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_ddb():
    """DynamoDB resource pointing at LocalStack."""
    return boto3.resource("dynamodb", region_name=REGION, endpoint_url=LOCALSTACK_URL)


@pytest.fixture(scope="session")
def created_tables(localstack_ddb):
    """Create a fresh set of tables via the table script; returns the suffix."""
    sys.path.insert(0, str(os.path.join(os.path.dirname(__file__), "..", "..", "scripts")))
    from create_tables import create_tables

    suffix = f"-inttest-{uuid.uuid4().hex[:8]}"
    create_tables(localstack_ddb, suffix=suffix)
    return suffix
