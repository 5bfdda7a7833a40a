"""Unit test fixtures: in-memory stores, fixed clock, recording transport."""

from __future__ import annotations

import pytest

from paydesk.core.config import AppSettings
from paydesk.services.pipeline import PayslipPipeline
from tests.fakes import FixedClock, MemoryTransport, memory_persistence


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def persistence(clock):
    return memory_persistence(clock)


@pytest.fixture
def transport():
    return MemoryTransport()


@pytest.fixture
def pipeline(persistence, transport, clock):
    return PayslipPipeline(
        settings=AppSettings(), persistence=persistence, transport=transport, clock=clock,
    )
