"""Pytest configuration and shared fixtures for hearing conflict tests.

Provides common fixtures for:
- A hearing factory with realistic defaults
- In-memory stores, client registries and gateways on a fixed clock
- A resolution workflow bound to a gateway
"""

from datetime import date, datetime, time
from typing import Callable
from zoneinfo import ZoneInfo

import pytest

from hearing_scheduler.control.gateway import SchedulingGateway
from hearing_scheduler.control.workflow import OverrideResolutionWorkflow
from hearing_scheduler.core.hearing import Hearing, HearingStatus
from hearing_scheduler.data.clients import InMemoryClientRegistry
from hearing_scheduler.data.store import InMemoryHearingStore

# Gateway clock for all tests: hearings in March 2025 are in the future
FIXED_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=ZoneInfo("Asia/Kolkata"))
HEARING_DAY = date(2025, 3, 14)


# Test markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line(
        "markers", "integration: Integration tests for multi-component workflows"
    )
    config.addinivalue_line(
        "markers", "edge_case: Edge case and boundary condition tests"
    )
    config.addinivalue_line("markers", "failure: Failure scenario tests")
    config.addinivalue_line("markers", "concurrency: Concurrent submission tests")


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


@pytest.fixture
def make_hearing() -> Callable[..., Hearing]:
    """Factory for hearings with sensible defaults.

    Returns:
        Callable taking hearing_id, optional "HH:MM" time and any Hearing field
    """
    def _make(hearing_id: str, at: str = "10:00", **fields) -> Hearing:
        defaults = dict(
            hearing_id=hearing_id,
            case_number=f"CASE-{hearing_id}",
            client_name=f"Client {hearing_id}",
            court_name="City Civil Court",
            hearing_date=HEARING_DAY,
            hearing_time=_parse_hhmm(at),
            status=HearingStatus.ACTIVE,
        )
        defaults.update(fields)
        return Hearing(**defaults)

    return _make


@pytest.fixture
def store() -> InMemoryHearingStore:
    """Empty in-memory store."""
    return InMemoryHearingStore()


@pytest.fixture
def registry() -> InMemoryClientRegistry:
    return InMemoryClientRegistry(["Sharma Textiles"])


@pytest.fixture
def gateway(store) -> SchedulingGateway:
    """Gateway over the `store` fixture with a fixed clock."""
    return SchedulingGateway(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def workflow(gateway) -> OverrideResolutionWorkflow:
    return OverrideResolutionWorkflow(gateway, actor_id="advocate-7")


@pytest.fixture
def form() -> dict:
    """Raw hearing form payload for a new hearing on HEARING_DAY at 10:30."""
    return {
        "hearing_id": "H-NEW",
        "case_number": "OS-2025-118",
        "client_name": "Mehta Exports",
        "court_name": "City Civil Court",
        "hearing_date": HEARING_DAY.isoformat(),
        "hearing_time": "10:30",
        "status": "active",
    }


@pytest.fixture
def hearing_day() -> date:
    return HEARING_DAY


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
