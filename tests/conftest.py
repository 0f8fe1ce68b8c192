"""
ATIA Test Configuration

Pytest fixtures and fakes shared by all tests.
"""

import asyncio
from typing import Any

import pytest

from atia.intel.models import HealthStatus, Indicator
from atia.sync.scheduler import ManualScheduler


def build_payload(**overrides: Any) -> dict[str, Any]:
    """Build a service indicator record as the backend serializes it."""
    payload = {
        "id": "65f1c0ffee",
        "indicator": "evil.com",
        "type": "domain",
        "risk_score": 85.0,
        "reputation": "malicious",
        "sources": [
            {
                "name": "VirusTotal",
                "verdict": "malicious",
                "score": 90.0,
                "details": {"malicious": 12, "total": 90},
                "timestamp": "2024-05-01T10:00:00Z",
            },
            {
                "name": "OTX",
                "verdict": "suspicious",
                "score": 60.0,
                "details": {"pulse_count": 3},
                "timestamp": "2024-05-01T10:00:01Z",
            },
        ],
        "first_seen": "2024-05-01T10:00:00Z",
        "last_updated": "2024-05-01T10:00:02Z",
        "tags": ["phishing", "c2", "phishing"],
    }
    payload.update(overrides)
    return payload


def build_indicator(**overrides: Any) -> Indicator:
    return Indicator.from_payload(build_payload(**overrides))


class FakeServiceClient:
    """
    In-memory stand-in for ThreatIntelClient.

    Response queues hold return values or exceptions; when a queue is
    empty the default is returned. Setting a gate makes list_recent wait
    until the gate is released.
    """

    base_url = "http://atia.test"

    def __init__(self) -> None:
        self.health_responses: list[Any] = []
        self.list_responses: list[Any] = []
        self.submit_responses: list[Any] = []
        self.calls = {"health": 0, "list": 0, "submit": 0}
        self.submitted: list[tuple[str, Any]] = []
        self.list_gate: asyncio.Event | None = None
        self.closed = False

    @staticmethod
    def _next(queue: list[Any], default: Any) -> Any:
        item = queue.pop(0) if queue else default
        if isinstance(item, Exception):
            raise item
        return item

    async def check_health(self) -> HealthStatus:
        self.calls["health"] += 1
        return self._next(self.health_responses, HealthStatus("ATIA Backend", "healthy"))

    async def list_recent(self, limit: int = 50) -> tuple[Indicator, ...]:
        self.calls["list"] += 1
        if self.list_gate is not None:
            await self.list_gate.wait()
        return self._next(self.list_responses, ())

    async def submit_for_analysis(self, indicator: str, kind: Any) -> Indicator:
        self.calls["submit"] += 1
        self.submitted.append((indicator, kind))
        return self._next(
            self.submit_responses,
            build_indicator(indicator=indicator, type=getattr(kind, "value", kind)),
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeServiceClient:
    return FakeServiceClient()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def indicator_payload() -> dict[str, Any]:
    return build_payload()


@pytest.fixture
def make_payload():
    """Factory for service indicator records."""
    return build_payload


@pytest.fixture
def make_indicator():
    """Factory for parsed indicators."""
    return build_indicator
