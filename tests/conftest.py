"""
Pytest configuration and fixtures for route overlay and analytics tests.
"""

import pytest
from datetime import date
from pathlib import Path

from components.analytics.dataset import load_sample_records
from components.analytics.models import HourlyTrafficRecord
from components.maps.geometry import Coordinate, RouteSegment


class ManualExecutor:
    """Executor that queues submitted calls until the test runs them."""

    def __init__(self):
        self.submitted = []
        self.shut_down = False

    def submit(self, fn, *args, **kwargs):
        if self.shut_down:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.submitted.append((fn, args, kwargs))

    def run_all(self):
        pending, self.submitted = self.submitted, []
        for fn, args, kwargs in pending:
            fn(*args, **kwargs)
        return len(pending)

    def shutdown(self, wait=True, cancel_futures=False):
        self.shut_down = True


class StubRoutingProvider:
    """Routing provider returning a fixed three-point polyline per request."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def resolve(self, start, end):
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        mid = Coordinate((start.latitude + end.latitude) / 2 + 0.001,
                         (start.longitude + end.longitude) / 2)
        return (start, mid, end)


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def routing_provider():
    return StubRoutingProvider()


@pytest.fixture
def failing_provider():
    return StubRoutingProvider(error=RuntimeError("routing service unavailable"))


@pytest.fixture
def sample_segment():
    """Jakarta - Alam Sutera segment at a medium volume."""
    return RouteSegment(
        Coordinate(-6.29816, 106.70786),
        Coordinate(-6.29894, 106.69725),
        3717.5,
        "jakarta-alam-sutera"
    )


@pytest.fixture
def sample_records():
    """Bundled sample table: 1 July 2025, two slots, twelve routes."""
    return load_sample_records()


@pytest.fixture
def multi_month_records():
    """Small table spanning two months and two routes."""
    return [
        HourlyTrafficRecord("1 July 2025", "00.00 - 01.00", "bintaro-out", 100, 20, 30),
        HourlyTrafficRecord("1 July 2025", "01.00 - 02.00", "bintaro-out", 50, 10, 0),
        HourlyTrafficRecord("15 July 2025", "00.00 - 01.00", "jakarta-alam-sutera", 200, 0, 0),
        HourlyTrafficRecord("2 August 2025", "00.00 - 01.00", "bintaro-out", 10, 10, 10),
        HourlyTrafficRecord("2 August 2025", "01.00 - 02.00", "jakarta-alam-sutera", 40, 5, 5),
    ]


@pytest.fixture
def july_range():
    return (date(2025, 7, 1), date(2025, 7, 31))


@pytest.fixture
def config_path(tmp_path) -> Path:
    return tmp_path / "map_overlay_config.json"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
