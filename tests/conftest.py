"""
Shared Test Fixtures
====================

Fake clocks and temporary directories used across the test suite.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """A monotonic clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def fixed_now():
    """UTC wall clock pinned to 2024-03-15 12:00:00."""
    moment = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def audit_dir(tmp_path: Path) -> Path:
    """Temporary audit directory (not created yet)."""
    return tmp_path / "audit"
