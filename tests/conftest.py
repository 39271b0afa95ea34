"""Shared fixtures: a school calendar with mid-term gaps and a following year.

2025 container: 2025-01-01 .. 2026-01-01
    T1  2025-01-06 .. 2025-04-04
    T2  2025-04-22 .. 2025-08-01
    T3  2025-09-01 .. 2025-12-05
2026 container: 2026-01-01 .. 2027-01-01
    T1  2026-01-12 .. 2026-04-03
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from termsnap.core.contracts.calendar import Period, YearContainer
from termsnap.core.settings import load_settings


def _period(pid: str, cid: str, name: str, start: str, end: str) -> Period:
    return Period(id=pid, container_id=cid, name=name, start=start, end=end)


def _year_2025() -> YearContainer:
    return YearContainer(
        id="2025",
        name="2025",
        start="2025-01-01",
        end="2026-01-01",
        periods=[
            _period("2025-T1", "2025", "Term 1", "2025-01-06", "2025-04-04"),
            _period("2025-T2", "2025", "Term 2", "2025-04-22", "2025-08-01"),
            _period("2025-T3", "2025", "Term 3", "2025-09-01", "2025-12-05"),
        ],
    )


def _year_2026() -> YearContainer:
    return YearContainer(
        id="2026",
        name="2026",
        start="2026-01-01",
        end="2027-01-01",
        periods=[_period("2026-T1", "2026", "Term 1", "2026-01-12", "2026-04-03")],
    )


@pytest.fixture
def calendar() -> list[YearContainer]:
    """Single year container with three terms."""
    return [_year_2025()]


@pytest.fixture
def two_years() -> list[YearContainer]:
    """2025 plus the following year, listed out of order on purpose."""
    return [_year_2026(), _year_2025()]


@pytest.fixture
def utc():  # type: ignore[no-untyped-def]
    """Factory for aware UTC instants: ``utc(2025, 6, 15)``."""

    def make(year: int, month: int, day: int, hour: int = 0) -> datetime:
        return datetime(year, month, day, hour, tzinfo=UTC)

    return make


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test against default settings in the test environment."""
    for var in (
        "TERMSNAP_RECESS_MIN_GAP_DAYS",
        "TERMSNAP_RECENT_WINDOW_DAYS",
        "TERMSNAP_CALENDAR_FILE",
        "TERMSNAP_ENTITIES_FILE",
        "TERMSNAP_STORE_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TERMSNAP_ENV", "test")
    load_settings.cache_clear()
