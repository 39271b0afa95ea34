"""Tests for the recess calculator."""

from __future__ import annotations

from datetime import timedelta

from termsnap.core.calendar.recess import container_gaps, gaps
from termsnap.core.contracts.calendar import Period, YearContainer
from termsnap.core.contracts.status import RecessKind


def test_container_gaps(calendar: list[YearContainer]) -> None:
    found = container_gaps(calendar[0])
    assert [(g.name, g.days, g.kind) for g in found] == [
        ("Recess between Term 1 and Term 2", 18, RecessKind.MID_TERM),
        ("Recess between Term 2 and Term 3", 31, RecessKind.MID_TERM),
        ("End of year recess", 27, RecessKind.END_OF_CONTAINER),
    ]
    assert found[0].start == calendar[0].periods[0].end
    assert found[0].end == calendar[0].periods[1].start


def test_unordered_input_and_no_container_end(calendar: list[YearContainer]) -> None:
    shuffled = list(reversed(calendar[0].periods))
    found = gaps(shuffled)
    assert len(found) == 2
    assert all(g.kind is RecessKind.MID_TERM for g in found)


def test_touching_and_short_gaps_ignored() -> None:
    periods = [
        Period(id="a", container_id="y", name="A", start="2025-01-01", end="2025-02-01"),
        Period(id="b", container_id="y", name="B", start="2025-02-01", end="2025-03-01"),
        Period(id="c", container_id="y", name="C", start="2025-03-02", end="2025-04-01"),
    ]
    assert gaps(periods) == []
    assert len(gaps(periods, min_gap=timedelta(hours=12))) == 1


def test_no_end_recess_when_last_period_fills_container() -> None:
    container = YearContainer(
        id="y",
        name="Y",
        start="2025-01-01",
        end="2025-06-01",
        periods=[
            Period(id="a", container_id="y", name="A", start="2025-01-01", end="2025-06-01"),
        ],
    )
    assert container_gaps(container) == []
    assert gaps([]) == []
