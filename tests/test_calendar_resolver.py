"""Tests for period resolution: current / previous / next, recess and holidays.

All scenarios use the shared ``calendar`` fixture (terms ending 2025-04-04,
2025-08-01 and 2025-12-05) and pin the reference instant explicitly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest

from termsnap.core.calendar.hierarchy import find_period, iter_periods, validate_hierarchy
from termsnap.core.calendar.resolver import (
    classify_period,
    concluded_periods,
    display_period,
    period_message,
    resolve,
    with_current_flags,
)
from termsnap.core.contracts.calendar import Period, YearContainer
from termsnap.core.contracts.status import DisplayReason, PeriodPhase, RecessKind
from termsnap.core.errors import HierarchyError, NotFoundError


def test_in_session(calendar: list[YearContainer], utc: Any) -> None:
    status = resolve(calendar, utc(2025, 6, 15))
    assert status.current is not None and status.current.id == "2025-T2"
    assert status.previous is not None and status.previous.id == "2025-T1"
    assert status.next is not None and status.next.id == "2025-T3"
    assert status.in_session
    assert not status.in_recess and not status.in_holiday
    assert status.days_until_next == 78


def test_mid_term_recess(calendar: list[YearContainer], utc: Any) -> None:
    status = resolve(calendar, utc(2025, 4, 10))
    assert status.current is None
    assert status.in_recess and not status.in_holiday
    assert status.previous is not None and status.previous.id == "2025-T1"
    assert status.next is not None and status.next.id == "2025-T2"
    assert status.recess is not None
    assert status.recess.kind is RecessKind.MID_TERM
    assert status.recess.days == 18
    assert status.days_until_next == 12


def test_period_concludes_only_after_its_end(calendar: list[YearContainer], utc: Any) -> None:
    t1 = calendar[0].periods[0]
    assert classify_period(t1, t1.end) is PeriodPhase.CURRENT
    assert classify_period(t1, t1.end + timedelta(seconds=1)) is PeriodPhase.CONCLUDED

    at_end = resolve(calendar, t1.end)
    assert at_end.current is not None and at_end.current.id == "2025-T1"
    assert not at_end.in_recess
    assert concluded_periods(calendar, t1.end) == []

    after = resolve(calendar, utc(2025, 4, 4, 1))
    assert after.current is None
    assert after.in_recess
    assert after.previous is not None and after.previous.id == "2025-T1"


def test_after_last_period_is_holiday(calendar: list[YearContainer], utc: Any) -> None:
    status = resolve(calendar, utc(2025, 12, 20))
    assert status.in_holiday and not status.in_recess
    assert status.previous is not None and status.previous.id == "2025-T3"
    assert status.next is None
    assert status.recess is not None
    assert status.recess.kind is RecessKind.END_OF_CONTAINER
    assert status.recess.days == 27


def test_next_period_crosses_into_following_container(
    two_years: list[YearContainer], utc: Any
) -> None:
    status = resolve(two_years, utc(2025, 12, 20))
    assert status.next is not None and status.next.id == "2026-T1"
    assert status.days_until_next == 23


def test_before_first_period_of_container(calendar: list[YearContainer], utc: Any) -> None:
    status = resolve(calendar, utc(2025, 1, 2))
    assert status.in_holiday
    assert status.previous is None
    assert status.next is not None and status.next.id == "2025-T1"
    assert status.days_until_next == 4


def test_outside_every_container(calendar: list[YearContainer], utc: Any) -> None:
    status = resolve(calendar, utc(2024, 6, 1))
    assert status.container is None
    assert status.current is None and status.previous is None and status.next is None
    assert status.in_holiday


def test_small_gap_is_not_a_recess(utc: Any) -> None:
    container = YearContainer(
        id="y",
        name="Y",
        start="2025-01-01",
        end="2025-12-31",
        periods=[
            Period(id="a", container_id="y", name="A", start="2025-01-01", end="2025-03-01"),
            Period(id="b", container_id="y", name="B", start="2025-03-02", end="2025-06-01"),
        ],
    )
    status = resolve([container], utc(2025, 3, 1, 12))
    assert not status.in_recess and status.in_holiday
    assert status.previous is not None and status.previous.id == "a"

    relaxed = resolve([container], utc(2025, 3, 1, 12), min_gap=timedelta(0))
    assert relaxed.in_recess


def test_classify_and_concluded(calendar: list[YearContainer], utc: Any) -> None:
    t1, t2, t3 = calendar[0].sorted_periods()
    at = utc(2025, 6, 15)
    assert classify_period(t1, at) is PeriodPhase.CONCLUDED
    assert classify_period(t2, at) is PeriodPhase.CURRENT
    assert classify_period(t3, at) is PeriodPhase.FUTURE
    assert [p.id for _, p in concluded_periods(calendar, at)] == ["2025-T1"]
    assert len(concluded_periods(calendar, utc(2025, 12, 20))) == 3


@pytest.mark.parametrize(
    ("when", "period_id", "reason"),
    [
        ((2025, 6, 15), "2025-T2", DisplayReason.IN_SESSION),
        ((2025, 4, 10), "2025-T1", DisplayReason.RECESS),
        ((2025, 12, 20), "2025-T3", DisplayReason.HOLIDAY),
    ],
)
def test_display_period(
    calendar: list[YearContainer],
    utc: Any,
    when: tuple[int, int, int],
    period_id: str,
    reason: DisplayReason,
) -> None:
    shown = display_period(calendar, utc(*when))
    assert shown.period is not None and shown.period.id == period_id
    assert shown.reason is reason


def test_display_falls_back_to_latest_concluded(two_years: list[YearContainer], utc: Any) -> None:
    shown = display_period(two_years, utc(2026, 1, 5))
    assert shown.reason is DisplayReason.FALLBACK
    assert shown.period is not None and shown.period.id == "2025-T3"


def test_display_with_nothing_concluded(calendar: list[YearContainer], utc: Any) -> None:
    shown = display_period(calendar, utc(2024, 6, 1))
    assert shown.reason is DisplayReason.FALLBACK
    assert shown.period is None and shown.container is None


def test_period_messages(calendar: list[YearContainer], utc: Any) -> None:
    assert period_message(resolve(calendar, utc(2025, 6, 15))) == "Currently in Term 2"
    assert period_message(resolve(calendar, utc(2025, 4, 10))) == (
        "Mid-term recess - 12 days until next period"
    )
    assert period_message(resolve(calendar, utc(2025, 12, 20))) == (
        "Holiday period - displaying previous period data"
    )


def test_current_flags_are_derived_from_clock(calendar: list[YearContainer], utc: Any) -> None:
    flagged = with_current_flags(calendar, utc(2025, 6, 15))
    assert [p.is_current for p in flagged[0].sorted_periods()] == [False, True, False]
    # originals untouched
    assert not any(p.is_current for p in calendar[0].periods)


# ----- Hierarchy ----------------------------------------------------------


def test_iter_and_find(two_years: list[YearContainer]) -> None:
    assert [p.id for _, p in iter_periods(two_years)] == [
        "2025-T1",
        "2025-T2",
        "2025-T3",
        "2026-T1",
    ]
    container, period = find_period(two_years, "2025-T2")
    assert container.id == "2025" and period.name == "Term 2"
    with pytest.raises(NotFoundError):
        find_period(two_years, "1999-T1")


def _container(*periods: Period) -> YearContainer:
    return YearContainer(
        id="y", name="Y", start="2025-01-01", end="2026-01-01", periods=list(periods)
    )


def test_overlapping_periods_rejected(utc: Any) -> None:
    bad = _container(
        Period(id="a", container_id="y", name="A", start="2025-01-01", end="2025-03-01"),
        Period(id="b", container_id="y", name="B", start="2025-02-15", end="2025-06-01"),
    )
    with pytest.raises(HierarchyError):
        validate_hierarchy([bad])
    with pytest.raises(ValueError):
        resolve([bad], utc(2025, 2, 20))


def test_touching_periods_allowed() -> None:
    validate_hierarchy(
        [
            _container(
                Period(id="a", container_id="y", name="A", start="2025-01-01", end="2025-03-01"),
                Period(id="b", container_id="y", name="B", start="2025-03-01", end="2025-06-01"),
            )
        ]
    )


def test_duplicate_ids_and_wrong_owner_rejected() -> None:
    a = Period(id="a", container_id="y", name="A", start="2025-01-01", end="2025-03-01")
    with pytest.raises(HierarchyError):
        validate_hierarchy([_container(a, a.model_copy(update={"start": a.end}))])
    stray = Period(id="s", container_id="other", name="S", start="2025-04-01", end="2025-05-01")
    with pytest.raises(HierarchyError):
        validate_hierarchy([_container(stray)])
