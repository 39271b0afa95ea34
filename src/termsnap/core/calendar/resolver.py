"""
Period resolver: temporal status of a calendar at a reference instant.

Everything here is a pure function of ``(containers, at)``. Stored
``is_current`` flags are never consulted; currentness is recomputed on every
call so it can never drift from the clock.

Phases
------
A period has *concluded* at ``at`` when ``period.end < at``, is *current*
when ``start <= at <= end``, and is *future* otherwise. Only concluded
periods may ever hold a persisted snapshot.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from termsnap.core.clock import as_utc
from termsnap.core.contracts.calendar import Period, YearContainer
from termsnap.core.contracts.status import (
    DisplayPeriod,
    DisplayReason,
    PeriodPhase,
    PeriodStatus,
    RecessKind,
)

from .hierarchy import iter_periods, validate_hierarchy
from .recess import container_gaps


def classify_period(period: Period, at: datetime) -> PeriodPhase:
    """Return whether ``period`` has concluded, is current, or lies ahead."""
    at = as_utc(at)
    if period.end < at:
        return PeriodPhase.CONCLUDED
    if period.start <= at:
        return PeriodPhase.CURRENT
    return PeriodPhase.FUTURE


def concluded_periods(
    containers: Sequence[YearContainer], at: datetime
) -> list[tuple[YearContainer, Period]]:
    """All ``(container, period)`` pairs that have concluded at ``at``."""
    return [
        (container, period)
        for container, period in iter_periods(containers)
        if classify_period(period, at) is PeriodPhase.CONCLUDED
    ]


def _first_period_after(
    containers: Sequence[YearContainer], container: YearContainer
) -> Period | None:
    following = sorted(
        (c for c in containers if c.id != container.id and c.start >= container.end),
        key=lambda c: c.start,
    )
    for candidate in following:
        periods = candidate.sorted_periods()
        if periods:
            return periods[0]
    return None


def resolve(
    containers: Sequence[YearContainer],
    at: datetime,
    *,
    min_gap: timedelta | None = None,
) -> PeriodStatus:
    """Compute current/previous/next periods and recess state at ``at``.

    Raises
    ------
    HierarchyError
        If the calendar is malformed (overlapping periods, duplicate ids).
    """
    validate_hierarchy(containers)
    at = as_utc(at)

    active = next(
        (c for c in sorted(containers, key=lambda c: c.start) if c.contains(at)),
        None,
    )
    if active is None:
        return PeriodStatus(at=at, in_holiday=True)

    periods = active.sorted_periods()
    for idx, period in enumerate(periods):
        if period.contains(at):
            return _with_countdown(
                PeriodStatus(
                    at=at,
                    container=active,
                    current=period,
                    previous=periods[idx - 1] if idx > 0 else None,
                    next=periods[idx + 1] if idx + 1 < len(periods) else None,
                )
            )

    before = [p for p in periods if p.end < at]
    after = [p for p in periods if p.start > at]
    previous = before[-1] if before else None
    upcoming = after[0] if after else _first_period_after(containers, active)

    # Before the first period of the container: previous stays empty.
    if previous is None:
        return _with_countdown(
            PeriodStatus(at=at, container=active, next=upcoming, in_holiday=True)
        )

    recess = next((g for g in container_gaps(active, min_gap=min_gap) if g.contains(at)), None)
    in_recess = recess is not None and recess.kind is RecessKind.MID_TERM
    return _with_countdown(
        PeriodStatus(
            at=at,
            container=active,
            previous=previous,
            next=upcoming,
            in_recess=in_recess,
            in_holiday=not in_recess,
            recess=recess,
        )
    )


def _with_countdown(status: PeriodStatus) -> PeriodStatus:
    if status.next is not None:
        status.days_until_next = max(0, (status.next.start.date() - status.at.date()).days)
    return status


def display_period(
    containers: Sequence[YearContainer],
    at: datetime,
    *,
    min_gap: timedelta | None = None,
) -> DisplayPeriod:
    """Pick the period whose data should be shown at ``at``, with the reason."""
    status = resolve(containers, at, min_gap=min_gap)

    if status.current is not None:
        return DisplayPeriod(
            period=status.current, container=status.container, reason=DisplayReason.IN_SESSION
        )
    if status.previous is not None:
        reason = DisplayReason.RECESS if status.in_recess else DisplayReason.HOLIDAY
        return DisplayPeriod(period=status.previous, container=status.container, reason=reason)

    latest: tuple[YearContainer, Period] | None = None
    for container, period in concluded_periods(containers, status.at):
        if latest is None or period.end > latest[1].end:
            latest = (container, period)
    return DisplayPeriod(
        period=latest[1] if latest else None,
        container=latest[0] if latest else None,
        reason=DisplayReason.FALLBACK,
    )


def period_message(status: PeriodStatus) -> str:
    """Operator-facing one-line description of ``status``."""
    if status.current is not None:
        return f"Currently in {status.current.name}"
    if status.in_recess:
        if status.days_until_next > 0:
            return f"Mid-term recess - {status.days_until_next} days until next period"
        return "Mid-term recess - next period starts soon"
    if status.in_holiday:
        return "Holiday period - displaying previous period data"
    return "Academic period not determined"


def with_current_flags(
    containers: Sequence[YearContainer], at: datetime
) -> list[YearContainer]:
    """Return copies of ``containers`` whose advisory ``is_current`` flags match ``at``."""
    return [
        container.model_copy(
            update={
                "periods": [
                    p.model_copy(
                        update={"is_current": classify_period(p, at) is PeriodPhase.CURRENT}
                    )
                    for p in container.periods
                ]
            }
        )
        for container in containers
    ]


__all__ = [
    "classify_period",
    "concluded_periods",
    "resolve",
    "display_period",
    "period_message",
    "with_current_flags",
]
