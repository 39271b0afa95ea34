"""Recess calculator: uncovered intervals inside a year container.

A *mid-term* recess sits between two consecutive periods whose separation is
larger than ``min_gap`` (one day by default, configurable through
``TERMSNAP_RECESS_MIN_GAP_DAYS``). An *end-of-container* recess runs from the
last period's end to the container's end, under the same threshold.
Touching or overlapping neighbours produce nothing; that is tolerated data,
not an error.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from termsnap.core.contracts.calendar import Period, YearContainer
from termsnap.core.contracts.status import RecessInterval, RecessKind
from termsnap.core.settings import load_settings


def _interval(name: str, start: datetime, end: datetime, kind: RecessKind) -> RecessInterval:
    return RecessInterval(
        name=name,
        start=start,
        end=end,
        days=(end.date() - start.date()).days,
        kind=kind,
    )


def gaps(
    periods: Sequence[Period],
    container_end: datetime | None = None,
    *,
    min_gap: timedelta | None = None,
) -> list[RecessInterval]:
    """Return the recess intervals for ``periods`` in chronological order."""
    threshold = min_gap if min_gap is not None else load_settings().recess_min_gap
    ordered = sorted(periods, key=lambda p: p.start)
    out: list[RecessInterval] = []

    for current, following in zip(ordered, ordered[1:], strict=False):
        if following.start - current.end > threshold:
            out.append(
                _interval(
                    f"Recess between {current.name} and {following.name}",
                    current.end,
                    following.start,
                    RecessKind.MID_TERM,
                )
            )

    if ordered and container_end is not None and container_end - ordered[-1].end > threshold:
        out.append(
            _interval(
                "End of year recess",
                ordered[-1].end,
                container_end,
                RecessKind.END_OF_CONTAINER,
            )
        )
    return out


def container_gaps(
    container: YearContainer, *, min_gap: timedelta | None = None
) -> list[RecessInterval]:
    """Convenience wrapper: gaps of ``container`` including the end-of-year one."""
    return gaps(container.periods, container.end, min_gap=min_gap)


__all__ = ["gaps", "container_gaps"]
