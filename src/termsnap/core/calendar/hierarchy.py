"""Structural checks and lookups over a list of year containers."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from termsnap.core.contracts.calendar import Period, YearContainer
from termsnap.core.errors import HierarchyError, NotFoundError


def validate_hierarchy(containers: Sequence[YearContainer]) -> None:
    """Raise :class:`HierarchyError` if the calendar cannot be reasoned about.

    Checks that period ids are unique across containers, that each period
    points back at its container, and that periods inside one container do
    not overlap. Periods merely touching (``a.end == b.start``) are fine.
    """
    seen: dict[str, str] = {}
    for container in containers:
        for period in container.periods:
            if period.container_id != container.id:
                raise HierarchyError(
                    f"Period {period.id} claims container {period.container_id} "
                    f"but is listed under {container.id}"
                )
            if period.id in seen:
                raise HierarchyError(
                    f"Duplicate period id {period.id} in containers {seen[period.id]} "
                    f"and {container.id}"
                )
            seen[period.id] = container.id

        ordered = container.sorted_periods()
        for earlier, later in zip(ordered, ordered[1:], strict=False):
            if later.start < earlier.end:
                raise HierarchyError(
                    f"Periods {earlier.id} and {later.id} overlap in container {container.id}"
                )


def iter_periods(containers: Sequence[YearContainer]) -> Iterator[tuple[YearContainer, Period]]:
    """Yield ``(container, period)`` pairs in chronological order."""
    for container in sorted(containers, key=lambda c: c.start):
        for period in container.sorted_periods():
            yield container, period


def find_period(
    containers: Sequence[YearContainer], period_id: str
) -> tuple[YearContainer, Period]:
    """Return the container and period for ``period_id`` or raise NotFoundError."""
    for container, period in iter_periods(containers):
        if period.id == period_id:
            return container, period
    raise NotFoundError(f"Period {period_id} not found in calendar")


__all__ = ["validate_hierarchy", "iter_periods", "find_period"]
