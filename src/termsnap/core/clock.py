"""Injectable reference clock.

Every temporal decision in the engine is taken against an explicit instant.
Callers pass a :data:`Clock` (a zero-argument callable) so tests and "as of"
queries can pin time; production code uses :func:`utc_now`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize ``value`` to aware UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def fixed_clock(at: datetime) -> Clock:
    """Return a clock frozen at ``at``."""
    frozen = as_utc(at)
    return lambda: frozen


__all__ = ["Clock", "utc_now", "as_utc", "fixed_clock"]
