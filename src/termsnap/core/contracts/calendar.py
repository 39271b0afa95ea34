"""Calendar contracts: year containers, the periods they hold, and entity refs.

All instants are timezone-aware UTC datetimes. Plain ``date`` values (or
``"YYYY-MM-DD"`` strings) are accepted on input and mean midnight UTC.
Containers are half-open ``[start, end)``. A period also holds its end
instant, ``[start, end]``, and concludes only after it.

The ``is_current`` flag on :class:`Period` is an advisory cache carried over
from stored records. Nothing in the engine reads it; currentness is always
derived from the reference clock by the resolver.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from termsnap.core.clock import as_utc


def _coerce_instant(value: Any) -> Any:
    """Turn dates and date-only strings into midnight datetimes."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and len(value) == 10:
        return datetime.combine(date.fromisoformat(value), time.min)
    return value


class _Interval(BaseModel):
    """Shared half-open ``[start, end)`` behaviour."""

    start: datetime
    end: datetime

    @field_validator("start", "end", mode="before")
    @classmethod
    def _accept_dates(cls, v: Any) -> Any:
        return _coerce_instant(v)

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode="after")
    def _ordered(self) -> _Interval:
        if self.start >= self.end:
            raise ValueError(f"start ({self.start}) must be before end ({self.end})")
        return self

    def contains(self, at: datetime) -> bool:
        """Return True when ``at`` falls inside ``[start, end)``."""
        return self.start <= at < self.end


class Period(_Interval):
    """A bounded interval inside a year container (e.g. an academic term)."""

    id: str = Field(description="Stable period identifier, e.g. '2025-T1'.")
    container_id: str = Field(description="Id of the owning YearContainer.")
    name: str
    is_current: bool = Field(default=False, description="Advisory cache; never authoritative.")

    def contains(self, at: datetime) -> bool:
        """Return True when ``at`` falls inside ``[start, end]``.

        A period still holds its own end instant; it concludes only once the
        clock has moved past it.
        """
        return self.start <= at <= self.end


class YearContainer(_Interval):
    """Top-level time range grouping an ordered set of periods."""

    id: str
    name: str
    periods: list[Period] = Field(default_factory=list)

    def sorted_periods(self) -> list[Period]:
        """Return periods in chronological order."""
        return sorted(self.periods, key=lambda p: p.start)

    def find(self, period_id: str) -> Period | None:
        for period in self.periods:
            if period.id == period_id:
                return period
        return None


class EntityRef(BaseModel):
    """Identity of a snapshotted entity (e.g. a pupil).

    ``enrolled_at`` is optional; when present, periods that started before it
    are not expected to hold a snapshot for this entity.
    """

    id: str
    enrolled_at: datetime | None = None

    @field_validator("enrolled_at", mode="before")
    @classmethod
    def _accept_dates(cls, v: Any) -> Any:
        return _coerce_instant(v)

    @field_validator("enrolled_at")
    @classmethod
    def _to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    def expects(self, period: Period) -> bool:
        """Return True if this entity should hold a snapshot for ``period``."""
        return self.enrolled_at is None or period.start >= self.enrolled_at


__all__ = ["Period", "YearContainer", "EntityRef"]
