"""Temporal status contracts produced by the calendar resolver."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .calendar import Period, YearContainer


class PeriodPhase(str, Enum):
    """Where a period sits relative to a reference instant."""

    CONCLUDED = "concluded"
    CURRENT = "current"
    FUTURE = "future"


class RecessKind(str, Enum):
    MID_TERM = "mid_term"
    END_OF_CONTAINER = "end_of_container"


class RecessInterval(BaseModel):
    """An uncovered interval between periods or after the last one."""

    name: str
    start: datetime
    end: datetime
    days: int = Field(ge=0, description="Whole calendar days between start and end.")
    kind: RecessKind

    def contains(self, at: datetime) -> bool:
        return self.start <= at < self.end


class PeriodStatus(BaseModel):
    """Derived temporal status of the calendar at one reference instant.

    Fields
    ------
    current / previous / next:
        The period containing the instant and its chronological neighbours.
    in_recess:
        True inside a mid-term gap of the active container.
    in_holiday:
        True when no period is in session and the instant is not in a
        mid-term recess (before the first period, after the last one, or
        outside every container).
    recess:
        The gap interval containing the instant, when one does.
    days_until_next:
        Whole days until ``next`` starts; 0 when there is no next period.
    """

    at: datetime
    container: YearContainer | None = None
    current: Period | None = None
    previous: Period | None = None
    next: Period | None = None
    in_recess: bool = False
    in_holiday: bool = False
    recess: RecessInterval | None = None
    days_until_next: int = 0

    @property
    def in_session(self) -> bool:
        return self.current is not None


class DisplayReason(str, Enum):
    IN_SESSION = "in session"
    RECESS = "recess — showing previous period"
    HOLIDAY = "holiday — showing previous period"
    FALLBACK = "fallback — most recent concluded period"


class DisplayPeriod(BaseModel):
    """The period whose data a screen or report should show right now."""

    period: Period | None
    container: YearContainer | None
    reason: DisplayReason


__all__ = [
    "PeriodPhase",
    "RecessKind",
    "RecessInterval",
    "PeriodStatus",
    "DisplayReason",
    "DisplayPeriod",
]
