"""Pydantic contracts shared by the calendar, store, lifecycle and API layers."""

from __future__ import annotations

from .calendar import EntityRef, Period, YearContainer
from .reports import (
    AutoCreateReport,
    BulkCreateReport,
    CleanupReport,
    CompletenessReport,
    CoverageReport,
    ForceCreateReport,
    InvariantViolation,
    ItemError,
    MaintenanceReport,
    MissingSnapshot,
    StatusStats,
)
from .snapshot import (
    EffectiveAttributes,
    Snapshot,
    SnapshotLookup,
    SnapshotSource,
    VirtualSnapshot,
    apply_snapshot,
)
from .status import (
    DisplayPeriod,
    DisplayReason,
    PeriodPhase,
    PeriodStatus,
    RecessInterval,
    RecessKind,
)

__all__ = [
    "EntityRef",
    "Period",
    "YearContainer",
    "AutoCreateReport",
    "BulkCreateReport",
    "CleanupReport",
    "CompletenessReport",
    "CoverageReport",
    "ForceCreateReport",
    "InvariantViolation",
    "ItemError",
    "MaintenanceReport",
    "MissingSnapshot",
    "StatusStats",
    "EffectiveAttributes",
    "Snapshot",
    "SnapshotLookup",
    "SnapshotSource",
    "VirtualSnapshot",
    "apply_snapshot",
    "DisplayPeriod",
    "DisplayReason",
    "PeriodPhase",
    "PeriodStatus",
    "RecessInterval",
    "RecessKind",
]
