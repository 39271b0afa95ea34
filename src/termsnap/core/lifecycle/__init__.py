"""Snapshot lifecycle: lazy creation, audits and repairs."""

from __future__ import annotations

from .manager import CalendarSource, SnapshotLifecycleManager
from .providers import (
    AssignmentHistory,
    AttributeChange,
    CancelToken,
    HistoryProvider,
    LiveAttributesProvider,
    live_from_mapping,
)
from .recovery import Recovered, live_attributes, recover_attributes

__all__ = [
    "CalendarSource",
    "SnapshotLifecycleManager",
    "AssignmentHistory",
    "AttributeChange",
    "CancelToken",
    "HistoryProvider",
    "LiveAttributesProvider",
    "live_from_mapping",
    "Recovered",
    "live_attributes",
    "recover_attributes",
]
