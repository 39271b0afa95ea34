"""Snapshot persistence adapters."""

from __future__ import annotations

from .base import SnapshotKey, SnapshotStore
from .json_store import JsonSnapshotStore
from .memory import InMemorySnapshotStore

__all__ = ["SnapshotKey", "SnapshotStore", "InMemorySnapshotStore", "JsonSnapshotStore"]
