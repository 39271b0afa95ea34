"""
In-memory snapshot store.

A dictionary keyed by ``(entity_id, period_id)`` guarded by a lock so that
``put`` is an atomic check-and-set across threads. Snapshots are deep-copied
on the way in and out, so callers never hold a reference into the store.
Every mutation bumps a revision counter, which tests use to assert that a
read issued no write.

This store is volatile; use :class:`~termsnap.core.store.json_store.JsonSnapshotStore`
when snapshots must survive a restart.
"""

from __future__ import annotations

import threading

from termsnap.core.contracts.snapshot import Snapshot
from termsnap.core.errors import ConflictError, NotFoundError

from .base import SnapshotKey, SnapshotStore


class InMemorySnapshotStore(SnapshotStore):
    """
    Thread-safe dictionary-backed snapshot store.

    Attributes
    ----------
    _data : dict[SnapshotKey, Snapshot]
        The actual key-value storage.
    _rev : int
        Monotonically increasing revision counter (bumps on every mutation).
    """

    __slots__ = ("_data", "_rev", "_lock")

    def __init__(self) -> None:
        self._data: dict[SnapshotKey, Snapshot] = {}
        self._rev: int = 0
        self._lock = threading.Lock()

    def get(self, entity_id: str, period_id: str) -> Snapshot | None:
        with self._lock:
            snap = self._data.get((entity_id, period_id))
            return snap.model_copy(deep=True) if snap is not None else None

    def put(self, snapshot: Snapshot, *, overwrite: bool = False) -> None:
        with self._lock:
            if snapshot.key in self._data and not overwrite:
                raise ConflictError(snapshot.entity_id, snapshot.period_id)
            self._data[snapshot.key] = snapshot.model_copy(deep=True)
            self._rev += 1

    def delete(self, entity_id: str, period_id: str) -> None:
        with self._lock:
            if self._data.pop((entity_id, period_id), None) is None:
                raise NotFoundError(f"No snapshot for entity {entity_id} in period {period_id}")
            self._rev += 1

    def list_by_period(self, period_id: str) -> list[Snapshot]:
        with self._lock:
            return [
                s.model_copy(deep=True)
                for (_, pid), s in sorted(self._data.items())
                if pid == period_id
            ]

    def list_by_entity(self, entity_id: str) -> list[Snapshot]:
        with self._lock:
            return [
                s.model_copy(deep=True)
                for (eid, _), s in sorted(self._data.items())
                if eid == entity_id
            ]

    @property
    def revision(self) -> int:
        """Number of mutations applied so far."""
        return self._rev

    def keys(self) -> tuple[SnapshotKey, ...]:
        """Return the current keys as a sorted tuple (stable for tests)."""
        with self._lock:
            return tuple(sorted(self._data))

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._data)


__all__ = ["InMemorySnapshotStore"]
