"""
Snapshot store contract.

The store is a plain keyed persistence layer: ``(entity_id, period_id)`` →
:class:`~termsnap.core.contracts.snapshot.Snapshot`. It holds no business
rules and trusts callers to write only for concluded periods.

The one rule it *does* enforce is uniqueness: ``put`` must be an atomic
check-and-set that raises :class:`~termsnap.core.errors.ConflictError` when the
key exists (unless ``overwrite=True``). Lazy creation relies on this to stay
idempotent under concurrent callers without a distributed lock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime

from termsnap.core.calendar.hierarchy import iter_periods
from termsnap.core.calendar.resolver import classify_period
from termsnap.core.contracts.calendar import YearContainer
from termsnap.core.contracts.snapshot import Snapshot
from termsnap.core.contracts.status import PeriodPhase

SnapshotKey = tuple[str, str]


class SnapshotStore(ABC):
    """Abstract keyed store for persisted snapshots."""

    @abstractmethod
    def get(self, entity_id: str, period_id: str) -> Snapshot | None:
        """Return the snapshot for the key, or None."""

    @abstractmethod
    def put(self, snapshot: Snapshot, *, overwrite: bool = False) -> None:
        """Persist ``snapshot``; raise ConflictError if the key exists and not ``overwrite``."""

    @abstractmethod
    def delete(self, entity_id: str, period_id: str) -> None:
        """Remove the snapshot; raise NotFoundError if it does not exist."""

    @abstractmethod
    def list_by_period(self, period_id: str) -> list[Snapshot]:
        """Return every snapshot stored for ``period_id``."""

    @abstractmethod
    def list_by_entity(self, entity_id: str) -> list[Snapshot]:
        """Return every snapshot stored for ``entity_id``."""

    def get_many(self, keys: Iterable[SnapshotKey]) -> dict[SnapshotKey, Snapshot]:
        """Batched lookup; only keys that exist appear in the result."""
        found: dict[SnapshotKey, Snapshot] = {}
        for entity_id, period_id in keys:
            snap = self.get(entity_id, period_id)
            if snap is not None:
                found[(entity_id, period_id)] = snap
        return found

    def count_by_period_status(
        self, containers: Sequence[YearContainer], at: datetime
    ) -> dict[PeriodPhase, int]:
        """Count stored snapshots grouped by the phase of their period at ``at``."""
        counts = {phase: 0 for phase in PeriodPhase}
        for _, period in iter_periods(containers):
            counts[classify_period(period, at)] += len(self.list_by_period(period.id))
        return counts


__all__ = ["SnapshotStore", "SnapshotKey"]
