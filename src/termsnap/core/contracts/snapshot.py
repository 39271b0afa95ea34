"""Snapshot contracts: persisted snapshots, virtual views and query results.

Provenance
----------
A persisted :class:`Snapshot` records *how* its attributes were obtained in
``source`` and summarizes confidence in ``reconstructed``:

- ``historical``       attributes valid during the period (history provider)
- ``live_recent``      live attributes, taken shortly after the period ended
- ``earlier_snapshot`` copied from an earlier snapshot in the same container
- ``live_fallback``    live attributes at repair time (lowest confidence)

The last two are reconstructions: ``reconstructed`` is True for them.

A :class:`VirtualSnapshot` is never persisted. It is recomputed from live
attributes on every query for periods that have not concluded.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class SnapshotSource(str, Enum):
    HISTORICAL = "historical"
    LIVE_RECENT = "live_recent"
    EARLIER_SNAPSHOT = "earlier_snapshot"
    LIVE_FALLBACK = "live_fallback"

    @property
    def reconstructed(self) -> bool:
        return self in (SnapshotSource.EARLIER_SNAPSHOT, SnapshotSource.LIVE_FALLBACK)


class Snapshot(BaseModel):
    """Frozen copy of an entity's relevant attributes for a concluded period."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    period_id: str
    container_id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    period_start: datetime
    period_end: datetime
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: SnapshotSource = SnapshotSource.HISTORICAL
    reconstructed: bool = False
    is_virtual: Literal[False] = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.entity_id, self.period_id)


class VirtualSnapshot(BaseModel):
    """Live view returned for current or future periods; has no identity."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    period_id: str
    container_id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    computed_at: datetime
    reconstructed: Literal[False] = False
    is_virtual: Literal[True] = True


class SnapshotLookup(NamedTuple):
    """Pair returned by ``get_or_create``: the snapshot and whether it is virtual."""

    snapshot: Snapshot | VirtualSnapshot
    is_virtual: bool


class EffectiveAttributes(BaseModel):
    """Attributes that downstream calculators must use for (entity, period)."""

    entity_id: str
    period_id: str
    attributes: dict[str, Any]
    is_virtual: bool
    reconstructed: bool
    source: SnapshotSource | None = None


def apply_snapshot(live: Mapping[str, Any], snapshot: Snapshot | VirtualSnapshot) -> dict[str, Any]:
    """Overlay captured attributes on ``live`` to get the entity "as it was"."""
    merged = dict(live)
    merged.update(snapshot.attributes)
    return merged


__all__ = [
    "SnapshotSource",
    "Snapshot",
    "VirtualSnapshot",
    "SnapshotLookup",
    "EffectiveAttributes",
    "apply_snapshot",
]
