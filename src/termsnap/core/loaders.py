"""
JSON data sources for the CLI and the HTTP API.

Calendar file
-------------
A JSON list of year containers::

    [{"id": "2025", "name": "2025", "start": "2025-01-01", "end": "2026-01-01",
      "periods": [{"id": "2025-T1", "container_id": "2025", "name": "Term 1",
                   "start": "2025-01-01", "end": "2025-05-01"}]}]

Entities file
-------------
A JSON object with an ``entities`` list. Each record carries the live
attributes and, optionally, an enrolment instant and dated attribute changes::

    {"entities": [{"id": "p1", "enrolled_at": "2024-01-10T00:00:00Z",
                   "attributes": {"class_id": "P5", "section": "Day"},
                   "history": [{"effective_at": "2024-01-10T00:00:00Z",
                                "attributes": {"class_id": "P4"}}]}]}
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from termsnap.core.clock import Clock
from termsnap.core.contracts.calendar import EntityRef, YearContainer
from termsnap.core.facade import SnapshotFacade
from termsnap.core.lifecycle.manager import SnapshotLifecycleManager
from termsnap.core.lifecycle.providers import AssignmentHistory, AttributeChange
from termsnap.core.store.json_store import JsonSnapshotStore

_CALENDAR = TypeAdapter(list[YearContainer])


class EntityRecord(BaseModel):
    id: str
    enrolled_at: datetime | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    history: list[AttributeChange] = Field(default_factory=list)


class EntityDirectory:
    """Entity population loaded from a file; acts as the live provider."""

    def __init__(self, records: list[EntityRecord]) -> None:
        self._records = {r.id: r for r in records}
        self.history = AssignmentHistory(
            {r.id: r.history for r in records if r.history}
        )

    def refs(self) -> list[EntityRef]:
        return [EntityRef(id=r.id, enrolled_at=r.enrolled_at) for r in self._records.values()]

    def __call__(self, entity_id: str) -> Mapping[str, Any] | None:
        record = self._records.get(entity_id)
        return record.attributes if record is not None else None

    def __len__(self) -> int:
        return len(self._records)


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_calendar(path: Path) -> list[YearContainer]:
    """Parse a calendar file into validated containers."""
    return _CALENDAR.validate_python(_read_json(path))


def load_entities(path: Path) -> EntityDirectory:
    """Parse an entities file into an :class:`EntityDirectory`."""
    data = _read_json(path)
    raw = data.get("entities", []) if isinstance(data, dict) else data
    return EntityDirectory([EntityRecord.model_validate(item) for item in raw])


def build_facade(
    calendar_file: Path,
    entities_file: Path | None,
    store_dir: Path | None = None,
    *,
    clock: Clock | None = None,
) -> SnapshotFacade:
    """Wire a façade over file-based calendar/entities and a JSON store."""
    containers = load_calendar(calendar_file)
    directory = load_entities(entities_file) if entities_file else EntityDirectory([])
    manager = SnapshotLifecycleManager(
        JsonSnapshotStore(store_dir),
        directory,
        history=directory.history,
        calendar=lambda: containers,
        clock=clock,
    )
    return SnapshotFacade(manager, calendar=lambda: containers, entities=directory.refs)


__all__ = [
    "EntityRecord",
    "EntityDirectory",
    "load_calendar",
    "load_entities",
    "build_facade",
]
