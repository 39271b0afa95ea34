"""Capabilities the lifecycle manager consumes from collaborators.

- :data:`LiveAttributesProvider`  current attributes of an entity, or None if unknown.
- :data:`HistoryProvider`         attributes valid during a period, or None if unknown.
- :class:`CancelToken`            anything with ``is_set()`` (e.g. ``threading.Event``).

:class:`AssignmentHistory` is a ready-made history provider built from dated
attribute changes, such as a pupil's class promotions.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel, Field, field_validator

from termsnap.core.clock import as_utc
from termsnap.core.contracts.calendar import Period

LiveAttributesProvider = Callable[[str], Mapping[str, Any] | None]
HistoryProvider = Callable[[str, Period], Mapping[str, Any] | None]


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class AttributeChange(BaseModel):
    """Attribute values that took effect for an entity at ``effective_at``."""

    effective_at: datetime
    attributes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("effective_at")
    @classmethod
    def _to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class AssignmentHistory:
    """History provider replaying dated attribute changes.

    The attributes for a period are those in effect just before it ended:
    every change with ``effective_at < period.end`` is applied in order. If no
    change precedes the period's end, the history is silent and None is
    returned so that callers fall back to other strategies.
    """

    def __init__(self, changes: Mapping[str, Sequence[AttributeChange]] | None = None) -> None:
        self._changes: dict[str, list[AttributeChange]] = {
            entity_id: sorted(items, key=lambda c: c.effective_at)
            for entity_id, items in (changes or {}).items()
        }

    def record(self, entity_id: str, change: AttributeChange) -> None:
        items = self._changes.setdefault(entity_id, [])
        items.append(change)
        items.sort(key=lambda c: c.effective_at)

    def __call__(self, entity_id: str, period: Period) -> dict[str, Any] | None:
        applied: dict[str, Any] | None = None
        for change in self._changes.get(entity_id, []):
            if change.effective_at >= period.end:
                break
            applied = {**(applied or {}), **change.attributes}
        return applied


def live_from_mapping(records: Mapping[str, Mapping[str, Any]]) -> LiveAttributesProvider:
    """Wrap an ``entity_id -> attributes`` mapping as a live provider."""

    def provider(entity_id: str) -> Mapping[str, Any] | None:
        return records.get(entity_id)

    return provider


__all__ = [
    "LiveAttributesProvider",
    "HistoryProvider",
    "CancelToken",
    "AttributeChange",
    "AssignmentHistory",
    "live_from_mapping",
]
