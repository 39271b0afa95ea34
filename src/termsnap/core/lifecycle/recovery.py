"""
Attribute recovery for concluded periods that lack a snapshot.

Strategies, in order:

1. **historical**        the history provider knows the attributes for the period;
                         they override the live record, which fills the rest.
2. **live_recent**       the period ended within the recent window, so live
                         attributes still describe it (bulk/maintenance only).
3. **earlier_snapshot**  copy the latest earlier snapshot in the same container.
4. **live_fallback**     use live attributes as they are now.

Strategies 3 and 4 are best-effort reconstructions. Callers that refuse them
(``allow_fallback=False``) get :class:`ReconstructionRequired` instead.
Provider failures raise :class:`ProviderUnavailableError`; an unknown entity
raises :class:`NotFoundError`. Nothing is ever fabricated from absent data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from termsnap.core.contracts.calendar import Period
from termsnap.core.contracts.snapshot import SnapshotSource
from termsnap.core.errors import (
    NotFoundError,
    ProviderUnavailableError,
    ReconstructionRequired,
    TermsnapError,
)
from termsnap.core.store.base import SnapshotStore

from .providers import HistoryProvider, LiveAttributesProvider


@dataclass(frozen=True, slots=True)
class Recovered:
    """Attributes chosen for a new snapshot and where they came from."""

    attributes: dict[str, Any]
    source: SnapshotSource


def live_attributes(provider: LiveAttributesProvider, entity_id: str) -> dict[str, Any]:
    """Call the live provider, normalizing failures into engine errors."""
    try:
        attrs = provider(entity_id)
    except TermsnapError:
        raise
    except Exception as exc:
        raise ProviderUnavailableError(
            f"Live attributes provider failed for entity {entity_id}: {exc}"
        ) from exc
    if attrs is None:
        raise NotFoundError(f"Entity {entity_id} not found")
    return dict(attrs)


def _historical(
    history: HistoryProvider | None, entity_id: str, period: Period
) -> dict[str, Any] | None:
    if history is None:
        return None
    try:
        attrs = history(entity_id, period)
    except TermsnapError:
        raise
    except Exception as exc:
        raise ProviderUnavailableError(
            f"History provider failed for entity {entity_id} in period {period.id}: {exc}"
        ) from exc
    return dict(attrs) if attrs is not None else None


def _earlier_snapshot(
    store: SnapshotStore, entity_id: str, period: Period
) -> dict[str, Any] | None:
    earlier = [
        s
        for s in store.list_by_entity(entity_id)
        if s.container_id == period.container_id and s.period_end <= period.start
    ]
    if not earlier:
        return None
    return dict(max(earlier, key=lambda s: s.period_start).attributes)


def recover_attributes(
    entity_id: str,
    period: Period,
    *,
    at: datetime,
    live: LiveAttributesProvider,
    history: HistoryProvider | None,
    store: SnapshotStore,
    recent_window: timedelta,
    allow_fallback: bool,
    trust_recent: bool,
) -> Recovered:
    """Choose the attributes to freeze for ``(entity_id, period)``.

    Historical values are laid over the live record, so history that only
    tracks some attributes (class promotions, say) still yields a complete
    snapshot.
    """
    attrs = _historical(history, entity_id, period)
    if attrs is not None:
        return Recovered(
            {**live_attributes(live, entity_id), **attrs}, SnapshotSource.HISTORICAL
        )

    if trust_recent and at - period.end <= recent_window:
        return Recovered(live_attributes(live, entity_id), SnapshotSource.LIVE_RECENT)

    if not allow_fallback:
        raise ReconstructionRequired(
            f"No historical attributes for entity {entity_id} in period {period.id}; "
            "only a best-effort reconstruction is possible"
        )

    attrs = _earlier_snapshot(store, entity_id, period)
    if attrs is not None:
        return Recovered(attrs, SnapshotSource.EARLIER_SNAPSHOT)
    return Recovered(live_attributes(live, entity_id), SnapshotSource.LIVE_FALLBACK)


__all__ = ["Recovered", "live_attributes", "recover_attributes"]
