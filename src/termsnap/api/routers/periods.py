"""
Read-side routes: period status, display period and effective attributes.

Endpoints
---------
- `GET /periods/status`: full calendar position at an instant.
- `GET /periods/message`: one-line description of that position.
- `GET /periods/display`: the period a screen should show, with a reason.
- `GET /entities/{entity_id}/periods/{period_id}`: effective attributes.

All ``at`` parameters are optional ISO-8601 instants; omitted means "now"
according to the engine clock.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from termsnap.api.deps import get_facade
from termsnap.core.calendar.resolver import period_message
from termsnap.core.contracts.snapshot import EffectiveAttributes
from termsnap.core.contracts.status import DisplayPeriod, PeriodStatus
from termsnap.core.facade import SnapshotFacade

router = APIRouter(tags=["Periods"])


@router.get("/periods/status", response_model=PeriodStatus, summary="Resolve calendar position")
def get_period_status(
    at: datetime | None = Query(default=None, description="Reference instant (ISO-8601)"),
    facade: SnapshotFacade = Depends(get_facade),
) -> PeriodStatus:
    return facade.period_status(at)


@router.get("/periods/message", summary="Human-readable calendar position")
def get_period_message(
    at: datetime | None = Query(default=None),
    facade: SnapshotFacade = Depends(get_facade),
) -> dict[str, str]:
    return {"message": period_message(facade.period_status(at))}


@router.get("/periods/display", response_model=DisplayPeriod, summary="Period to display")
def get_display_period(
    at: datetime | None = Query(default=None),
    facade: SnapshotFacade = Depends(get_facade),
) -> DisplayPeriod:
    """
    Pick the period a report screen should show.

    During recess and holidays this is the most recently concluded period;
    the ``reason`` field says which rule applied.
    """
    return facade.effective_period_for_display(at=at)


@router.get(
    "/entities/{entity_id}/periods/{period_id}",
    response_model=EffectiveAttributes,
    summary="Effective attributes of an entity in a period",
)
def get_effective_attributes(
    entity_id: str,
    period_id: str,
    facade: SnapshotFacade = Depends(get_facade),
) -> EffectiveAttributes:
    """
    Historical attributes for concluded periods, live ones otherwise.

    For a concluded period without a snapshot this lazily creates one, so
    the endpoint is not strictly read-only.
    """
    return facade.effective_attributes(entity_id, period_id)


__all__ = ["router"]
