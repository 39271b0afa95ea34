"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from termsnap.core.facade import SnapshotFacade


def get_facade(request: Request) -> SnapshotFacade:
    """Return the façade attached at startup, or 503 when none is configured."""
    facade: SnapshotFacade | None = getattr(request.app.state, "facade", None)
    if facade is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Calendar is not configured (set TERMSNAP_CALENDAR_FILE)",
        )
    return facade


__all__ = ["get_facade"]
