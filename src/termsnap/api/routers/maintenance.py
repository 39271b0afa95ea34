"""
Administrative routes: daily maintenance, audits and repairs.

Endpoints
---------
- `GET /maintenance/snapshots`: describe the maintenance endpoint.
- `POST /maintenance/snapshots`: run daily maintenance (cron target).
- `GET /maintenance/snapshots/coverage`: expected vs persisted snapshots.
- `GET /maintenance/snapshots/validate`: pass/fail completeness gate.
- `GET /maintenance/snapshots/stats`: snapshot counts per period phase.
- `POST /maintenance/snapshots/repair?force=`: create missing snapshots.
- `POST /maintenance/snapshots/cleanup`: delete snapshots of non-concluded periods.

Repairs and cleanup run synchronously; large populations should use the CLI.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from termsnap.api.deps import get_facade
from termsnap.core.contracts.reports import (
    BulkCreateReport,
    CleanupReport,
    CompletenessReport,
    CoverageReport,
    ForceCreateReport,
    MaintenanceReport,
    StatusStats,
)
from termsnap.core.facade import SnapshotFacade
from termsnap.core.settings import load_settings

router = APIRouter(prefix="/maintenance/snapshots", tags=["Maintenance"])


def _maintenance_response(report: MaintenanceReport) -> JSONResponse:
    return JSONResponse(
        status_code=200 if report.success else 500,
        content=report.model_dump(mode="json"),
    )


@router.get("", summary="Describe daily maintenance")
async def describe_maintenance() -> dict[str, str]:
    return {
        "service": "Snapshot daily maintenance",
        "description": (
            "Creates snapshots for periods that concluded within the last "
            f"{load_settings().recent_window_days} days"
        ),
        "usage": "Send a POST request to this endpoint daily",
    }


@router.post("", response_model=MaintenanceReport, summary="Run daily maintenance")
def run_maintenance(facade: SnapshotFacade = Depends(get_facade)) -> JSONResponse:
    return _maintenance_response(facade.run_daily_maintenance())


@router.get("/coverage", response_model=CoverageReport)
def get_coverage(facade: SnapshotFacade = Depends(get_facade)) -> CoverageReport:
    return facade.coverage()


@router.get("/validate", response_model=CompletenessReport)
def get_validation(facade: SnapshotFacade = Depends(get_facade)) -> CompletenessReport:
    return facade.validate()


@router.get("/stats", response_model=StatusStats)
def get_stats(facade: SnapshotFacade = Depends(get_facade)) -> StatusStats:
    return facade.stats()


@router.post("/repair", response_model=BulkCreateReport | ForceCreateReport)
def post_repair(
    force: bool = Query(default=False, description="Accept reconstructed snapshots"),
    facade: SnapshotFacade = Depends(get_facade),
) -> BulkCreateReport | ForceCreateReport:
    return facade.repair(force=force)


@router.post("/cleanup", response_model=CleanupReport)
def post_cleanup(facade: SnapshotFacade = Depends(get_facade)) -> CleanupReport:
    return facade.cleanup()


__all__ = ["router"]
