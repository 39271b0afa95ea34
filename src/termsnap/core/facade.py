"""
Query façade: the single entry point for collaborators.

Fee calculators and report screens ask two questions:

- :meth:`SnapshotFacade.effective_attributes`: which attributes apply to an
  entity in a period (historical for concluded periods, live otherwise)?
- :meth:`SnapshotFacade.effective_period_for_display`: which period should a
  screen show right now, and why?

Administrative surfaces (API maintenance routes, CLI) reach the audit and
repair operations through the same object, so the calendar and entity
population are resolved in one place.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from termsnap.core.calendar.resolver import display_period, resolve
from termsnap.core.clock import as_utc
from termsnap.core.contracts.calendar import EntityRef, YearContainer
from termsnap.core.contracts.reports import (
    BulkCreateReport,
    CleanupReport,
    CompletenessReport,
    CoverageReport,
    ForceCreateReport,
    MaintenanceReport,
    StatusStats,
)
from termsnap.core.contracts.snapshot import EffectiveAttributes
from termsnap.core.contracts.status import DisplayPeriod, PeriodStatus
from termsnap.core.lifecycle.manager import CalendarSource, SnapshotLifecycleManager
from termsnap.core.lifecycle.providers import CancelToken
from termsnap.core.settings import get_logger

EntitySource = Callable[[], Sequence[EntityRef]]


class SnapshotFacade:
    """Thin pass-through over the lifecycle manager and the resolver."""

    def __init__(
        self,
        manager: SnapshotLifecycleManager,
        calendar: CalendarSource,
        entities: EntitySource | None = None,
    ) -> None:
        self.manager = manager
        self.calendar = calendar
        self.entities = entities or (lambda: [])
        self._log = get_logger("termsnap.facade")

    def _at(self, at: datetime | None) -> datetime:
        return as_utc(at) if at is not None else self.manager.clock()

    # ----- Queries ----------------------------------------------------------

    def effective_attributes(self, entity_id: str, period_id: str) -> EffectiveAttributes:
        """Attributes to use for ``entity_id`` in ``period_id``."""
        lookup = self.manager.get_or_create(entity_id, period_id, containers=self.calendar())
        snap = lookup.snapshot
        return EffectiveAttributes(
            entity_id=entity_id,
            period_id=period_id,
            attributes=dict(snap.attributes),
            is_virtual=lookup.is_virtual,
            reconstructed=snap.reconstructed,
            source=None if lookup.is_virtual else getattr(snap, "source", None),
        )

    def effective_period_for_display(
        self,
        containers: Sequence[YearContainer] | None = None,
        at: datetime | None = None,
    ) -> DisplayPeriod:
        return display_period(
            containers if containers is not None else self.calendar(), self._at(at)
        )

    def period_status(self, at: datetime | None = None) -> PeriodStatus:
        return resolve(self.calendar(), self._at(at))

    # ----- Audit / repair ---------------------------------------------------

    def coverage(self) -> CoverageReport:
        return self.manager.check_coverage(self.entities(), self.calendar())

    def validate(self) -> CompletenessReport:
        return self.manager.validate_completeness(self.entities(), self.calendar())

    def stats(self) -> StatusStats:
        return self.manager.stats_by_period_status(self.calendar())

    def repair(
        self, *, force: bool = False, cancel: CancelToken | None = None
    ) -> BulkCreateReport | ForceCreateReport:
        if force:
            return self.manager.force_create_all_missing(self.entities(), self.calendar(), cancel)
        return self.manager.create_all_missing(self.entities(), self.calendar(), cancel)

    def cleanup(self, cancel: CancelToken | None = None) -> CleanupReport:
        return self.manager.cleanup_invalid(self.calendar(), cancel)

    def run_daily_maintenance(self) -> MaintenanceReport:
        """Snapshot recently concluded periods; never raises."""
        try:
            entities = self.entities()
            results = self.manager.auto_create_for_recently_concluded(entities, self.calendar())
        except Exception as exc:
            self._log.error("Daily snapshot maintenance failed: %s", exc)
            return MaintenanceReport(success=False, message=f"Daily maintenance failed: {exc}")

        return MaintenanceReport(
            success=True,
            message=(
                f"Daily maintenance complete: {results.snapshots_created} snapshots created "
                f"for {results.periods_checked} recently concluded periods"
            ),
            details={
                "entities": len(entities),
                "periods_checked": results.periods_checked,
                "snapshots_created": results.snapshots_created,
                "errors": len(results.errors),
                "error_details": [e.model_dump() for e in results.errors],
            },
        )


__all__ = ["SnapshotFacade", "EntitySource"]
