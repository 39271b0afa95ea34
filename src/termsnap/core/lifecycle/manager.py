"""
Snapshot lifecycle manager.

Orchestrates the life of every (entity, period) pair:

    NoSnapshot --(period concludes)--> Eligible --(lazy or bulk create)--> Persisted

``Persisted`` is terminal. The only way out is :meth:`cleanup_invalid`, and
only for pairs found persisted against a period that has not concluded,
which is a corruption state (clock skew, wrong period bounds at write time,
manual edits), never a normal transition.

Operations
----------
- :meth:`get_or_create`            read-through access with lazy creation.
- :meth:`check_coverage`           pure population-wide audit.
- :meth:`create_all_missing`       repair using accurate data only.
- :meth:`force_create_all_missing` repair accepting best-effort reconstructions.
- :meth:`cleanup_invalid`          delete snapshots of current/future periods.
- :meth:`validate_completeness`    pass/fail gate over coverage.
- :meth:`stats_by_period_status`   health signal for operators.
- :meth:`auto_create_for_recently_concluded`  daily maintenance.

Bulk operations evaluate the clock once per run, isolate per-item failures
into ``errors`` and check the optional cancel token between items; items
processed before a cancellation stay committed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from termsnap.core.calendar.hierarchy import find_period, iter_periods, validate_hierarchy
from termsnap.core.calendar.resolver import classify_period, concluded_periods
from termsnap.core.clock import Clock, utc_now
from termsnap.core.contracts.calendar import EntityRef, Period, YearContainer
from termsnap.core.contracts.reports import (
    AutoCreateReport,
    BulkCreateReport,
    CleanupReport,
    CompletenessReport,
    CoverageReport,
    ForceCreateReport,
    InvariantViolation,
    ItemError,
    MissingSnapshot,
    StatusStats,
)
from termsnap.core.contracts.snapshot import Snapshot, SnapshotLookup, VirtualSnapshot
from termsnap.core.contracts.status import PeriodPhase
from termsnap.core.errors import ConflictError
from termsnap.core.result import Result, err, ok
from termsnap.core.settings import get_logger, load_settings
from termsnap.core.store.base import SnapshotStore

from .providers import CancelToken, HistoryProvider, LiveAttributesProvider
from .recovery import Recovered, live_attributes, recover_attributes

CalendarSource = Callable[[], Sequence[YearContainer]]


def _cancelled(cancel: CancelToken | None) -> bool:
    return cancel is not None and cancel.is_set()


def _item_error(entity_id: str | None, period_id: str, exc: Exception) -> ItemError:
    return ItemError(
        entity_id=entity_id,
        period_id=period_id,
        code=getattr(exc, "code", type(exc).__name__),
        message=str(exc),
    )


def _new_snapshot(
    entity_id: str,
    container: YearContainer,
    period: Period,
    recovered: Recovered,
    at: datetime,
) -> Snapshot:
    return Snapshot(
        entity_id=entity_id,
        period_id=period.id,
        container_id=container.id,
        attributes=recovered.attributes,
        period_start=period.start,
        period_end=period.end,
        created_at=at,
        source=recovered.source,
        reconstructed=recovered.source.reconstructed,
    )


class SnapshotLifecycleManager:
    """Keeps persisted snapshots consistent with the calendar.

    Parameters
    ----------
    store:
        Keyed snapshot persistence.
    live_provider:
        Returns an entity's current attributes (None for unknown entities).
    history:
        Optional provider of attributes valid during a past period.
    calendar:
        Optional source of year containers used when ``get_or_create`` is
        called without an explicit ``containers`` argument.
    clock:
        Reference clock; defaults to :func:`~termsnap.core.clock.utc_now`.
    recent_window:
        How long after a period ends live attributes still count as accurate
        for bulk creation. Defaults to ``TERMSNAP_RECENT_WINDOW_DAYS``.
    """

    def __init__(
        self,
        store: SnapshotStore,
        live_provider: LiveAttributesProvider,
        *,
        history: HistoryProvider | None = None,
        calendar: CalendarSource | None = None,
        clock: Clock | None = None,
        recent_window: timedelta | None = None,
    ) -> None:
        self.store = store
        self.live_provider = live_provider
        self.history = history
        self.calendar = calendar
        self.clock: Clock = clock or utc_now
        self.recent_window = (
            recent_window if recent_window is not None else load_settings().recent_window
        )
        self._log = get_logger("termsnap.lifecycle")

    # ------------------------------------------------------------------ #
    # Targeted access
    # ------------------------------------------------------------------ #

    def _containers(self, containers: Sequence[YearContainer] | None) -> Sequence[YearContainer]:
        if containers is not None:
            return containers
        if self.calendar is None:
            raise ValueError("No containers given and no calendar source configured")
        return self.calendar()

    def get_or_create(
        self,
        entity_id: str,
        period_id: str,
        live_provider: LiveAttributesProvider | None = None,
        *,
        containers: Sequence[YearContainer] | None = None,
    ) -> SnapshotLookup:
        """Return the snapshot that applies to ``(entity_id, period_id)``.

        Concluded periods are served from the store; a missing snapshot is
        reconstructed (usually ``reconstructed=True``) and persisted. If a
        concurrent caller persists first, its snapshot is re-read and
        returned. Current and future periods never touch the store: a fresh
        :class:`VirtualSnapshot` is built from live attributes on every call.

        Raises
        ------
        NotFoundError
            Unknown period id, or the provider does not know the entity.
        ProviderUnavailableError
            The live attributes provider failed.
        HierarchyError
            The calendar is malformed.
        """
        calendar = self._containers(containers)
        validate_hierarchy(calendar)
        container, period = find_period(calendar, period_id)
        provider = live_provider or self.live_provider
        at = self.clock()

        if classify_period(period, at) is not PeriodPhase.CONCLUDED:
            virtual = VirtualSnapshot(
                entity_id=entity_id,
                period_id=period.id,
                container_id=container.id,
                attributes=live_attributes(provider, entity_id),
                computed_at=at,
            )
            return SnapshotLookup(virtual, True)

        existing = self.store.get(entity_id, period.id)
        if existing is not None:
            return SnapshotLookup(existing, False)

        recovered = recover_attributes(
            entity_id,
            period,
            at=at,
            live=provider,
            history=self.history,
            store=self.store,
            recent_window=self.recent_window,
            allow_fallback=True,
            trust_recent=False,
        )
        snapshot = _new_snapshot(entity_id, container, period, recovered, at)
        try:
            self.store.put(snapshot)
        except ConflictError:
            winner = self.store.get(entity_id, period.id)
            if winner is None:
                raise
            return SnapshotLookup(winner, False)

        if snapshot.reconstructed:
            self._log.warning(
                "Lazily created reconstructed snapshot entity=%s period=%s source=%s",
                entity_id,
                period.id,
                snapshot.source.value,
            )
        return SnapshotLookup(snapshot, False)

    # ------------------------------------------------------------------ #
    # Audit
    # ------------------------------------------------------------------ #

    def _expected_pairs(
        self,
        entities: Sequence[EntityRef],
        containers: Sequence[YearContainer],
        at: datetime,
    ) -> tuple[list[tuple[EntityRef, YearContainer, Period]], int]:
        """Expected (entity, container, period) triples and the count skipped by enrolment."""
        concluded = concluded_periods(containers, at)
        pairs: list[tuple[EntityRef, YearContainer, Period]] = []
        not_enrolled = 0
        for entity in entities:
            for container, period in concluded:
                if entity.expects(period):
                    pairs.append((entity, container, period))
                else:
                    not_enrolled += 1
        return pairs, not_enrolled

    def check_coverage(
        self,
        entities: Sequence[EntityRef],
        containers: Sequence[YearContainer],
        *,
        at: datetime | None = None,
    ) -> CoverageReport:
        """Compare expected snapshots for concluded periods with the store. Read-only."""
        validate_hierarchy(containers)
        at = at or self.clock()
        pairs, _ = self._expected_pairs(entities, containers, at)
        found = self.store.get_many((e.id, p.id) for e, _, p in pairs)
        missing = [
            MissingSnapshot(
                entity_id=entity.id,
                period_id=period.id,
                period_name=period.name,
                container_name=container.name,
            )
            for entity, container, period in pairs
            if (entity.id, period.id) not in found
        ]
        return CoverageReport(
            expected=len(pairs), existing=len(pairs) - len(missing), missing=missing
        )

    def validate_completeness(
        self, entities: Sequence[EntityRef], containers: Sequence[YearContainer]
    ) -> CompletenessReport:
        """Strict pass/fail wrapper over :meth:`check_coverage`."""
        at = self.clock()
        coverage = self.check_coverage(entities, containers, at=at)
        report = CompletenessReport(
            total_expected=coverage.expected,
            total_existing=coverage.existing,
            missing_count=coverage.missing_count,
            passed=coverage.missing_count == 0,
            concluded_periods=len(concluded_periods(containers, at)),
            missing=coverage.missing,
        )
        self._log.info(
            "Completeness validation expected=%d existing=%d missing=%d passed=%s",
            report.total_expected,
            report.total_existing,
            report.missing_count,
            report.passed,
        )
        return report

    def stats_by_period_status(self, containers: Sequence[YearContainer]) -> StatusStats:
        """Snapshot counts by period phase; non-zero current/future means corruption."""
        validate_hierarchy(containers)
        counts = self.store.count_by_period_status(containers, self.clock())
        stats = StatusStats(
            concluded_count=counts[PeriodPhase.CONCLUDED],
            current_count=counts[PeriodPhase.CURRENT],
            future_count=counts[PeriodPhase.FUTURE],
            total=sum(counts.values()),
        )
        if not stats.healthy:
            self._log.warning(
                "Snapshots found for non-concluded periods current=%d future=%d",
                stats.current_count,
                stats.future_count,
            )
        return stats

    def find_invariant_violations(
        self, containers: Sequence[YearContainer]
    ) -> list[InvariantViolation]:
        """List snapshots persisted against current or future periods."""
        validate_hierarchy(containers)
        at = self.clock()
        violations: list[InvariantViolation] = []
        for _, period in iter_periods(containers):
            phase = classify_period(period, at)
            if phase is PeriodPhase.CONCLUDED:
                continue
            violations.extend(
                InvariantViolation(entity_id=s.entity_id, period_id=period.id, phase=phase)
                for s in self.store.list_by_period(period.id)
            )
        return violations

    # ------------------------------------------------------------------ #
    # Repair
    # ------------------------------------------------------------------ #

    def _recover(
        self, entity_id: str, period: Period, *, at: datetime, allow_fallback: bool
    ) -> Result[Recovered, ItemError]:
        try:
            return ok(
                recover_attributes(
                    entity_id,
                    period,
                    at=at,
                    live=self.live_provider,
                    history=self.history,
                    store=self.store,
                    recent_window=self.recent_window,
                    allow_fallback=allow_fallback,
                    trust_recent=True,
                )
            )
        except Exception as exc:
            return err(_item_error(entity_id, period.id, exc))

    def _persist(self, snapshot: Snapshot) -> Result[Snapshot, ItemError]:
        try:
            self.store.put(snapshot)
        except Exception as exc:
            return err(_item_error(snapshot.entity_id, snapshot.period_id, exc))
        return ok(snapshot)

    def _create_one(
        self,
        entity_id: str,
        container: YearContainer,
        period: Period,
        *,
        at: datetime,
        allow_fallback: bool,
    ) -> Result[Snapshot, ItemError]:
        """Non-lazy creation of a single snapshot; failures come back as ``Err``."""
        return (
            self._recover(entity_id, period, at=at, allow_fallback=allow_fallback)
            .map(lambda recovered: _new_snapshot(entity_id, container, period, recovered, at))
            .flat_map(self._persist)
        )

    def _missing_items(
        self,
        entities: Sequence[EntityRef],
        containers: Sequence[YearContainer],
        at: datetime,
    ) -> tuple[list[tuple[str, YearContainer, Period]], int, int]:
        """Missing (entity, container, period) triples, existing count, enrolment skips."""
        coverage = self.check_coverage(entities, containers, at=at)
        _, not_enrolled = self._expected_pairs(entities, containers, at)
        index = {p.id: (c, p) for c, p in iter_periods(containers)}
        items = [(m.entity_id, *index[m.period_id]) for m in coverage.missing]
        return items, coverage.existing, not_enrolled

    def create_all_missing(
        self,
        entities: Sequence[EntityRef],
        containers: Sequence[YearContainer],
        cancel: CancelToken | None = None,
    ) -> BulkCreateReport:
        """Create every missing snapshot for which accurate attributes exist.

        Items that could only be reconstructed are reported as errors with
        code ``reconstruction_required`` and left missing; use
        :meth:`force_create_all_missing` to accept reconstructions.
        """
        at = self.clock()
        items, existing, not_enrolled = self._missing_items(entities, containers, at)
        report = BulkCreateReport(skipped=existing + not_enrolled)

        for entity_id, container, period in items:
            if _cancelled(cancel):
                report.cancelled = True
                break
            result = self._create_one(entity_id, container, period, at=at, allow_fallback=False)
            if result.is_ok():
                report.created += 1
                continue
            item_error = result.unwrap_err()
            if item_error.code == ConflictError.code:
                report.skipped += 1
            else:
                self._log.warning(
                    "Snapshot creation failed entity=%s period=%s: %s",
                    entity_id,
                    period.id,
                    item_error.message,
                )
                report.errors.append(item_error)

        self._log.info(
            "Bulk snapshot creation created=%d skipped=%d errors=%d cancelled=%s",
            report.created,
            report.skipped,
            len(report.errors),
            report.cancelled,
        )
        return report

    def force_create_all_missing(
        self,
        entities: Sequence[EntityRef],
        containers: Sequence[YearContainer],
        cancel: CancelToken | None = None,
    ) -> ForceCreateReport:
        """Create every missing snapshot, falling back to best-effort data.

        ``errors_recovered`` counts snapshots written from reconstructed
        attributes; only genuine failures (provider down, unknown entity)
        land in ``errors``.
        """
        at = self.clock()
        items, _, _ = self._missing_items(entities, containers, at)
        report = ForceCreateReport(terms_processed=len(concluded_periods(containers, at)))

        for entity_id, container, period in items:
            if _cancelled(cancel):
                report.cancelled = True
                break
            result = self._create_one(entity_id, container, period, at=at, allow_fallback=True)
            if result.is_ok():
                report.snapshots_created += 1
                if result.unwrap().reconstructed:
                    report.errors_recovered += 1
                continue
            item_error = result.unwrap_err()
            if item_error.code != ConflictError.code:
                self._log.warning(
                    "Forced snapshot creation failed entity=%s period=%s: %s",
                    entity_id,
                    period.id,
                    item_error.message,
                )
                report.errors.append(item_error)

        self._log.info(
            "Forced snapshot creation periods=%d created=%d reconstructed=%d errors=%d",
            report.terms_processed,
            report.snapshots_created,
            report.errors_recovered,
            len(report.errors),
        )
        return report

    def cleanup_invalid(
        self,
        containers: Sequence[YearContainer],
        cancel: CancelToken | None = None,
    ) -> CleanupReport:
        """Delete snapshots persisted against current or future periods."""
        validate_hierarchy(containers)
        at = self.clock()
        report = CleanupReport()

        for _, period in iter_periods(containers):
            if report.cancelled:
                break
            phase = classify_period(period, at)
            if phase is PeriodPhase.CONCLUDED:
                continue
            try:
                snapshots = self.store.list_by_period(period.id)
            except Exception as exc:
                report.errors.append(_item_error(None, period.id, exc))
                continue

            for snap in snapshots:
                if _cancelled(cancel):
                    report.cancelled = True
                    break
                report.violations.append(
                    InvariantViolation(entity_id=snap.entity_id, period_id=period.id, phase=phase)
                )
                try:
                    self.store.delete(snap.entity_id, period.id)
                except Exception as exc:
                    report.errors.append(_item_error(snap.entity_id, period.id, exc))
                    continue
                report.deleted += 1
                self._log.warning(
                    "Deleted snapshot for %s period entity=%s period=%s",
                    phase.value,
                    snap.entity_id,
                    period.id,
                )

        self._log.info(
            "Snapshot cleanup deleted=%d errors=%d cancelled=%s",
            report.deleted,
            len(report.errors),
            report.cancelled,
        )
        return report

    def auto_create_for_recently_concluded(
        self,
        entities: Sequence[EntityRef],
        containers: Sequence[YearContainer],
        cancel: CancelToken | None = None,
    ) -> AutoCreateReport:
        """Snapshot periods that concluded within the recent window.

        Intended to run daily: live attributes are still accurate right after
        a period ends, so snapshots written here are not reconstructions.
        """
        validate_hierarchy(containers)
        at = self.clock()
        recent = [
            (container, period)
            for container, period in concluded_periods(containers, at)
            if at - period.end <= self.recent_window
        ]
        report = AutoCreateReport(periods_checked=len(recent))

        for container, period in recent:
            for entity in entities:
                if _cancelled(cancel):
                    report.cancelled = True
                    break
                if not entity.expects(period):
                    continue
                if self.store.get(entity.id, period.id) is not None:
                    continue
                result = self._create_one(
                    entity.id, container, period, at=at, allow_fallback=False
                )
                if result.is_ok():
                    report.snapshots_created += 1
                elif result.unwrap_err().code != ConflictError.code:
                    report.errors.append(result.unwrap_err())
            if report.cancelled:
                break

        self._log.info(
            "Auto snapshot creation periods=%d created=%d errors=%d cancelled=%s",
            report.periods_checked,
            report.snapshots_created,
            len(report.errors),
            report.cancelled,
        )
        return report


__all__ = ["SnapshotLifecycleManager", "CalendarSource"]
