"""Fixed-shape result records for the audit and repair operations.

Each lifecycle operation returns exactly one of these models, so operators,
the HTTP API and tests all read the same field set.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field

from .status import PeriodPhase


class MissingSnapshot(BaseModel):
    """A concluded (entity, period) pair without a persisted snapshot."""

    entity_id: str
    period_id: str
    period_name: str = ""
    container_name: str = ""


class ItemError(BaseModel):
    """A per-item failure recorded by a bulk operation."""

    entity_id: str | None = None
    period_id: str
    code: str
    message: str


class InvariantViolation(BaseModel):
    """A snapshot persisted against a period that has not concluded."""

    entity_id: str
    period_id: str
    phase: PeriodPhase


class CoverageReport(BaseModel):
    expected: int = 0
    existing: int = 0
    missing: list[MissingSnapshot] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def coverage_percent(self) -> int:
        if self.expected == 0:
            return 100
        return round(self.existing * 100 / self.expected)


class BulkCreateReport(BaseModel):
    created: int = 0
    skipped: int = 0
    errors: list[ItemError] = Field(default_factory=list)
    cancelled: bool = False


class ForceCreateReport(BaseModel):
    """Outcome of the aggressive repair.

    ``errors_recovered`` counts snapshots created from best-effort data rather
    than true historical data; they are written, not reported as failures.
    """

    snapshots_created: int = 0
    terms_processed: int = 0
    errors_recovered: int = 0
    errors: list[ItemError] = Field(default_factory=list)
    cancelled: bool = False


class CleanupReport(BaseModel):
    deleted: int = 0
    errors: list[ItemError] = Field(default_factory=list)
    violations: list[InvariantViolation] = Field(default_factory=list)
    cancelled: bool = False


class CompletenessReport(BaseModel):
    total_expected: int
    total_existing: int
    missing_count: int
    passed: bool
    concluded_periods: int = 0
    missing: list[MissingSnapshot] = Field(default_factory=list)


class StatusStats(BaseModel):
    """Snapshot counts grouped by the phase of their period.

    ``current_count`` and ``future_count`` are zero in a healthy store.
    """

    concluded_count: int = 0
    current_count: int = 0
    future_count: int = 0
    total: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def healthy(self) -> bool:
        return self.current_count == 0 and self.future_count == 0


class AutoCreateReport(BaseModel):
    periods_checked: int = 0
    snapshots_created: int = 0
    errors: list[ItemError] = Field(default_factory=list)
    cancelled: bool = False


class MaintenanceReport(BaseModel):
    """Envelope returned by the daily maintenance entry point."""

    success: bool
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    details: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "MissingSnapshot",
    "ItemError",
    "InvariantViolation",
    "CoverageReport",
    "BulkCreateReport",
    "ForceCreateReport",
    "CleanupReport",
    "CompletenessReport",
    "StatusStats",
    "AutoCreateReport",
    "MaintenanceReport",
]
