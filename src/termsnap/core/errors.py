"""Error taxonomy for the snapshot engine.

Targeted operations raise these exceptions; bulk operations catch them per item
and report them as :class:`~termsnap.core.contracts.reports.ItemError` records.

- :class:`NotFoundError`            unknown entity / period / snapshot key.
- :class:`ConflictError`            a snapshot already exists for the key.
- :class:`ProviderUnavailableError` the live (or history) provider failed.
- :class:`HierarchyError`           malformed calendar; fatal for the whole call.

Invariant violations found during audits are *data*, not exceptions; see
:class:`~termsnap.core.contracts.reports.InvariantViolation`.
"""

from __future__ import annotations

from typing import ClassVar


class TermsnapError(Exception):
    """Base class for all engine errors; `code` is a short machine label."""

    code: ClassVar[str] = "error"


class NotFoundError(TermsnapError):
    code = "not_found"


class ConflictError(TermsnapError):
    """Raised by ``SnapshotStore.put`` when the key is already persisted."""

    code = "conflict"

    def __init__(self, entity_id: str, period_id: str) -> None:
        super().__init__(f"Snapshot already exists for entity {entity_id} in period {period_id}")
        self.entity_id = entity_id
        self.period_id = period_id


class ProviderUnavailableError(TermsnapError):
    """The attributes provider raised; snapshots are never fabricated from nothing."""

    code = "provider_unavailable"


class HierarchyError(TermsnapError, ValueError):
    """The container/period hierarchy is malformed (overlaps, bad bounds, ...)."""

    code = "hierarchy"


class ReconstructionRequired(TermsnapError):
    """Only a best-effort reconstruction is available and the caller refused it."""

    code = "reconstruction_required"


__all__ = [
    "TermsnapError",
    "NotFoundError",
    "ConflictError",
    "ProviderUnavailableError",
    "HierarchyError",
    "ReconstructionRequired",
]
