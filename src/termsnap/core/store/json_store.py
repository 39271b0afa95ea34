"""Disk-backed snapshot store: one JSON file per snapshot.

- Default directory: ``TERMSNAP_STORE_DIR`` (settings) or ``artifacts/snapshots/``
- Layout:            ``<base_dir>/<period_id>/<entity_id>.json``
- Content:           the :class:`Snapshot` model dumped in JSON mode

Conflict detection
------------------
A new snapshot is first written to a temporary file in the period directory
and then hard-linked to its final name. ``os.link`` fails if the target exists,
which makes create-if-absent atomic across threads *and* processes; readers
never observe a half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from termsnap.core.contracts.snapshot import Snapshot
from termsnap.core.errors import ConflictError, NotFoundError
from termsnap.core.settings import load_settings

from .base import SnapshotStore


def _safe(component: str) -> str:
    """Make an id usable as a single path component."""
    return quote(component, safe="").replace(".", "%2E")


class JsonSnapshotStore(SnapshotStore):
    """Persist snapshots to disk as JSON files."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir: Path = base_dir if base_dir is not None else load_settings().store_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, entity_id: str, period_id: str) -> Path:
        return self.base_dir / _safe(period_id) / f"{_safe(entity_id)}.json"

    @staticmethod
    def _read(path: Path) -> Snapshot:
        with path.open("r", encoding="utf-8") as f:
            return Snapshot.model_validate(json.load(f))

    def get(self, entity_id: str, period_id: str) -> Snapshot | None:
        path = self._path(entity_id, period_id)
        try:
            return self._read(path)
        except FileNotFoundError:
            return None

    def put(self, snapshot: Snapshot, *, overwrite: bool = False) -> None:
        target = self._path(snapshot.entity_id, snapshot.period_id)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-", suffix=".json")
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
                f.write("\n")
            if overwrite:
                os.replace(tmp, target)
                return
            try:
                os.link(tmp, target)
            except FileExistsError as exc:
                raise ConflictError(snapshot.entity_id, snapshot.period_id) from exc
        finally:
            tmp.unlink(missing_ok=True)

    def delete(self, entity_id: str, period_id: str) -> None:
        try:
            self._path(entity_id, period_id).unlink()
        except FileNotFoundError as exc:
            raise NotFoundError(
                f"No snapshot for entity {entity_id} in period {period_id}"
            ) from exc

    def list_by_period(self, period_id: str) -> list[Snapshot]:
        folder = self.base_dir / _safe(period_id)
        if not folder.is_dir():
            return []
        return [self._read(p) for p in sorted(folder.glob("*.json")) if not p.name.startswith(".")]

    def list_by_entity(self, entity_id: str) -> list[Snapshot]:
        name = f"{_safe(entity_id)}.json"
        return [self._read(p) for p in sorted(self.base_dir.glob(f"*/{name}"))]


__all__ = ["JsonSnapshotStore"]
