"""Tests for the in-memory and JSON snapshot stores.

Both stores must honour the same contract: ``put`` is create-if-absent
(ConflictError otherwise, unless ``overwrite``), ``delete`` of a missing key
raises NotFoundError, and listings are filtered by period or entity.
"""

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from termsnap.core.contracts.calendar import YearContainer
from termsnap.core.contracts.snapshot import Snapshot
from termsnap.core.contracts.status import PeriodPhase
from termsnap.core.errors import ConflictError, NotFoundError
from termsnap.core.store.base import SnapshotStore
from termsnap.core.store.json_store import JsonSnapshotStore
from termsnap.core.store.memory import InMemorySnapshotStore


def _snap(entity_id: str, period_id: str, **attrs: Any) -> Snapshot:
    return Snapshot(
        entity_id=entity_id,
        period_id=period_id,
        container_id="2025",
        attributes=attrs or {"class_id": "P4"},
        period_start=datetime(2025, 1, 6, tzinfo=UTC),
        period_end=datetime(2025, 4, 4, tzinfo=UTC),
    )


@pytest.fixture(params=["memory", "json"])
def store(request: Any, tmp_path: Path) -> SnapshotStore:
    if request.param == "memory":
        return InMemorySnapshotStore()
    return JsonSnapshotStore(tmp_path / "snapshots")


def test_put_get_roundtrip(store: SnapshotStore) -> None:
    snap = _snap("e1", "2025-T1")
    store.put(snap)
    assert store.get("e1", "2025-T1") == snap
    assert store.get("e1", "2025-T2") is None


def test_put_conflict_and_overwrite(store: SnapshotStore) -> None:
    store.put(_snap("e1", "2025-T1", class_id="P4"))
    with pytest.raises(ConflictError) as info:
        store.put(_snap("e1", "2025-T1", class_id="P5"))
    assert info.value.entity_id == "e1"
    assert store.get("e1", "2025-T1").attributes["class_id"] == "P4"  # type: ignore[union-attr]

    store.put(_snap("e1", "2025-T1", class_id="P5"), overwrite=True)
    assert store.get("e1", "2025-T1").attributes["class_id"] == "P5"  # type: ignore[union-attr]


def test_edits_to_returned_snapshots_do_not_reach_the_store(store: SnapshotStore) -> None:
    original = _snap("e1", "2025-T1", class_id="P4")
    store.put(original)
    original.attributes["class_id"] = "EDITED"

    fetched = store.get("e1", "2025-T1")
    assert fetched is not None
    fetched.attributes["class_id"] = "DRIFTED"
    store.list_by_period("2025-T1")[0].attributes["section"] = "Boarding"
    store.list_by_entity("e1")[0].attributes["class_id"] = "P9"

    assert store.get("e1", "2025-T1").attributes == {"class_id": "P4"}  # type: ignore[union-attr]


def test_delete(store: SnapshotStore) -> None:
    store.put(_snap("e1", "2025-T1"))
    store.delete("e1", "2025-T1")
    assert store.get("e1", "2025-T1") is None
    with pytest.raises(NotFoundError):
        store.delete("e1", "2025-T1")


def test_listings_and_get_many(store: SnapshotStore) -> None:
    store.put(_snap("e1", "2025-T1"))
    store.put(_snap("e2", "2025-T1"))
    store.put(_snap("e1", "2025-T2"))

    assert [s.entity_id for s in store.list_by_period("2025-T1")] == ["e1", "e2"]
    assert {s.period_id for s in store.list_by_entity("e1")} == {"2025-T1", "2025-T2"}
    assert store.list_by_period("2025-T3") == []

    found = store.get_many([("e1", "2025-T1"), ("e2", "2025-T2"), ("e2", "2025-T1")])
    assert set(found) == {("e1", "2025-T1"), ("e2", "2025-T1")}


def test_count_by_period_status(
    store: SnapshotStore, calendar: list[YearContainer], utc: Any
) -> None:
    store.put(_snap("e1", "2025-T1"))
    store.put(_snap("e1", "2025-T2"))
    store.put(_snap("e2", "2025-T3"))
    counts = store.count_by_period_status(calendar, utc(2025, 6, 15))
    assert counts == {PeriodPhase.CONCLUDED: 1, PeriodPhase.CURRENT: 1, PeriodPhase.FUTURE: 1}


def test_concurrent_puts_admit_exactly_one(store: SnapshotStore) -> None:
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    lock = threading.Lock()

    def worker(i: int) -> None:
        barrier.wait()
        try:
            store.put(_snap("e1", "2025-T1", writer=i))
            result = "ok"
        except ConflictError:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7


def test_memory_revision_counts_mutations() -> None:
    store = InMemorySnapshotStore()
    assert store.revision == 0
    store.put(_snap("e1", "2025-T1"))
    store.get("e1", "2025-T1")
    assert store.revision == 1
    store.delete("e1", "2025-T1")
    assert store.revision == 2
    assert store.keys() == ()


def test_json_layout_and_unsafe_ids(tmp_path: Path) -> None:
    store = JsonSnapshotStore(tmp_path)
    store.put(_snap("../evil", "2025/T1"))

    files = [p for p in tmp_path.rglob("*.json")]
    assert len(files) == 1
    assert files[0].is_relative_to(tmp_path)
    assert not list(tmp_path.rglob(".tmp-*"))

    payload = json.loads(files[0].read_text(encoding="utf-8"))
    assert payload["entity_id"] == "../evil"
    assert store.list_by_entity("../evil")[0].period_id == "2025/T1"


def test_json_store_uses_settings_dir(monkeypatch: Any, tmp_path: Path) -> None:
    from termsnap.core.settings import load_settings

    monkeypatch.setenv("TERMSNAP_STORE_DIR", str(tmp_path / "from-env"))
    load_settings.cache_clear()
    store = JsonSnapshotStore()
    assert store.base_dir == tmp_path / "from-env"
    assert store.base_dir.is_dir()
