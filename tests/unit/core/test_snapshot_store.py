"""
Unit tests for SnapshotStore.

Covers last-writer-wins replacement, the empty vs never-imported
distinction, and whole-snapshot visibility under concurrent readers.
"""
import threading

import pytest

from app.core import snapshot_store as snapshot_store_module
from app.core.snapshot_store import SnapshotStore, get_snapshot_store
from tests.lib import make_snapshot


class TestSnapshotStoreOperations:
    """Test set/get/clear."""

    def test_get_before_any_set_returns_none(self):
        store = SnapshotStore()

        assert store.get() is None

    def test_set_then_get_returns_same_snapshot(self, sample_snapshot):
        store = SnapshotStore()

        store.set(sample_snapshot)

        assert store.get() is sample_snapshot

    def test_set_replaces_previous_snapshot(self):
        store = SnapshotStore()
        first = make_snapshot([("python", 10)])
        second = make_snapshot([("rust", 3), ("go", 4)])

        store.set(first)
        store.set(second)

        assert store.get() is second
        assert [tag.name for tag in store.get().tags] == ["rust", "go"]

    def test_clear_returns_slot_to_never_imported(self, sample_snapshot):
        store = SnapshotStore()
        store.set(sample_snapshot)

        store.clear()

        assert store.get() is None

    def test_empty_snapshot_is_distinct_from_absent(self):
        store = SnapshotStore()

        store.set(make_snapshot([]))

        snapshot = store.get()
        assert snapshot is not None
        assert snapshot.is_empty

    def test_set_rejects_non_snapshot(self):
        store = SnapshotStore()

        with pytest.raises(TypeError, match="Expected Snapshot"):
            store.set([("python", 1)])

    def test_default_slot_name(self):
        assert SnapshotStore().name == "TagsList"


class TestSnapshotStoreStatus:
    """Test status reporting."""

    def test_status_not_imported(self):
        status = SnapshotStore().status()

        assert status.imported is False
        assert status.tag_count == 0
        assert status.imported_at is None

    def test_status_after_import(self, sample_snapshot):
        store = SnapshotStore()
        store.set(sample_snapshot)

        status = store.status()

        assert status.imported is True
        assert status.tag_count == 3
        assert status.imported_at == sample_snapshot.imported_at


class TestSnapshotStoreConcurrency:
    """Readers must only ever observe complete snapshots."""

    def test_readers_never_see_partial_snapshot(self):
        store = SnapshotStore()
        small = make_snapshot([(f"small-{i}", i) for i in range(10)])
        large = make_snapshot([(f"large-{i}", i) for i in range(500)])
        store.set(small)

        stop = threading.Event()
        observed_sizes = set()
        errors = []

        def reader():
            while not stop.is_set():
                snapshot = store.get()
                size = len(snapshot.tags)
                prefix = snapshot.tags[0].name.split("-")[0]
                if not all(tag.name.startswith(prefix) for tag in snapshot.tags):
                    errors.append("mixed snapshot observed")
                observed_sizes.add(size)

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()

        for i in range(200):
            store.set(large if i % 2 == 0 else small)

        stop.set()
        for thread in readers:
            thread.join(timeout=5)

        assert not errors
        assert observed_sizes <= {10, 500}


class TestGlobalSnapshotStore:
    """Test the process-wide accessor."""

    def test_get_snapshot_store_is_singleton(self, monkeypatch):
        monkeypatch.setattr(snapshot_store_module, "_snapshot_store", None)

        first = get_snapshot_store()
        second = get_snapshot_store()

        assert first is second
