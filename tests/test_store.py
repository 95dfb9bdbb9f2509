"""
Tests for the sample stores (memory and sqlite share one contract).
"""

import random
import sqlite3
import threading

import pytest

from fog_path.models import BoundingBox, NewSample
from fog_path.store import (
    MemorySampleStore,
    SqliteSampleStore,
    StorageError,
    insert_many,
    open_store,
)


class TestInsert:

    def test_ids_strictly_increase(self, store):
        ids = [store.insert(31.0 + i * 0.001, 121.0, 1000 * i) for i in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_insert_is_visible_to_queries(self, store):
        sample_id = store.insert(31.23, 121.47, 1735689600000)
        rows = store.all_samples()
        assert len(rows) == 1
        assert rows[0].id == sample_id
        assert rows[0].timestamp_ms == 1735689600000
        assert rows[0].latitude == pytest.approx(31.23)
        assert rows[0].longitude == pytest.approx(121.47)

    def test_out_of_range_values_are_stored_as_is(self, store):
        store.insert(95.0, 200.0, 0)
        assert store.count() == 1

    def test_closed_store_raises_storage_error(self, store):
        store.close()
        with pytest.raises(StorageError):
            store.insert(0.0, 0.0, 0)
        with pytest.raises(StorageError):
            store.query_range(BoundingBox(-1, 1, -1, 1))


class TestQueryRange:

    def test_empty_store_returns_empty_list(self, store):
        assert store.query_range(BoundingBox(-90, 90, -180, 180)) == []

    def test_matches_coordinate_predicate(self, store):
        rng = random.Random(7)
        for i in range(200):
            store.insert(rng.uniform(31.0, 31.2), rng.uniform(121.0, 121.2), rng.randint(0, 10_000_000))
        box = BoundingBox(31.05, 31.15, 121.02, 121.11)

        expected = {s.id for s in store.all_samples() if box.contains(s.latitude, s.longitude)}
        got = {s.id for s in store.query_range(box)}
        assert got == expected

    def test_edges_are_inclusive(self, store):
        store.insert(31.0, 121.0, 0)
        store.insert(31.1, 121.1, 1)
        store.insert(31.1000001, 121.05, 2)
        got = store.query_range(BoundingBox(31.0, 31.1, 121.0, 121.1))
        assert [s.timestamp_ms for s in got] == [0, 1]

    def test_ordered_by_timestamp_then_id(self, store):
        a = store.insert(31.0, 121.0, 3000)
        b = store.insert(31.0, 121.0, 1000)
        c = store.insert(31.0, 121.0, 1000)
        d = store.insert(31.0, 121.0, 2000)
        got = store.query_range(BoundingBox(30, 32, 120, 122))
        assert [s.id for s in got] == [b, c, d, a]
        times = [s.timestamp_ms for s in got]
        assert times == sorted(times)

    def test_idempotent_read(self, store):
        for i in range(20):
            store.insert(31.0 + i * 0.01, 121.0 + i * 0.01, i * 1000)
        box = BoundingBox(31.05, 31.15, 121.0, 121.2)
        assert store.query_range(box) == store.query_range(box)


class TestSqliteSampleStore:

    def test_persists_across_reopen(self, tmp_path):
        db = tmp_path / "locations.db"
        with SqliteSampleStore(db) as s:
            s.insert(31.0, 121.0, 1)
            s.insert(31.1, 121.1, 2)
        with SqliteSampleStore(db) as s:
            assert s.count() == 2
            assert s.insert(31.2, 121.2, 3) == 3

    def test_table_layout(self, sqlite_store, tmp_path):
        sqlite_store.insert(31.0, 121.0, 123)
        conn = sqlite3.connect(tmp_path / "locations.db")
        try:
            cols = [row[1] for row in conn.execute("PRAGMA table_info(locations)")]
            assert cols == ["id", "datetime", "latitude", "longitude"]
            assert conn.execute("SELECT datetime FROM locations").fetchone() == (123,)
        finally:
            conn.close()

    def test_unopenable_path_raises_storage_error(self, tmp_path):
        with pytest.raises(StorageError):
            SqliteSampleStore(tmp_path / "missing-dir" / "locations.db")

    def test_oversized_timestamp_raises_storage_error(self, sqlite_store):
        with pytest.raises(StorageError):
            sqlite_store.insert(31.0, 121.0, 2**63)
        assert sqlite_store.count() == 0

    def test_in_memory_path(self):
        with SqliteSampleStore(":memory:") as s:
            assert s.insert(1.0, 2.0, 3) == 1

    def test_concurrent_insert_and_query(self, sqlite_store):
        """Queries running alongside inserts only ever see whole rows."""
        errors = []

        def writer():
            for i in range(200):
                sqlite_store.insert(31.0, 121.0, i)

        def reader():
            try:
                for _ in range(50):
                    for s in sqlite_store.query_range(BoundingBox(30, 32, 120, 122)):
                        assert s.latitude == 31.0 and s.longitude == 121.0
            except Exception as exc:  # noqa: BLE001 - collected for the main thread
                errors.append(exc)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
        assert sqlite_store.count() == 200


class TestHelpers:

    def test_open_store_none_is_memory(self):
        assert isinstance(open_store(None), MemorySampleStore)

    def test_open_store_creates_parent_dirs(self, tmp_path):
        db = tmp_path / "nested" / "dir" / "locations.db"
        with open_store(db) as s:
            assert isinstance(s, SqliteSampleStore)
        assert db.exists()

    def test_insert_many_keeps_order(self, store):
        new = [NewSample(timestamp_ms=t, latitude=31.0, longitude=121.0) for t in (30, 10, 20)]
        ids = insert_many(store, new)
        by_id = {s.id: s.timestamp_ms for s in store.all_samples()}
        assert [by_id[i] for i in ids] == [30, 10, 20]
