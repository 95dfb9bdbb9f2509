"""Sample storage: an append-only table of timestamped positions.

Two backends share one contract:

- ``SqliteSampleStore``: durable, one ``locations`` table with an
  auto-increment id (the layout the mobile app used).
- ``MemorySampleStore``: list-backed, for tests and throwaway sessions.

Both are safe to share between one writer and one reader thread: every call
takes the store's lock, so a query never observes a half-inserted row.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Iterable, Protocol

from fog_path.models import BoundingBox, NewSample, Sample

logger = logging.getLogger(__name__)

TABLE_NAME = "locations"

_CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    datetime INTEGER NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL
)
"""
_CREATE_INDEX = f"CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_lat_lon ON {TABLE_NAME} (latitude, longitude)"

_SELECT = f"SELECT id, datetime, latitude, longitude FROM {TABLE_NAME}"
_ORDER = "ORDER BY datetime ASC, id ASC"


class StorageError(Exception):
    """The storage medium is unavailable or a read/write failed."""


class SampleStore(Protocol):
    """What the rest of the package needs from a store."""

    def insert(self, latitude: float, longitude: float, timestamp_ms: int) -> int: ...

    def query_range(self, bbox: BoundingBox) -> list[Sample]: ...

    def all_samples(self) -> list[Sample]: ...

    def count(self) -> int: ...

    def close(self) -> None: ...


def _sort_key(s: Sample) -> tuple[int, int]:
    return (s.timestamp_ms, s.id)


class MemorySampleStore:
    """In-memory store with the same ordering and id rules as the sqlite one."""

    def __init__(self) -> None:
        self._rows: list[Sample] = []
        self._next_id = 1
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> MemorySampleStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError("store is closed")

    def insert(self, latitude: float, longitude: float, timestamp_ms: int) -> int:
        with self._lock:
            self._check_open()
            sample = Sample(
                id=self._next_id,
                timestamp_ms=int(timestamp_ms),
                latitude=float(latitude),
                longitude=float(longitude),
            )
            self._rows.append(sample)
            self._next_id += 1
            return sample.id

    def query_range(self, bbox: BoundingBox) -> list[Sample]:
        with self._lock:
            self._check_open()
            hits = [s for s in self._rows if bbox.contains(s.latitude, s.longitude)]
        hits.sort(key=_sort_key)
        return hits

    def all_samples(self) -> list[Sample]:
        with self._lock:
            self._check_open()
            rows = list(self._rows)
        rows.sort(key=_sort_key)
        return rows

    def count(self) -> int:
        with self._lock:
            self._check_open()
            return len(self._rows)

    def close(self) -> None:
        with self._lock:
            self._closed = True


class SqliteSampleStore:
    """SQLite-backed store.

    Each insert runs in its own committed transaction, so a returned id means
    the row is on disk. ``path`` may be ``":memory:"``.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._lock = threading.Lock()
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(self._path, check_same_thread=False)
            with self._conn:
                self._conn.execute(_CREATE_TABLE)
                self._conn.execute(_CREATE_INDEX)
        except sqlite3.Error as exc:
            raise StorageError(f"cannot open sample store {self._path!r}: {exc}") from exc
        logger.debug("opened sample store %s", self._path)

    def __enter__(self) -> SqliteSampleStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def path(self) -> str:
        return self._path

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(f"sample store {self._path!r} is closed")
        return self._conn

    def insert(self, latitude: float, longitude: float, timestamp_ms: int) -> int:
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    cur = conn.execute(
                        f"INSERT INTO {TABLE_NAME} (datetime, latitude, longitude) VALUES (?, ?, ?)",
                        (int(timestamp_ms), float(latitude), float(longitude)),
                    )
            except (sqlite3.Error, OverflowError) as exc:
                raise StorageError(f"insert failed: {exc}") from exc
            row_id = cur.lastrowid
            if row_id is None:
                raise StorageError("insert did not return a row id")
            return row_id

    def _select(self, sql: str, params: tuple[float, ...] = ()) -> list[Sample]:
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"query failed: {exc}") from exc
        return [Sample(id=r[0], timestamp_ms=r[1], latitude=r[2], longitude=r[3]) for r in rows]

    def query_range(self, bbox: BoundingBox) -> list[Sample]:
        return self._select(
            f"{_SELECT} WHERE latitude >= ? AND latitude <= ? AND longitude >= ? AND longitude <= ? {_ORDER}",
            (bbox.min_lat, bbox.max_lat, bbox.min_lon, bbox.max_lon),
        )

    def all_samples(self) -> list[Sample]:
        return self._select(f"{_SELECT} {_ORDER}")

    def count(self) -> int:
        with self._lock:
            conn = self._connection()
            try:
                (n,) = conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"query failed: {exc}") from exc
        return int(n)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def open_store(path: str | Path | None) -> SampleStore:
    """Open a sqlite store at ``path``, or an in-memory store for ``None``."""

    if path is None:
        return MemorySampleStore()
    p = Path(path)
    if str(path) != ":memory:":
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create directory for {p}: {exc}") from exc
    return SqliteSampleStore(path)


def insert_many(store: SampleStore, samples: Iterable[NewSample]) -> list[int]:
    """Insert samples in iteration order and return their ids."""

    return [store.insert(s.latitude, s.longitude, s.timestamp_ms) for s in samples]
