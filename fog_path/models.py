"""Data models for recorded samples, query boxes and polylines."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Final

MAX_SPEED_MPS: Final[float] = 31.0  # ~110 km/h
DEFAULT_TZ: Final[str] = "Asia/Shanghai"
DEFAULT_DB_PATH: Final[str] = "locations.db"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A geographic coordinate in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class NewSample:
    """A captured position that has not been stored yet.

    Attributes:
        timestamp_ms: Unix epoch milliseconds at capture time.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
    """

    timestamp_ms: int
    latitude: float
    longitude: float

    @classmethod
    def capture(cls, latitude: float, longitude: float, timestamp_ms: int | None = None) -> NewSample:
        """Wrap a raw coordinate pair, stamping it with the current time if needed."""

        if timestamp_ms is None:
            timestamp_ms = time.time_ns() // 1_000_000
        return cls(timestamp_ms=int(timestamp_ms), latitude=float(latitude), longitude=float(longitude))


@dataclass(frozen=True, slots=True)
class Sample:
    """A single stored location sample.

    Attributes:
        id: Store-assigned id, strictly increasing in insertion order.
        timestamp_ms: Unix epoch milliseconds. Sort key, not necessarily unique.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
    """

    id: int
    timestamp_ms: int
    latitude: float
    longitude: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    @property
    def timestamp_s(self) -> float:
        """Unix epoch seconds as float."""

        return self.timestamp_ms / 1000.0


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Rectangular query region, inclusive on every edge.

    Invariant: min_lat <= max_lat and min_lon <= max_lon. Use ``from_corners``
    to build one from a viewport without trusting the corner order.
    """

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self) -> None:
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(f"inverted bounding box: {self!r}")

    @classmethod
    def from_corners(cls, a: GeoPoint, b: GeoPoint) -> BoundingBox:
        """Build a box from two opposite corners in any order (NE/SW, SW/NE, NW/SE, ...)."""

        return cls(
            min_lat=min(a.latitude, b.latitude),
            max_lat=max(a.latitude, b.latitude),
            min_lon=min(a.longitude, b.longitude),
            max_lon=max(a.longitude, b.longitude),
        )

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.min_lat <= latitude <= self.max_lat and self.min_lon <= longitude <= self.max_lon


# An ordered run of points meant to be drawn connected. Length 1 = isolated point.
Polyline = list[GeoPoint]
