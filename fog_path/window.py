"""Viewport -> bounding box -> stored samples."""

from __future__ import annotations

from fog_path.models import BoundingBox, GeoPoint, Sample
from fog_path.store import SampleStore


def query_window(store: SampleStore, corner_a: GeoPoint, corner_b: GeoPoint) -> list[Sample]:
    """Return samples inside the viewport spanned by two opposite corners.

    The corners may come in any order; the box is normalised with min/max so
    a swapped NE/SW pair is never an error. Results are ordered by timestamp,
    then id. Nothing is cached: every viewport change queries the store again.
    """

    return store.query_range(BoundingBox.from_corners(corner_a, corner_b))


def viewport_bbox(center: GeoPoint, span_lat: float, span_lon: float) -> BoundingBox:
    """Box of ``span_lat`` x ``span_lon`` degrees centred on ``center``."""

    half_lat = abs(span_lat) / 2.0
    half_lon = abs(span_lon) / 2.0
    return BoundingBox(
        min_lat=center.latitude - half_lat,
        max_lat=center.latitude + half_lat,
        min_lon=center.longitude - half_lon,
        max_lon=center.longitude + half_lon,
    )
