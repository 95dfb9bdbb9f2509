"""
Tests for viewport -> bounding box normalisation and windowed queries.
"""

import pytest

from fog_path.models import BoundingBox, GeoPoint
from fog_path.window import query_window, viewport_bbox


class TestBoundingBox:

    def test_from_corners_any_order(self):
        ne = GeoPoint(31.3, 121.6)
        sw = GeoPoint(31.1, 121.4)
        nw = GeoPoint(31.3, 121.4)
        se = GeoPoint(31.1, 121.6)
        expected = BoundingBox(31.1, 31.3, 121.4, 121.6)
        assert BoundingBox.from_corners(ne, sw) == expected
        assert BoundingBox.from_corners(sw, ne) == expected
        assert BoundingBox.from_corners(nw, se) == expected

    def test_inverted_box_rejected(self):
        with pytest.raises(ValueError):
            BoundingBox(min_lat=2.0, max_lat=1.0, min_lon=0.0, max_lon=1.0)

    def test_degenerate_box_allowed(self):
        box = BoundingBox.from_corners(GeoPoint(1.0, 2.0), GeoPoint(1.0, 2.0))
        assert box.contains(1.0, 2.0)


class TestQueryWindow:

    def test_swapped_corners_same_result(self, store):
        for i in range(10):
            store.insert(31.0 + i * 0.02, 121.0 + i * 0.02, i * 1000)
        a = GeoPoint(31.05, 121.05)
        b = GeoPoint(31.15, 121.15)
        assert query_window(store, a, b) == query_window(store, b, a)
        assert [s.timestamp_ms for s in query_window(store, a, b)] == [3000, 4000, 5000, 6000, 7000]

    def test_no_caching_between_calls(self, store):
        a = GeoPoint(30.0, 120.0)
        b = GeoPoint(32.0, 122.0)
        assert query_window(store, a, b) == []
        store.insert(31.0, 121.0, 0)
        assert len(query_window(store, a, b)) == 1


def test_viewport_bbox():
    box = viewport_bbox(GeoPoint(31.0, 121.0), 0.2, 0.4)
    assert box.min_lat == pytest.approx(30.9)
    assert box.max_lat == pytest.approx(31.1)
    assert box.min_lon == pytest.approx(120.8)
    assert box.max_lon == pytest.approx(121.2)
