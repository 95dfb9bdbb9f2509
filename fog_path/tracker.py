"""Wire store, window query, feasibility filter and projector together."""

from __future__ import annotations

import logging

from fog_path.feasibility import FilterParams, segment
from fog_path.models import GeoPoint, NewSample, Polyline, Sample
from fog_path.projection import Projector, RenderPoint, project_polylines
from fog_path.store import SampleStore, StorageError
from fog_path.window import query_window

logger = logging.getLogger(__name__)


class FogTracker:
    """Records positions and turns a viewport into polylines.

    The capture side calls ``record`` once per sensor fix; the display side
    calls ``polylines_in_view`` or ``render`` on every viewport change and
    redraws everything it gets back.
    """

    def __init__(self, store: SampleStore, params: FilterParams | None = None) -> None:
        self.store = store
        self.params = params or FilterParams()

    def record(self, latitude: float, longitude: float, timestamp_ms: int | None = None) -> Sample | None:
        """Store one fix. Returns the stored sample, or None if it was dropped.

        A storage failure only costs one point on the path, so it is logged and
        swallowed here instead of reaching the sensor callback.
        """

        new = NewSample.capture(latitude, longitude, timestamp_ms)
        try:
            sample_id = self.store.insert(new.latitude, new.longitude, new.timestamp_ms)
        except StorageError as exc:
            logger.warning("丢弃定位点 (%s, %s) @%s：%s", new.latitude, new.longitude, new.timestamp_ms, exc)
            return None
        return Sample(id=sample_id, timestamp_ms=new.timestamp_ms, latitude=new.latitude, longitude=new.longitude)

    def polylines_in_view(self, corner_a: GeoPoint, corner_b: GeoPoint) -> list[Polyline]:
        samples = query_window(self.store, corner_a, corner_b)
        polylines = segment(samples, self.params)
        logger.debug("viewport %s/%s: %s samples -> %s polylines", corner_a, corner_b, len(samples), len(polylines))
        return polylines

    def render(self, corner_a: GeoPoint, corner_b: GeoPoint, projector: Projector) -> list[list[RenderPoint]]:
        """Polylines for the viewport, already mapped through ``projector``."""

        return project_polylines(self.polylines_in_view(corner_a, corner_b), projector)
