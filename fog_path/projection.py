"""Map geographic polylines into a renderer's coordinate space.

The projector is always passed in by the caller. ``WebMercatorViewport`` is a
ready-made one for pixel canvases; map widgets can supply their own callable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable

from fog_path.models import BoundingBox, GeoPoint, Polyline

# Web Mercator is undefined at the poles; clamp like slippy-map tiles do.
MAX_MERCATOR_LAT = 85.05112878


@dataclass(frozen=True, slots=True)
class RenderPoint:
    """A point in render space (e.g. screen pixels)."""

    x: float
    y: float


Projector = Callable[[GeoPoint], RenderPoint]


def project_polylines(polylines: Iterable[Polyline], projector: Projector) -> list[list[RenderPoint]]:
    """Apply ``projector`` to every point, keeping the polyline breaks."""

    return [[projector(p) for p in line] for line in polylines]


def _mercator_y(lat: float) -> float:
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
    phi = math.radians(lat)
    return math.log(math.tan(math.pi / 4.0 + phi / 2.0))


class WebMercatorViewport:
    """Project points onto a ``width`` x ``height`` canvas showing ``bbox``.

    The box's north-west corner maps to (0, 0) and its south-east corner to
    (width, height). Points outside the box project outside the canvas.
    """

    def __init__(self, bbox: BoundingBox, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas size must be positive, got {width}x{height}")
        self.bbox = bbox
        self.width = float(width)
        self.height = float(height)
        self._x0 = math.radians(bbox.min_lon)
        self._x1 = math.radians(bbox.max_lon)
        self._y_top = _mercator_y(bbox.max_lat)
        self._y_bottom = _mercator_y(bbox.min_lat)

    def __call__(self, point: GeoPoint) -> RenderPoint:
        x = math.radians(point.longitude)
        y = _mercator_y(point.latitude)
        dx = self._x1 - self._x0
        dy = self._y_top - self._y_bottom
        # degenerate (zero-area) boxes collapse onto the canvas centre
        px = (x - self._x0) / dx * self.width if dx else self.width / 2.0
        py = (self._y_top - y) / dy * self.height if dy else self.height / 2.0
        return RenderPoint(px, py)
