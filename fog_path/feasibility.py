"""Split a time-ordered run of samples into drawable polylines.

Raw consecutive GPS fixes can jump implausibly (signal loss, multipath,
manual location changes). Two neighbouring samples are joined only when:

- their ids are adjacent (nothing else was recorded between them), and
- they are not at the same spot, and
- covering the distance in the elapsed time stays within ``max_speed_mps``.

Everything else starts a new polyline. This is a connect/disconnect decision
with no smoothing and no look-back beyond the previous sample.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from fog_path.geo import distance_between
from fog_path.models import MAX_SPEED_MPS, Polyline, Sample


@dataclass(frozen=True, slots=True)
class FilterParams:
    """Parameters controlling segmentation."""

    max_speed_mps: float = MAX_SPEED_MPS


def is_feasible_step(previous: Sample, nxt: Sample, params: FilterParams | None = None) -> bool:
    """Whether ``nxt`` can be reached from ``previous`` by continuous travel.

    Zero distance is never connected: a zero-length segment draws nothing.
    Zero elapsed time is never connected: the speed is unbounded.
    Negative elapsed time (clock went backwards) is never connected either,
    unlike the Android app, where the negative speed passed the limit check.
    Timestamp-ordered query results cannot produce it.
    """

    params = params or FilterParams()
    if nxt.id - previous.id != 1:
        return False

    distance_m = distance_between(previous.point, nxt.point)
    if distance_m == 0.0:
        return False

    elapsed_s = (nxt.timestamp_ms - previous.timestamp_ms) / 1000.0
    if elapsed_s <= 0.0:
        return False

    return distance_m / elapsed_s <= params.max_speed_mps


def segment(samples: Iterable[Sample], params: FilterParams | None = None) -> list[Polyline]:
    """Partition samples (ascending by timestamp) into polylines.

    Args:
        samples: Samples as returned by ``query_window``.
        params: Segmentation parameters; defaults to ``FilterParams()``.

    Returns:
        Polylines in input order. A polyline of length 1 is an isolated point.
    """

    params = params or FilterParams()
    polylines: list[Polyline] = []
    current: Polyline = []
    previous: Sample | None = None

    for nxt in samples:
        if previous is not None and is_feasible_step(previous, nxt, params):
            current.append(nxt.point)
        else:
            if current:
                polylines.append(current)
            current = [nxt.point]
        previous = nxt

    if current:
        polylines.append(current)
    return polylines


@dataclass(frozen=True, slots=True)
class SegmentStats:
    """Shape of a segmentation result."""

    polylines: int
    points: int
    isolated_points: int
    longest: int


def segment_stats(polylines: Sequence[Polyline]) -> SegmentStats:
    lengths = [len(p) for p in polylines]
    return SegmentStats(
        polylines=len(lengths),
        points=sum(lengths),
        isolated_points=sum(1 for n in lengths if n == 1),
        longest=max(lengths, default=0),
    )
