"""Summarise the contents of a sample store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from fog_path.feasibility import FilterParams, SegmentStats, segment, segment_stats
from fog_path.models import BoundingBox, Sample
from fog_path.timeutils import DeltaStats, delta_stats


@dataclass(frozen=True, slots=True)
class InspectResult:
    """High-level store inspection result."""

    samples: int
    min_time_ms: int | None
    max_time_ms: int | None
    delta: DeltaStats | None
    extent: BoundingBox | None
    duplicates_timestamp: int
    segments: SegmentStats


def inspect_samples(samples: Sequence[Sample], params: FilterParams | None = None) -> InspectResult:
    """Inspect samples, e.g. ``store.all_samples()``.

    Sampling intervals are measured in insertion (id) order so clock jumps
    show up as backward steps; segmentation runs in timestamp order, the same
    way a viewport covering the whole track would.
    """

    by_time = sorted(samples, key=lambda s: (s.timestamp_ms, s.id))
    stats = segment_stats(segment(by_time, params))
    if not by_time:
        return InspectResult(
            samples=0,
            min_time_ms=None,
            max_time_ms=None,
            delta=None,
            extent=None,
            duplicates_timestamp=0,
            segments=stats,
        )

    dupe = sum(1 for a, b in zip(by_time, by_time[1:]) if a.timestamp_ms == b.timestamp_ms)
    by_id = sorted(samples, key=lambda s: s.id)
    lats = [s.latitude for s in samples]
    lons = [s.longitude for s in samples]
    return InspectResult(
        samples=len(by_time),
        min_time_ms=by_time[0].timestamp_ms,
        max_time_ms=by_time[-1].timestamp_ms,
        delta=delta_stats(s.timestamp_ms for s in by_id),
        extent=BoundingBox(min(lats), max(lats), min(lons), max(lons)),
        duplicates_timestamp=dupe,
        segments=stats,
    )
