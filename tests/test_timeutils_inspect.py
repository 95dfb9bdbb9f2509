"""
Tests for time helpers and store inspection.
"""

import pytest

from fog_path.feasibility import FilterParams
from fog_path.inspect import inspect_samples
from fog_path.models import BoundingBox
from fog_path.timeutils import delta_stats, dt_from_epoch_ms, parse_time_ms, tzinfo_from_name


class TestTimeutils:

    def test_invalid_timezone(self):
        with pytest.raises(ValueError):
            tzinfo_from_name("Not/AZone")

    def test_dt_from_epoch_ms(self):
        dt = dt_from_epoch_ms(1735689600000, "Asia/Shanghai")
        assert dt.isoformat(sep=" ") == "2025-01-01 08:00:00+08:00"

    def test_parse_time_ms_naive_uses_tz(self):
        assert parse_time_ms("2025-01-01 08:00:00", "Asia/Shanghai") == 1735689600000

    def test_parse_time_ms_with_offset(self):
        assert parse_time_ms("2025-01-01T00:00:00+00:00", "Asia/Shanghai") == 1735689600000

    def test_parse_time_ms_epoch(self):
        assert parse_time_ms(" 1735689600000 ", "Asia/Shanghai") == 1735689600000

    def test_parse_time_ms_garbage(self):
        with pytest.raises(ValueError):
            parse_time_ms("yesterday", "Asia/Shanghai")

    def test_delta_stats_counts_backward_steps(self):
        stats = delta_stats([0, 1000, 3000, 2000, 6000])
        assert stats is not None
        assert stats.backwards == 1
        assert stats.count == 3
        assert stats.min_s == 1.0
        assert stats.max_s == 4.0

    def test_delta_stats_too_short(self):
        assert delta_stats([5]) is None


class TestInspectSamples:

    def test_empty(self):
        res = inspect_samples([])
        assert res.samples == 0
        assert res.extent is None
        assert res.segments.polylines == 0

    def test_summary(self, make_sample):
        samples = [
            make_sample(1, 0, 31.2000, 121.4000),
            make_sample(2, 10_000, 31.2001, 121.4001),
            make_sample(3, 10_000, 31.3000, 121.5000),
            make_sample(4, 20_000, 31.3001, 121.5000),
        ]
        res = inspect_samples(samples)
        assert res.samples == 4
        assert res.min_time_ms == 0
        assert res.max_time_ms == 20_000
        assert res.duplicates_timestamp == 1
        assert res.extent == BoundingBox(31.2, 31.3001, 121.4, 121.5)
        assert res.segments.polylines == 2
        assert res.segments.longest == 2

    def test_speed_limit_changes_segments(self, make_sample):
        samples = [make_sample(1, 0, 0.0, 0.0), make_sample(2, 10_000, 0.001, 0.0)]
        assert inspect_samples(samples).segments.polylines == 1
        assert inspect_samples(samples, FilterParams(max_speed_mps=1.0)).segments.polylines == 2
