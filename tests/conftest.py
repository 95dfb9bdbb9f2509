"""
Pytest fixtures for fog_path tests.

Provides both store backends (parametrized) and a small factory for
building samples with explicit ids.
"""

import pytest

from fog_path.models import Sample
from fog_path.store import MemorySampleStore, SqliteSampleStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each test using this fixture runs against both backends."""
    if request.param == "memory":
        s = MemorySampleStore()
    else:
        s = SqliteSampleStore(tmp_path / "locations.db")
    yield s
    s.close()


@pytest.fixture
def sqlite_store(tmp_path):
    s = SqliteSampleStore(tmp_path / "locations.db")
    yield s
    s.close()


@pytest.fixture
def make_sample():
    """Factory: make_sample(id, t_ms, lat, lon)."""
    def _make(sample_id: int, timestamp_ms: int, latitude: float, longitude: float) -> Sample:
        return Sample(id=sample_id, timestamp_ms=timestamp_ms, latitude=latitude, longitude=longitude)
    return _make


@pytest.fixture
def path_csv(tmp_path):
    """A Path.csv export with one corrupt row."""
    p = tmp_path / "Path.csv"
    p.write_text(
        "geoTime,latitude,longitude,altitude,speed\n"
        "1735689600000,31.2304000,121.4737000,5.0,1.2\n"
        "1735689610000,31.2304500,121.4737400,5.0,1.2\n"
        "not-a-time,31.2305000,121.4738000,5.0,1.2\n"
        "1735689620000,31.2305000,121.4738000,5.0,1.2\n",
        encoding="utf-8",
    )
    return p
