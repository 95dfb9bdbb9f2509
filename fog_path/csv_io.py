"""CSV input/output for track files.

Import reads the Path.csv export format; export writes stored samples with
their ids so a file can be inspected or re-imported elsewhere.
"""

from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from fog_path.models import NewSample, Sample
from fog_path.timeutils import dt_from_epoch_ms

logger = logging.getLogger(__name__)

EXPORT_FIELDS = ["id", "time_local", "epoch_ms", "latitude", "longitude"]


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_int(value: str) -> int:
    return int(value.strip())


def _parse_float(value: str) -> float:
    v = float(value.strip())
    if not math.isfinite(v):
        raise ValueError(f"non-finite coordinate: {value!r}")
    return v


def _row_to_sample(row: dict[str, str]) -> NewSample:
    return NewSample(
        timestamp_ms=_parse_int(row["geoTime"]),
        latitude=_parse_float(row["latitude"]),
        longitude=_parse_float(row["longitude"]),
    )


def load_new_samples(csv_path: str | Path) -> tuple[list[NewSample], CsvSummary]:
    """Load all rows into memory and report how many were skipped."""

    p = Path(csv_path)
    rows_total = 0
    parsed: list[NewSample] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        missing = {"geoTime", "latitude", "longitude"} - set(fieldnames)
        if fieldnames and missing:
            raise KeyError(f"CSV缺少必要字段：{sorted(missing)}. 实际字段：{list(fieldnames)}")
        for row in reader:
            rows_total += 1
            try:
                parsed.append(_row_to_sample(row))
            except (KeyError, ValueError, TypeError, AttributeError):
                continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("CSV中有 %s 行解析失败已跳过", summary.rows_skipped)
    return parsed, summary


def export_samples_csv(samples: Iterable[Sample], out_path: str | Path, tz_name: str) -> int:
    """Write stored samples to CSV with a readable local time column.

    Returns:
        Number of rows written.
    """

    p = Path(out_path)
    n = 0
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=EXPORT_FIELDS)
        w.writeheader()
        for s in samples:
            w.writerow(
                {
                    "id": s.id,
                    "time_local": dt_from_epoch_ms(s.timestamp_ms, tz_name).isoformat(sep=" "),
                    "epoch_ms": s.timestamp_ms,
                    "latitude": s.latitude,
                    "longitude": s.longitude,
                }
            )
            n += 1
    return n
