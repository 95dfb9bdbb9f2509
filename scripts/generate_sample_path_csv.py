from __future__ import annotations

import argparse
import csv
import math
import random
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Final

from zoneinfo import ZoneInfo


TZ: Final[str] = "Asia/Shanghai"
METERS_PER_DEG_LAT: Final[float] = 111_195.0


@dataclass(frozen=True, slots=True)
class Cluster:
    name: str
    lat: float
    lon: float


def _epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def generate_points(
    *,
    rows: int,
    seed: int,
    start_local: datetime,
    clusters: list[Cluster],
) -> list[dict[str, str]]:
    """Generate fake Path.csv rows: a continuous walk/drive with occasional GPS jumps."""

    rng = random.Random(seed)
    cur_ms = _epoch_ms(start_local.replace(tzinfo=ZoneInfo(TZ)))

    out: list[dict[str, str]] = []
    cluster = rng.choice(clusters)
    lat, lon = cluster.lat, cluster.lon
    heading = rng.uniform(0, 2 * math.pi)

    for _ in range(rows):
        # Sampling interval: 5-10 s like a foreground location request
        step_s = rng.uniform(5, 10)
        cur_ms += int(step_s * 1000)

        roll = rng.random()
        if roll < 0.02:
            # Occasionally "teleport" to another city to simulate a flight / manual location change
            cluster = rng.choice(clusters)
            lat, lon = cluster.lat, cluster.lon
        elif roll < 0.05:
            # Multipath jump: a single fix lands several km away, then the track resumes
            jump_lat = lat + rng.uniform(-0.05, 0.05)
            jump_lon = lon + rng.uniform(-0.05, 0.05)
            out.append(_row(cur_ms, jump_lat, jump_lon, rng))
            continue
        else:
            speed = rng.choice([1.4, 1.4, 5.0, 15.0])  # walk / cycle / drive, m/s
            heading += rng.uniform(-0.4, 0.4)
            dist = speed * step_s
            lat += dist * math.cos(heading) / METERS_PER_DEG_LAT
            lon += dist * math.sin(heading) / (METERS_PER_DEG_LAT * math.cos(math.radians(lat)))

        out.append(_row(cur_ms, lat, lon, rng))

    return out


def _row(geo_ms: int, lat: float, lon: float, rng: random.Random) -> dict[str, str]:
    return {
        "geoTime": str(geo_ms),
        "latitude": f"{lat:.7f}",
        "longitude": f"{lon:.7f}",
        "altitude": f"{rng.uniform(0, 60):.1f}",
        "horizontalAccuracy": f"{rng.choice([3.0, 5.0, 8.0, 12.0, 35.0]):.1f}",
        "locationType": str(rng.choice([0, 1])),
    }


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake Path.csv for demo/testing (privacy-safe).")
    p.add_argument("--out", type=str, default="sample_data/Path.csv", help="Output CSV path")
    p.add_argument("--rows", type=int, default=2000, help="Number of rows")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument(
        "--start",
        type=str,
        default="2025-01-01 08:00:00",
        help="Start local time in Asia/Shanghai, e.g. '2025-01-01 08:00:00'",
    )
    args = p.parse_args()

    start_local = datetime.fromisoformat(args.start)
    clusters = [
        Cluster("shanghai_people_square", 31.2304000, 121.4737000),
        Cluster("shanghai_xujiahui", 31.1950000, 121.4370000),
        Cluster("beijing_trip", 39.9042000, 116.4074000),
    ]

    rows = generate_points(rows=args.rows, seed=args.seed, start_local=start_local, clusters=clusters)
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = ["geoTime", "latitude", "longitude", "altitude", "horizontalAccuracy", "locationType"]
    with out_path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        w.writerows(rows)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed})")
    print(f"Import with: python -m fog_path import-csv --csv {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
