"""Command-line interface for fog_path.

Run:
    python -m fog_path import-csv --csv Path.csv --db locations.db
    python -m fog_path window --corner 31.25,121.45 31.21,121.50
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from fog_path.csv_io import export_samples_csv, load_new_samples
from fog_path.feasibility import FilterParams
from fog_path.inspect import inspect_samples
from fog_path.models import DEFAULT_DB_PATH, DEFAULT_TZ, MAX_SPEED_MPS, BoundingBox, GeoPoint, Polyline
from fog_path.projection import WebMercatorViewport
from fog_path.store import StorageError, insert_many, open_store
from fog_path.timeutils import dt_from_epoch_ms, parse_time_ms
from fog_path.tracker import FogTracker

logger = logging.getLogger(__name__)


def _parse_corner(text: str) -> GeoPoint:
    """Parse "lat,lon" into a GeoPoint (argparse type)."""

    try:
        lat_s, lon_s = text.split(",", 1)
        return GeoPoint(float(lat_s), float(lon_s))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"角点格式应为 lat,lon，实际：{text!r}") from exc


def _params(args: argparse.Namespace) -> FilterParams:
    return FilterParams(max_speed_mps=args.max_speed)


def _cmd_record(args: argparse.Namespace) -> int:
    ts = parse_time_ms(args.time, args.tz) if args.time else None
    with open_store(args.db) as store:
        sample = FogTracker(store, _params(args)).record(args.lat, args.lon, ts)
    if sample is None:
        print("写入失败，本次定位点已丢弃（详见日志）", file=sys.stderr)
        return 2
    when = dt_from_epoch_ms(sample.timestamp_ms, args.tz).isoformat(sep=" ")
    print(f"已记录：id={sample.id} time={when} lat={sample.latitude} lon={sample.longitude}")
    return 0


def _cmd_import_csv(args: argparse.Namespace) -> int:
    new_samples, summary = load_new_samples(args.csv)
    with open_store(args.db) as store:
        ids = insert_many(store, new_samples)
        total = store.count()
    print(f"total_rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    print(f"已导入 {len(ids)} 个点到 {args.db}（库内共 {total} 个点）")
    return 0


def _cmd_export_csv(args: argparse.Namespace) -> int:
    with open_store(args.db) as store:
        n = export_samples_csv(store.all_samples(), args.out, args.tz)
    print(f"已导出：{args.out}（{n} 行）")
    return 0


def polylines_to_geojson(polylines: list[Polyline]) -> dict[str, Any]:
    """GeoJSON FeatureCollection: LineString per polyline, Point for isolated points."""

    features = []
    for i, line in enumerate(polylines):
        coords = [[p.longitude, p.latitude] for p in line]
        if len(coords) == 1:
            geometry: dict[str, Any] = {"type": "Point", "coordinates": coords[0]}
        else:
            geometry = {"type": "LineString", "coordinates": coords}
        features.append({"type": "Feature", "properties": {"index": i, "points": len(line)}, "geometry": geometry})
    return {"type": "FeatureCollection", "features": features}


def _cmd_window(args: argparse.Namespace) -> int:
    corner_a, corner_b = args.corner
    with open_store(args.db) as store:
        tracker = FogTracker(store, _params(args))
        payload: Any
        if args.format == "pixels":
            projector = WebMercatorViewport(BoundingBox.from_corners(corner_a, corner_b), args.width, args.height)
            lines = tracker.render(corner_a, corner_b, projector)
            count = len(lines)
            payload = [[[round(p.x, 2), round(p.y, 2)] for p in line] for line in lines]
        else:
            polylines = tracker.polylines_in_view(corner_a, corner_b)
            count = len(polylines)
            if args.format == "geojson":
                payload = polylines_to_geojson(polylines)
            else:
                payload = [[[p.latitude, p.longitude] for p in line] for line in polylines]

    text = json.dumps(payload, ensure_ascii=False, indent=2 if args.pretty else None)
    if args.out:
        Path(args.out).write_text(text + "\n", encoding="utf-8")
        print(f"已导出：{args.out}（{count} 段）")
    else:
        print(text)
    return 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    with open_store(args.db) as store:
        res = inspect_samples(store.all_samples(), _params(args))

    print("### 点数")
    print(f"samples={res.samples}")
    print()

    if res.min_time_ms is not None and res.max_time_ms is not None:
        print("### 时间范围（本地时区）")
        start = dt_from_epoch_ms(res.min_time_ms, args.tz)
        end = dt_from_epoch_ms(res.max_time_ms, args.tz)
        print(f"start={start.isoformat(sep=' ')}, end={end.isoformat(sep=' ')}")
        print()

    if res.delta is not None:
        print("### 采样间隔（秒，按写入顺序）")
        print(
            f"count={res.delta.count}, min={res.delta.min_s:.3f}, median={res.delta.median_s:.3f}, "
            f"p95={res.delta.p95_s:.3f}, max={res.delta.max_s:.3f}, backwards={res.delta.backwards}"
        )
        print()

    if res.extent is not None:
        print("### 经纬度范围")
        print(f"lat=[{res.extent.min_lat}, {res.extent.max_lat}], lon=[{res.extent.min_lon}, {res.extent.max_lon}]")
        print()

    print("### 重复时间戳")
    print(res.duplicates_timestamp)
    print()

    print(f"### 轨迹分段（限速 {args.max_speed} m/s）")
    seg = res.segments
    print(f"polylines={seg.polylines}, isolated_points={seg.isolated_points}, longest={seg.longest}")

    if args.json:
        print(json.dumps(asdict(res), ensure_ascii=False, indent=2))
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--db", type=str, default=DEFAULT_DB_PATH, help="SQLite 数据库路径")
    p.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA），默认 Asia/Shanghai")
    p.add_argument(
        "--max-speed",
        type=float,
        default=MAX_SPEED_MPS,
        help="相邻两点之间允许的最大速度（米/秒），超过则断开轨迹，默认 31（约110km/h）",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="fog_path")
    p.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="日志级别",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_rec = sub.add_parser("record", help="记录一个定位点")
    _add_common(p_rec)
    p_rec.add_argument("--lat", type=float, required=True, help="纬度")
    p_rec.add_argument("--lon", type=float, required=True, help="经度")
    p_rec.add_argument(
        "--time",
        type=str,
        default=None,
        help="采样时间（例如 2025-12-18 09:30:00 或毫秒时间戳），默认当前时间",
    )
    p_rec.set_defaults(func=_cmd_record)

    p_imp = sub.add_parser("import-csv", help="按文件顺序把 Path.csv 导入数据库")
    _add_common(p_imp)
    p_imp.add_argument("--csv", type=str, default="Path.csv", help="输入CSV路径")
    p_imp.set_defaults(func=_cmd_import_csv)

    p_exp = sub.add_parser("export-csv", help="导出库内所有点（按时间排序）")
    _add_common(p_exp)
    p_exp.add_argument("--out", type=str, default="samples.csv", help="输出CSV路径")
    p_exp.set_defaults(func=_cmd_export_csv)

    p_win = sub.add_parser("window", help="查询视窗内的点并按可行速度切分为折线")
    _add_common(p_win)
    p_win.add_argument(
        "--corner",
        type=_parse_corner,
        nargs=2,
        required=True,
        metavar=("LAT,LON", "LAT,LON"),
        help="视窗的两个对角（顺序任意）",
    )
    p_win.add_argument(
        "--format",
        type=str,
        default="json",
        choices=["json", "geojson", "pixels"],
        help="输出格式：json([lat, lon] 折线) / geojson / pixels(投影到画布像素)",
    )
    p_win.add_argument("--width", type=float, default=1080.0, help="pixels 格式的画布宽度")
    p_win.add_argument("--height", type=float, default=1920.0, help="pixels 格式的画布高度")
    p_win.add_argument("--pretty", action="store_true", help="缩进输出JSON")
    p_win.add_argument("--out", type=str, default=None, help="输出文件路径（默认打印到标准输出）")
    p_win.set_defaults(func=_cmd_window)

    p_ins = sub.add_parser("inspect", help="统计库内点数/时间范围/采样间隔/分段情况")
    _add_common(p_ins)
    p_ins.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    p_ins.set_defaults(func=_cmd_inspect)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return int(args.func(args))
    except StorageError as exc:
        logger.debug("storage failure", exc_info=True)
        print(f"数据库错误：{exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
