from __future__ import annotations

import math
from pathlib import Path

import pydeck as pdk
import streamlit as st

from fog_path.csv_io import load_new_samples
from fog_path.feasibility import FilterParams, segment, segment_stats
from fog_path.models import DEFAULT_DB_PATH, DEFAULT_TZ, MAX_SPEED_MPS, GeoPoint, Polyline
from fog_path.store import SampleStore, StorageError, insert_many, open_store
from fog_path.timeutils import dt_from_epoch_ms
from fog_path.window import query_window, viewport_bbox

FOG_COLOR = [40, 44, 52, 200]
PATH_COLOR = [255, 255, 255, 255]
PATH_WIDTH_PX = 50


@st.cache_resource(show_spinner=False)
def _store(db_path: str) -> SampleStore:
    return open_store(db_path)


def _zoom_for_span(span_lon: float) -> float:
    """Rough slippy-map zoom that fits ``span_lon`` degrees across the view."""

    if span_lon <= 0:
        return 18.0
    return max(0.0, min(20.0, math.log2(360.0 / span_lon)))


def _layers(polylines: list[Polyline], fog_ring: list[list[float]]) -> list[pdk.Layer]:
    paths = [{"path": [[p.longitude, p.latitude] for p in line]} for line in polylines if len(line) > 1]
    dots = [{"position": [line[0].longitude, line[0].latitude]} for line in polylines if len(line) == 1]
    return [
        pdk.Layer("PolygonLayer", data=[{"polygon": fog_ring}], get_polygon="polygon", get_fill_color=FOG_COLOR),
        pdk.Layer(
            "PathLayer",
            data=paths,
            get_path="path",
            get_color=PATH_COLOR,
            get_width=PATH_WIDTH_PX,
            width_units="pixels",
            cap_rounded=True,
            joint_rounded=True,
        ),
        pdk.Layer(
            "ScatterplotLayer",
            data=dots,
            get_position="position",
            get_fill_color=PATH_COLOR,
            get_radius=PATH_WIDTH_PX / 2,
            radius_units="pixels",
        ),
    ]


def main() -> None:
    st.set_page_config(page_title="迷雾足迹：视窗轨迹", layout="wide")
    st.title("迷雾足迹：按视窗显示走过的轨迹")

    with st.sidebar:
        st.subheader("数据与时区")
        db_path = st.text_input("数据库路径", value=DEFAULT_DB_PATH)
        tz_name = st.text_input("时区（IANA）", value=DEFAULT_TZ)
        max_speed = st.number_input("最大可行速度（米/秒）", value=MAX_SPEED_MPS, min_value=0.1, step=1.0)

        st.subheader("导入 Path.csv")
        path_csv = st.text_input("Path.csv 路径", value="Path.csv")
        import_clicked = st.button("导入到数据库", use_container_width=True)

        st.subheader("视窗")
        center_lat = st.number_input("中心纬度", value=31.2304000, format="%.7f")
        center_lon = st.number_input("中心经度", value=121.4737000, format="%.7f")
        span_lat = st.number_input("纬度跨度（度）", value=0.05, min_value=0.0001, format="%.4f")
        span_lon = st.number_input("经度跨度（度）", value=0.05, min_value=0.0001, format="%.4f")

    try:
        store = _store(db_path)
    except StorageError as exc:
        st.error(f"无法打开数据库：{exc}")
        return

    if import_clicked:
        if not Path(path_csv).exists():
            st.error(f"找不到文件：{path_csv!r}")
        else:
            with st.spinner("正在导入 Path.csv ..."):
                new_samples, summary = load_new_samples(path_csv)
                ids = insert_many(store, new_samples)
            st.success(f"已导入 {len(ids)} 个点（跳过 {summary.rows_skipped} 行）")

    bbox = viewport_bbox(GeoPoint(float(center_lat), float(center_lon)), float(span_lat), float(span_lon))
    sw = GeoPoint(bbox.min_lat, bbox.min_lon)
    ne = GeoPoint(bbox.max_lat, bbox.max_lon)
    try:
        samples = query_window(store, ne, sw)
        total = store.count()
    except StorageError as exc:
        st.exception(exc)
        return

    polylines = segment(samples, FilterParams(max_speed_mps=float(max_speed)))
    stats = segment_stats(polylines)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("视窗内点数", str(len(samples)))
    c2.metric("折线段数", str(stats.polylines))
    c3.metric("孤立点", str(stats.isolated_points))
    c4.metric("库内总点数", str(total))

    fog_ring = [
        [bbox.min_lon, bbox.min_lat],
        [bbox.max_lon, bbox.min_lat],
        [bbox.max_lon, bbox.max_lat],
        [bbox.min_lon, bbox.max_lat],
    ]
    deck = pdk.Deck(
        layers=_layers(polylines, fog_ring),
        initial_view_state=pdk.ViewState(
            latitude=float(center_lat),
            longitude=float(center_lon),
            zoom=_zoom_for_span(float(span_lon)),
        ),
        map_style=None,
    )
    st.pydeck_chart(deck, use_container_width=True)

    with st.expander("视窗内的点（按时间排序）", expanded=False):
        rows = [
            {
                "id": s.id,
                "time_local": dt_from_epoch_ms(s.timestamp_ms, tz_name).isoformat(sep=" "),
                "latitude": s.latitude,
                "longitude": s.longitude,
            }
            for s in samples
        ]
        st.dataframe(rows, use_container_width=True, height=360)

    st.caption(
        "说明：相邻两点只有在写入顺序相邻、位置不同、且速度不超过上限时才连线；其余点作为新一段的起点。"
    )


if __name__ == "__main__":
    main()
