"""Time parsing and formatting utilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：Asia/Shanghai") from exc


def dt_from_epoch_ms(epoch_ms: int, tz_name: str) -> datetime:
    """Convert epoch milliseconds to a timezone-aware datetime in ``tz_name``."""

    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tzinfo_from_name(tz_name))


def parse_time_ms(text: str, tz_name: str) -> int:
    """Parse a user-provided time to epoch milliseconds.

    Accepted forms:
      - a bare integer, taken as epoch milliseconds
      - "YYYY-MM-DD HH:MM:SS" or "YYYY-MM-DDTHH:MM:SS"
      - either of the above with a timezone offset, e.g. "+08:00"

    Naive datetimes are interpreted in ``tz_name``.

    Raises:
        ValueError: If the text cannot be parsed.
    """

    s = text.strip()
    if s.lstrip("-").isdigit():
        return int(s)

    tz = tzinfo_from_name(tz_name)
    try:
        dt = datetime.fromisoformat(s.replace("T", " "))
    except ValueError as exc:
        raise ValueError(f"无法解析时间：{text!r}。建议格式：2025-12-18 09:30:00 或毫秒时间戳") from exc

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return int(dt.timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class DeltaStats:
    """Sampling interval stats (seconds)."""

    count: int
    min_s: float
    median_s: float
    p95_s: float
    max_s: float
    # steps where the clock went backwards (excluded from the stats above)
    backwards: int


def delta_stats(epoch_ms_in_order: Iterable[int]) -> DeltaStats | None:
    """Compute sampling-interval statistics over consecutive timestamps.

    Args:
        epoch_ms_in_order: Epoch ms in recording order (not re-sorted).

    Returns:
        DeltaStats or None if there are no forward steps.
    """

    ms = list(epoch_ms_in_order)
    if len(ms) < 2:
        return None
    deltas: list[float] = []
    backwards = 0
    for prev, cur in zip(ms, ms[1:]):
        if cur < prev:
            backwards += 1
        else:
            deltas.append((cur - prev) / 1000.0)
    if not deltas:
        return None
    deltas.sort()
    n = len(deltas)
    median = deltas[n // 2] if n % 2 == 1 else 0.5 * (deltas[n // 2 - 1] + deltas[n // 2])
    p95 = deltas[int(0.95 * (n - 1))]
    return DeltaStats(
        count=n,
        min_s=deltas[0],
        median_s=median,
        p95_s=p95,
        max_s=deltas[-1],
        backwards=backwards,
    )
