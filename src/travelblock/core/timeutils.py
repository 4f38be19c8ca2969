# core/timeutils.py
"""Helpers for picking and displaying a flight-time budget (seconds)."""

import re

from travelblock.core.schemas import TimeRange

MIN_TIME = 30 * 60
MAX_TIME = 5 * 60 * 60
SNAP_INTERVAL = 10 * 60

_HOURS_RE = re.compile(r"(\d+)\s*h")
_MINUTES_RE = re.compile(r"(\d+)\s*m")


def snap_to_interval(value: float, interval: float) -> float:
    """Round `value` to the nearest multiple of `interval` (no-op for interval <= 0)."""
    if interval <= 0:
        return value
    return round(value / interval) * interval


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def format_duration(seconds: float) -> str:
    """5400 -> '1h 30m', 1800 -> '30m'."""
    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def parse_duration(text: str) -> int:
    """
    Parse '1h 30m', '2h' or '45m' back into seconds.
    Anything that does not contain an hour or minute component parses as 0.
    """
    text = text.strip().lower()
    hours = _HOURS_RE.search(text)
    minutes = _MINUTES_RE.search(text)
    h = int(hours.group(1)) if hours else 0
    m = int(minutes.group(1)) if minutes else 0
    return h * 3600 + m * 60


def default_time_range() -> TimeRange:
    return TimeRange(min=MIN_TIME, max=MAX_TIME, interval=SNAP_INTERVAL)
