"""Duration formatting shared by the report writer and the terminal views."""

from datetime import timedelta
from typing import Tuple


def _split(delta: timedelta) -> Tuple[int, int, int]:
    """Split a duration into whole hours, minutes and seconds.

    Each unit is truncated towards zero and carries the sign of ``delta``.
    """
    total = int(delta.total_seconds())
    sign = -1 if total < 0 else 1
    hours, rest = divmod(abs(total), 3600)
    minutes, seconds = divmod(rest, 60)
    return sign * hours, sign * minutes, sign * seconds


def format_duration(delta: timedelta) -> str:
    """Format a duration for the live timer: ``MM:SS`` or ``HH:MM:SS``."""
    hours, minutes, seconds = _split(delta)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_duration_long(delta: timedelta) -> str:
    """Format a duration as ``1h 2m 5s``, omitting zero leading units."""
    hours, minutes, seconds = _split(delta)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
