"""Formatting helpers for console output."""

from datetime import datetime
from typing import Optional


def format_duration(seconds: Optional[float]) -> str:
    if not seconds or seconds <= 0:
        return "0m"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{secs}s"


def format_distance(meters: Optional[float]) -> str:
    if not meters or meters < 1:
        return "0 m"
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{round(meters)} m"


def format_time(moment: Optional[datetime]) -> str:
    if moment is None:
        return "-"
    return moment.strftime("%H:%M")
