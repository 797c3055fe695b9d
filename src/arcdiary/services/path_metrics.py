"""Distance, elevation and timing helpers for timeline items."""

from typing import Optional, Sequence

from arcdiary.models.location import Sample, haversine_m
from arcdiary.models.timeline import TimelineItem


def path_distance(samples: Sequence[Sample]) -> Optional[float]:
    """Total path length in metres over samples with coordinates.

    Returns:
        Distance, or None with fewer than two located samples or zero length
    """
    points = [s for s in samples if s.has_coordinates]
    if len(points) < 2:
        return None

    total = 0.0
    for prev, curr in zip(points, points[1:]):
        total += haversine_m(prev.latitude, prev.longitude, curr.latitude, curr.longitude)

    return total if total > 0 else None


def elevation_gain(samples: Sequence[Sample]) -> Optional[float]:
    """Sum of positive altitude changes in metres.

    Returns:
        Gain, or None with fewer than two altitudes or no climb at all
    """
    altitudes = [s.altitude for s in samples if s.altitude is not None]
    if len(altitudes) < 2:
        return None

    gain = sum(max(0.0, curr - prev) for prev, curr in zip(altitudes, altitudes[1:]))
    return gain if gain > 0 else None


def trip_distance(item: TimelineItem) -> float:
    """Path distance of an item, 0 when it has fewer than two samples."""
    if len(item.samples) < 2:
        return 0.0
    return path_distance(item.samples) or 0.0


def duration_seconds(item: TimelineItem) -> float:
    """Item duration in seconds; 0 when either timestamp is missing."""
    if item.start is None or item.end is None:
        return 0.0
    return (item.end - item.start).total_seconds()
