"""Detection of GPS drift noise: runs of tiny unnamed fragments."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Sequence, Set

from arcdiary.core.logger import log_debug
from arcdiary.models.timeline import TimelineItem
from arcdiary.services.path_metrics import duration_seconds, trip_distance

DRIFT_MAX_TRIP_SECONDS = 120
DRIFT_MAX_TRIP_METERS = 50
DRIFT_MAX_GAP_SECONDS = 30
DRIFT_MIN_CLUSTER_SIZE = 3


@dataclass
class DriftNoise:
    """Result of drift detection."""

    # Cluster members to hide (everything but the first of each cluster)
    excluded: Set[str] = field(default_factory=set)
    # First item of each cluster -> cluster size
    leaders: Dict[str, int] = field(default_factory=dict)


def is_drift_candidate(item: TimelineItem) -> bool:
    """Unnamed visits, and trips of at most 120 s and 50 m."""
    if item.is_visit:
        return not (item.place_id or item.custom_title or item.street_address or item.place_name)
    return duration_seconds(item) <= DRIFT_MAX_TRIP_SECONDS and trip_distance(item) <= DRIFT_MAX_TRIP_METERS


def sort_chronologically(items: Sequence[TimelineItem]) -> List[TimelineItem]:
    """Stable sort by start; items without a start come first."""
    return sorted(items, key=lambda item: item.start or datetime.min)


def _close_enough(prev: TimelineItem, curr: TimelineItem) -> bool:
    if prev.end is None or curr.start is None:
        return False
    return (curr.start - prev.end).total_seconds() <= DRIFT_MAX_GAP_SECONDS


def find_drift_noise(items: Sequence[TimelineItem]) -> DriftNoise:
    """Finds runs of 3+ consecutive drift candidates with gaps of at most 30 s."""
    ordered = sort_chronologically(items)
    result = DriftNoise()

    i = 0
    while i < len(ordered):
        if not is_drift_candidate(ordered[i]):
            i += 1
            continue

        run_end = i
        for j in range(i + 1, len(ordered)):
            if not is_drift_candidate(ordered[j]) or not _close_enough(ordered[j - 1], ordered[j]):
                break
            run_end = j

        size = run_end - i + 1
        if size >= DRIFT_MIN_CLUSTER_SIZE:
            result.leaders[ordered[i].id] = size
            result.excluded.update(item.id for item in ordered[i + 1:run_end + 1])
            log_debug(f"drift cluster of {size} starting at {ordered[i].id}")

        i = run_end + 1

    return result
