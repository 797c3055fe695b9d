"""Display-only timeline coalescing.

Hides contained items and drift noise, folds noise between two visits to
the same place into the preceding visit, and merges adjacent visits to the
same place. Canonical items are never modified; everything the coalescer
decides is recorded on DisplayItem annotations.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Iterable, List, Optional, Sequence, Set

from arcdiary.core.logger import log_call, log_debug, log_result
from arcdiary.models.location import haversine_m
from arcdiary.models.timeline import DisplayItem, TimelineItem
from arcdiary.services.activity import classify_activity
from arcdiary.services.containment import find_contained_items
from arcdiary.services.drift import find_drift_noise, sort_chronologically
from arcdiary.services.path_metrics import duration_seconds, trip_distance

MAX_MERGE_GAP = timedelta(minutes=15)
DEFAULT_PLACE_RADIUS_M = 50

# Low-signal trips between two visits to the same place
MAX_COLLAPSE_SECONDS = 15 * 60
MAX_JITTER_WALK_SECONDS = 120
MAX_JITTER_WALK_METERS = 35
MAX_JITTER_WALK_KMH = 4


@dataclass(frozen=True)
class NamedPlace:
    place_id: str
    latitude: float
    longitude: float
    radius: float


def has_gps_data(item: TimelineItem) -> bool:
    """Samples, a center point or a positive recorded distance."""
    if item.samples:
        return True
    if item.center is not None:
        return True
    return bool(item.recorded_distance and item.recorded_distance > 0)


class TimelineCoalescer:
    """Builds the display timeline for one batch of items."""

    def __init__(self, containment: Callable[[Sequence[TimelineItem]], Set[str]] = find_contained_items):
        """
        Args:
            containment: Returns ids of contained items (pluggable primitive)
        """
        self.containment = containment
        self._named_places: List[NamedPlace] = []

    def coalesce(self, items: Iterable[TimelineItem]) -> List[DisplayItem]:
        """Returns the coalesced display timeline, sorted by start."""
        items = list(items)
        log_call("TimelineCoalescer", "coalesce", items=len(items))
        if not items:
            return []

        contained_ids = self.containment(items)
        # Drift runs are built from items that survive containment
        drift = find_drift_noise([item for item in items if item.id not in contained_ids])
        self._named_places = [
            NamedPlace(
                place_id=item.place_id,
                latitude=item.center.latitude,
                longitude=item.center.longitude,
                radius=item.radius_meters or DEFAULT_PLACE_RADIUS_M,
            )
            for item in items
            if item.is_visit and item.place_id and item.center is not None
        ]

        ordered = sort_chronologically(items)
        result: List[DisplayItem] = []

        for i, item in enumerate(ordered):
            display = DisplayItem(item)
            display.annotations.data_gap = not has_gps_data(item)

            if item.id in contained_ids:
                display.annotations.contained = True
                continue

            if item.id in drift.excluded:
                continue
            display.annotations.drift_cluster_size = drift.leaders.get(item.id)

            prev = result[-1] if result else None
            following = ordered[i + 1] if i + 1 < len(ordered) else None

            if self._suppress_zero_duration_visit(item, prev, following):
                display.annotations.suppressed = True
                prev.annotations.suppressed_visits.append(item)
                log_debug(f"suppressed zero-length visit {item.id} after {prev.id}")
                continue

            if self._collapse_low_signal_trip(item, prev, following):
                display.annotations.suppressed = True
                prev.annotations.collapsed_unknowns.append(item)
                log_debug(f"collapsed low-signal trip {item.id} into {prev.id}")
                continue

            if self._merge_into_previous(item, prev):
                continue

            result.append(display)

        log_result("TimelineCoalescer", "coalesce", f"{len(items)} -> {len(result)} items")
        return result

    def effective_place_id(self, item: TimelineItem) -> Optional[str]:
        """Own place id, or for a visit the first named place covering it."""
        if item.place_id:
            return item.place_id
        if item.is_visit and item.center is not None:
            for place in self._named_places:
                distance = haversine_m(item.center.latitude, item.center.longitude, place.latitude, place.longitude)
                if distance <= place.radius:
                    return place.place_id
        return None

    def _visit_place(self, item: Optional[TimelineItem]) -> Optional[str]:
        if item is None or not item.is_visit:
            return None
        return self.effective_place_id(item)

    def _suppress_zero_duration_visit(
        self, item: TimelineItem, prev: Optional[DisplayItem], following: Optional[TimelineItem]
    ) -> bool:
        if not item.is_visit or item.custom_title or duration_seconds(item) != 0:
            return False
        if prev is None or following is None:
            return False

        prev_place = self._visit_place(prev.item)
        next_place = self._visit_place(following)
        return bool(prev_place) and prev_place == next_place and self.effective_place_id(item) != prev_place

    def _collapse_low_signal_trip(
        self, item: TimelineItem, prev: Optional[DisplayItem], following: Optional[TimelineItem]
    ) -> bool:
        if item.is_visit or prev is None or following is None:
            return False
        if not (prev.is_visit and following.is_visit):
            return False

        prev_place = self._visit_place(prev.item)
        if not prev_place or prev_place != self._visit_place(following):
            return False

        seconds = max(duration_seconds(item), 0.0)
        if item.has_user_note or not 0 < seconds <= MAX_COLLAPSE_SECONDS:
            return False

        category = classify_activity(item.activity_type or "unknown")
        if category in ("stationary", "unknown"):
            return True

        if category == "walking":
            distance = trip_distance(item)
            speed_kmh = distance / seconds * 3.6
            return (
                seconds <= MAX_JITTER_WALK_SECONDS
                and distance <= MAX_JITTER_WALK_METERS
                and speed_kmh <= MAX_JITTER_WALK_KMH
            )

        return False

    def _merge_into_previous(self, item: TimelineItem, prev: Optional[DisplayItem]) -> bool:
        if not item.is_visit or prev is None or not prev.is_visit:
            return False

        place = self.effective_place_id(item)
        if not place or self.effective_place_id(prev.item) != place:
            return False

        # Measured from the previous visit's own end, not its display end
        if prev.item.end is None or item.start is None:
            return False
        gap = item.start - prev.item.end
        if gap < timedelta(0) or gap > MAX_MERGE_GAP:
            return False

        annotations = prev.annotations
        if not annotations.merged_items:
            annotations.merged_items.append(prev.item)
        annotations.merged_items.append(item)
        annotations.has_collapsed_segments = True

        if item.end is not None and item.end > prev.end:
            annotations.display_end = item.end

        if item.notes:
            annotations.notes = list(prev.notes) + list(item.notes)

        log_debug(f"merged visit {item.id} into {prev.id} (gap {gap})")
        return True


def coalesce_timeline(items: Iterable[TimelineItem]) -> List[DisplayItem]:
    """Coalesces items with the default containment detector."""
    return TimelineCoalescer().coalesce(items)
