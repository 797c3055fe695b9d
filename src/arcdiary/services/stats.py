"""Daily and monthly activity statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from functools import reduce
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from arcdiary.core.logger import log_call, log_debug, log_result
from arcdiary.models.diary import ActivityStats, DiaryNote, Entry, LocationTotals
from arcdiary.models.location import haversine_m
from arcdiary.services.activity import MOTORIZED_CATEGORIES, classify_activity

DEFAULT_VISIT_RADIUS_M = 50
MAX_VISIT_FILTER_RADIUS_M = 150

ActivitySignature = Tuple[str, datetime, int, int]


def _stat_category(note: DiaryNote) -> Optional[str]:
    """Category counted in stats, or None for visits and stationary/unknown."""
    if note.is_visit or not note.activity_type:
        return None
    category = classify_activity(note.activity_type)
    if category in ("stationary", "unknown"):
        return None
    return category


def _with_distance(stats: Dict[str, ActivityStats]) -> Dict[str, ActivityStats]:
    return {category: totals for category, totals in stats.items() if totals.distance > 0}


def filter_notes_for_day(
    notes: Sequence[DiaryNote],
    include_all_locations: bool = True,
    include_all_activities: bool = True,
) -> List[DiaryNote]:
    """Notes visible in the diary for one day.

    With a flag off, only notes with a body are kept for that kind. Trips
    starting inside a visit's radius are hidden unless motorized or clearly
    longer than the radius.
    """
    visible = [
        note for note in notes
        if (include_all_locations if note.is_visit else include_all_activities) or note.has_body
    ]

    visits = [
        note for note in visible
        if note.is_visit and note.radius_meters and note.latitude is not None and note.longitude is not None
    ]
    if not visits:
        return visible

    def keep(note: DiaryNote) -> bool:
        if note.is_visit or note.latitude is None or note.longitude is None:
            return True
        if classify_activity(note.activity_type) in MOTORIZED_CATEGORIES:
            return True

        for visit in visits:
            radius = min(max(visit.radius_meters or DEFAULT_VISIT_RADIUS_M, 1), MAX_VISIT_FILTER_RADIUS_M)
            if (note.distance or 0) > radius * 2:
                continue
            if haversine_m(note.latitude, note.longitude, visit.latitude, visit.longitude) <= radius:
                return False
        return True

    return [note for note in visible if keep(note)]


def daily_stats(notes: Iterable[DiaryNote]) -> Dict[str, ActivityStats]:
    """Sums distance, duration and elevation per activity category."""
    stats: Dict[str, ActivityStats] = {}
    for note in notes:
        category = _stat_category(note)
        if category is None:
            continue
        stats.setdefault(category, ActivityStats()).add(note.distance, note.duration, note.elevation_gain)
    return _with_distance(stats)


def activity_signature(note: DiaryNote, category: str) -> Optional[ActivitySignature]:
    """Identity of an activity across days; None when it cannot be built."""
    if note.start is None or not note.duration or not note.distance:
        return None
    return category, note.start, round(note.duration), round(note.distance)


@dataclass
class MonthlyAccumulator:
    """State threaded through the chronological fold over a month's days."""

    stats: Dict[str, ActivityStats] = field(default_factory=dict)
    seen: Set[ActivitySignature] = field(default_factory=set)
    duplicates: int = 0


def fold_day(acc: MonthlyAccumulator, notes: Iterable[DiaryNote]) -> MonthlyAccumulator:
    """Adds one day's visible notes; activities already seen are skipped."""
    for note in notes:
        category = _stat_category(note)
        if category is None:
            continue

        signature = activity_signature(note, category)
        if signature is not None:
            if signature in acc.seen:
                acc.duplicates += 1
                log_debug(f"skipping duplicate {category} starting {note.start}")
                continue
            acc.seen.add(signature)

        acc.stats.setdefault(category, ActivityStats()).add(note.distance, note.duration, note.elevation_gain)
    return acc


def monthly_stats(
    month: Mapping[str, Sequence[DiaryNote]],
    include_all_locations: bool = True,
    include_all_activities: bool = True,
) -> Dict[str, ActivityStats]:
    """Activity totals over a month of diary notes keyed by day key.

    Days are folded in chronological order so the first occurrence of an
    activity re-emitted on the following day is the one that counts.
    """
    log_call("StatsAggregator", "monthly", days=len(month))
    visible_days = (
        filter_notes_for_day(month[day_key], include_all_locations, include_all_activities)
        for day_key in sorted(month)
    )
    acc = reduce(fold_day, visible_days, MonthlyAccumulator())
    result = _with_distance(acc.stats)
    log_result("StatsAggregator", "monthly", f"{len(result)} categories, {acc.duplicates} duplicates")
    return result


def location_totals(entries: Iterable[Entry]) -> List[LocationTotals]:
    """Visit count, time spent and first/last day per location name."""
    totals: Dict[str, LocationTotals] = {}
    for entry in entries:
        if not entry.is_visit:
            continue
        current = totals.get(entry.location)
        if current is None:
            current = totals[entry.location] = LocationTotals(name=entry.location)
        current.visit_count += 1
        current.total_duration += entry.duration or 0
        if current.first_visit is None or entry.day_key < current.first_visit:
            current.first_visit = entry.day_key
        if current.last_visit is None or entry.day_key > current.last_visit:
            current.last_visit = entry.day_key

    return sorted(totals.values(), key=lambda t: (-t.total_duration, t.name))
