"""Removal of ghost items left behind by incremental exports."""

from typing import List, Sequence, Set

from arcdiary.core.logger import log_call, log_debug, log_result
from arcdiary.models.timeline import TimelineItem

GHOST_OVERLAP_RATIO = 0.5
DUPLICATE_OVERLAP_RATIO = 0.85
DUPLICATE_STRONG_OVERLAP_RATIO = 0.95
DUPLICATE_WINDOW_SECONDS = 10 * 60


def _overlap_seconds(a: TimelineItem, b: TimelineItem) -> float:
    start = max(a.start, b.start)
    end = min(a.end, b.end)
    return max(0.0, (end - start).total_seconds())


def _duration(item: TimelineItem) -> float:
    return (item.end - item.start).total_seconds()


def _has_window(item: TimelineItem) -> bool:
    return item.start is not None and item.end is not None


def _score(item: TimelineItem) -> int:
    score = len(item.samples)
    if (item.activity_type or "unknown").lower() != "unknown":
        score += 1000
    if item.previous_item_id:
        score += 50
    if item.next_item_id:
        score += 50
    if item.manual_activity_type:
        score += 200
    return score


def filter_ghost_items(items: Sequence[TimelineItem]) -> List[TimelineItem]:
    """Drops sample-less items shadowed by real data, and duplicated trips.

    1. An item without samples is a ghost when an item with samples covers
       more than half of its duration.
    2. Of two trips with samples that overlap at least 85% of the shorter
       one, have the same type (or unknown vs known) and nearly the same
       window, the lower scoring one is dropped.
    """
    log_call("GhostFilter", "filter", items=len(items))

    with_samples = [item for item in items if item.samples]
    dropped: Set[str] = set()

    for ghost in items:
        if ghost.samples or not _has_window(ghost):
            continue
        ghost_duration = _duration(ghost)
        if ghost_duration <= 0:
            continue
        for real in with_samples:
            if not _has_window(real):
                continue
            if _overlap_seconds(ghost, real) > ghost_duration * GHOST_OVERLAP_RATIO:
                dropped.add(ghost.id)
                log_debug(f"ghost {ghost.id} overlaps {real.id}")
                break

    trips = [
        item for item in items
        if not item.is_visit and item.samples and _has_window(item)
        and _duration(item) > 0 and item.id not in dropped
    ]

    for i, a in enumerate(trips):
        if a.id in dropped:
            continue
        for b in trips[i + 1:]:
            if b.id in dropped or a.id in dropped or a.id == b.id:
                continue

            overlap = _overlap_seconds(a, b) / min(_duration(a), _duration(b))
            if overlap < DUPLICATE_OVERLAP_RATIO:
                continue

            a_type = (a.activity_type or "unknown").lower()
            b_type = (b.activity_type or "unknown").lower()
            unknown_vs_known = (a_type == "unknown") != (b_type == "unknown")
            if a_type != b_type and not unknown_vs_known:
                continue

            near_same_window = (
                abs((a.start - b.start).total_seconds()) <= DUPLICATE_WINDOW_SECONDS
                and abs((a.end - b.end).total_seconds()) <= DUPLICATE_WINDOW_SECONDS
            )
            if not near_same_window and overlap < DUPLICATE_STRONG_OVERLAP_RATIO:
                continue

            drop = a if _score(a) < _score(b) else b
            dropped.add(drop.id)
            log_debug(f"duplicate trip {drop.id} ({drop.activity_type or 'unknown'}) overlap={overlap:.0%}")

    result = [item for item in items if item.id not in dropped]
    log_result("GhostFilter", "filter", f"{len(dropped)} dropped")
    return result
