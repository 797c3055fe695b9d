"""Services for arcdiary."""

from arcdiary.services.activity import classify_activity, infer_activity_type, normalize_activity_type, resolve_activity_type
from arcdiary.services.containment import find_contained_items
from arcdiary.services.drift import DriftNoise, find_drift_noise
from arcdiary.services.ghosts import filter_ghost_items
from arcdiary.services.coalescer import TimelineCoalescer, coalesce_timeline
from arcdiary.services.location_namer import LocationNamer, PlaceNames, build_location_clusters
from arcdiary.services.timeline_loader import TimelineLoader
from arcdiary.services.extractor import (
    DiaryExtractor,
    extract_entries_and_notes,
    extract_notes,
    extract_pins,
    extract_tracks,
)
from arcdiary.services.stats import daily_stats, filter_notes_for_day, location_totals, monthly_stats

__all__ = [
    "classify_activity",
    "infer_activity_type",
    "normalize_activity_type",
    "resolve_activity_type",
    "find_contained_items",
    "DriftNoise",
    "find_drift_noise",
    "filter_ghost_items",
    "TimelineCoalescer",
    "coalesce_timeline",
    "LocationNamer",
    "PlaceNames",
    "build_location_clusters",
    "TimelineLoader",
    "DiaryExtractor",
    "extract_entries_and_notes",
    "extract_notes",
    "extract_pins",
    "extract_tracks",
    "daily_stats",
    "filter_notes_for_day",
    "location_totals",
    "monthly_stats",
]
