"""Data models for arcdiary."""

from arcdiary.models.location import GPSCoordinates, Place, Sample
from arcdiary.models.timeline import Annotations, DayRecord, DisplayItem, RawNote, SourceKind, TimelineItem
from arcdiary.models.diary import (
    ActivityStats,
    DiaryNote,
    Entry,
    LocationCluster,
    LocationTotals,
    Note,
    Pin,
    Track,
    TrackPoint,
)

__all__ = [
    "GPSCoordinates",
    "Place",
    "Sample",
    "Annotations",
    "DayRecord",
    "DisplayItem",
    "RawNote",
    "SourceKind",
    "TimelineItem",
    "ActivityStats",
    "DiaryNote",
    "Entry",
    "LocationCluster",
    "LocationTotals",
    "Note",
    "Pin",
    "Track",
    "TrackPoint",
]
