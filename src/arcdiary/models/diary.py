"""Normalized diary records produced by the extractor and aggregators."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional

from arcdiary.models.timeline import TimelineItem


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class _Serializable:
    """Mixin giving dataclasses a JSON-ready to_dict()."""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: _to_json(getattr(self, f.name)) for f in fields(self)}


@dataclass
class Entry(_Serializable):
    """One timeline item as it appears on one day."""

    entry_id: str
    day_key: str
    start: Optional[datetime]
    end: Optional[datetime]
    duration: Optional[float]
    kind: str  # "visit" or "activity"
    activity_type: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    place_id: Optional[str] = None
    radius_meters: Optional[float] = None
    distance: Optional[float] = None
    elevation_gain: Optional[float] = None
    timeline_item_id: Optional[str] = None
    has_note: bool = False

    @property
    def is_visit(self) -> bool:
        return self.kind == "visit"


@dataclass
class Note(_Serializable):
    """A user note, keyed to its entry."""

    note_id: str
    entry_id: str
    date: datetime
    body: str


@dataclass
class DiaryNote(_Serializable):
    """Display row of the diary: a note (or placeholder) with item context."""

    note_id: Optional[str]
    date: Optional[datetime]
    body: str
    location: str
    is_visit: bool
    activity_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    # Only the first note of an item carries metrics
    duration: Optional[float] = None
    distance: Optional[float] = None
    elevation_gain: Optional[float] = None
    radius_meters: Optional[float] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    timeline_item_id: Optional[str] = None
    has_collapsed_segments: bool = False
    merged_count: int = 0
    suppressed_count: int = 0
    data_gap: bool = False
    contained: bool = False
    drift_cluster_size: Optional[int] = None

    @property
    def has_body(self) -> bool:
        return bool(self.body and self.body.strip())


@dataclass
class Pin(_Serializable):
    """Map marker for a visit."""

    location: str
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    has_note: bool = False
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    timeline_item_id: Optional[str] = None


@dataclass
class TrackPoint(_Serializable):
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    timestamp: Optional[datetime] = None


@dataclass
class Track(_Serializable):
    """Polyline for a trip."""

    timeline_item_id: Optional[str]
    activity_type: str
    start: Optional[datetime]
    end: Optional[datetime]
    points: List[TrackPoint] = field(default_factory=list)


@dataclass
class ActivityStats(_Serializable):
    """Accumulated totals for one activity category."""

    distance: float = 0.0  # metres
    duration: float = 0.0  # seconds
    elevation_gain: float = 0.0  # metres
    count: int = 0

    def add(self, distance: Optional[float], duration: Optional[float], elevation_gain: Optional[float]) -> None:
        if distance:
            self.distance += distance
        if duration:
            self.duration += duration
        if elevation_gain:
            self.elevation_gain += elevation_gain
        self.count += 1


@dataclass
class LocationCluster:
    """Group of nearby visits sharing a display name."""

    center_lat: float
    center_lng: float
    name: Optional[str] = None
    visits: List[TimelineItem] = field(default_factory=list)


@dataclass
class LocationTotals(_Serializable):
    """Visit totals for one named location."""

    name: str
    visit_count: int = 0
    total_duration: float = 0.0
    first_visit: Optional[str] = None
    last_visit: Optional[str] = None
