"""Models for raw timeline items and their display-only annotations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from arcdiary.models.location import GPSCoordinates, Place, Sample


class SourceKind(str, Enum):
    """Import source a day record came from."""
    JSON_IMPORT = "json-import"
    BACKUP_IMPORT = "backup-import"


@dataclass(frozen=True)
class RawNote:
    """A note attached to a timeline item, normalized at load time."""

    body: str
    date: Optional[datetime] = None
    note_id: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.body.strip()


@dataclass(frozen=True)
class TimelineItem:
    """Canonical visit or trip from an Arc export. Never mutated."""

    id: str
    is_visit: bool
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    place: Optional[Place] = None
    place_id: Optional[str] = None
    custom_title: Optional[str] = None
    street_address: Optional[str] = None
    display_name: Optional[str] = None
    center: Optional[GPSCoordinates] = None
    samples: Tuple[Sample, ...] = ()
    notes: Tuple[RawNote, ...] = ()
    activity_type: Optional[str] = None
    manual_activity_type: bool = False
    recorded_distance: Optional[float] = None
    previous_item_id: Optional[str] = None
    next_item_id: Optional[str] = None

    @property
    def has_user_note(self) -> bool:
        return any(not note.is_blank for note in self.notes)

    @property
    def place_name(self) -> Optional[str]:
        return self.place.name if self.place else None

    @property
    def radius_meters(self) -> Optional[float]:
        return self.place.radius_meters if self.place else None


@dataclass
class Annotations:
    """Display-only state the coalescer attaches next to a canonical item."""

    contained: bool = False
    data_gap: bool = False
    suppressed: bool = False
    merged_items: List[TimelineItem] = field(default_factory=list)
    display_end: Optional[datetime] = None
    has_collapsed_segments: bool = False
    suppressed_visits: List[TimelineItem] = field(default_factory=list)
    collapsed_unknowns: List[TimelineItem] = field(default_factory=list)
    drift_cluster_size: Optional[int] = None
    # Concatenated notes of merged visits; None = use the item's own notes
    notes: Optional[List[RawNote]] = None


@dataclass
class DisplayItem:
    """A timeline item paired with its annotations."""

    item: TimelineItem
    annotations: Annotations = field(default_factory=Annotations)

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def is_visit(self) -> bool:
        return self.item.is_visit

    @property
    def start(self) -> Optional[datetime]:
        return self.item.start

    @property
    def end(self) -> Optional[datetime]:
        """End used for display - extended when visits were merged."""
        return self.annotations.display_end or self.item.end

    @property
    def notes(self) -> Tuple[RawNote, ...]:
        if self.annotations.notes is not None:
            return tuple(self.annotations.notes)
        return self.item.notes

    @property
    def merged_count(self) -> int:
        return len(self.annotations.merged_items)

    @property
    def suppressed_count(self) -> int:
        return len(self.annotations.suppressed_visits) + len(self.annotations.collapsed_unknowns)


@dataclass
class DayRecord:
    """Raw timeline record for one day (or any batch of items)."""

    timeline_items: List[TimelineItem] = field(default_factory=list)
