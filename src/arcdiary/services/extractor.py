"""Extraction of day-bounded entries, notes, pins and tracks."""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from arcdiary.core.logger import log_call, log_result
from arcdiary.models.diary import DiaryNote, Entry, Note, Pin, Track, TrackPoint
from arcdiary.models.timeline import DayRecord, DisplayItem, RawNote, SourceKind, TimelineItem
from arcdiary.services.activity import classify_activity, resolve_activity_type
from arcdiary.services.coalescer import TimelineCoalescer
from arcdiary.services.location_namer import LocationNamer, PlaceNames
from arcdiary.services.path_metrics import elevation_gain, path_distance
from arcdiary.services.timeline_loader import day_bounds, day_key_for

# Trips inside a visit window this short (seconds) are treated as noise
TINY_TRIP_SECONDS = 60

Position = Tuple[Optional[float], Optional[float], Optional[float]]


def resolve_position(item: TimelineItem) -> Position:
    """Latitude, longitude and altitude for an item.

    Coordinates come from the item center, then the place center, then the
    first located sample. Altitude follows the same order and finally falls
    back to any sample that has one.
    """
    first_located = next((s for s in item.samples if s.has_coordinates), None)
    place_center = item.place.center if item.place else None

    lat = lng = None
    for source in (item.center, place_center, first_located):
        if source is not None:
            lat, lng = source.latitude, source.longitude
            break

    altitude = None
    for source in (item.center, place_center, first_located):
        if source is not None and source.altitude is not None:
            altitude = source.altitude
            break
    if altitude is None:
        altitude = next((s.altitude for s in item.samples if s.altitude is not None), None)

    return lat, lng, altitude


def _trip_metrics(item: TimelineItem) -> Tuple[Optional[float], Optional[float]]:
    if item.is_visit or not item.samples:
        return None, None
    return path_distance(item.samples), elevation_gain(item.samples)


class DiaryExtractor:
    """Turns raw day records into normalized diary output."""

    def __init__(self, place_names: Optional[PlaceNames] = None):
        """
        Args:
            place_names: External place-id -> name table
        """
        self.place_names = place_names or PlaceNames()

    def entries_and_notes(self, day: DayRecord, day_key: str) -> Tuple[List[Entry], List[Note]]:
        """Builds the entries and user notes belonging to one day.

        Visits spanning midnight produce one entry per day they touch,
        clamped to the day. Trips appear on their start day, or on a later
        day only when they carry a note dated that day.
        """
        log_call("DiaryExtractor", "entries_and_notes", day=day_key, items=len(day.timeline_items))
        day_start, day_end = day_bounds(day_key)
        namer = LocationNamer.for_items(day.timeline_items, self.place_names)

        entries: List[Entry] = []
        notes: List[Note] = []

        for item in day.timeline_items:
            start_day = day_key_for(item.start) or day_key
            end_day = day_key_for(item.end) or day_key
            if not start_day <= day_key <= end_day:
                continue

            item_notes = self._user_notes(item, item.id, day_key)
            if not item.is_visit and not item_notes and start_day != day_key:
                continue

            start, end = item.start, item.end
            if item.is_visit and (start_day != day_key or end_day != day_key):
                start = max(start or day_start, day_start)
                end = min(end or day_end, day_end)
            duration = (end - start).total_seconds() if start and end else None

            distance, gain = _trip_metrics(item)
            lat, lng, altitude = resolve_position(item)

            entries.append(Entry(
                entry_id=item.id,
                day_key=day_key,
                start=start,
                end=end,
                duration=duration,
                kind="visit" if item.is_visit else "activity",
                activity_type=classify_activity(resolve_activity_type(item)),
                location=namer.name_for(item),
                latitude=lat,
                longitude=lng,
                altitude=altitude,
                place_id=item.place_id,
                radius_meters=item.radius_meters,
                distance=distance,
                elevation_gain=gain,
                timeline_item_id=item.id,
                has_note=bool(item_notes),
            ))
            notes.extend(item_notes)

        entries.sort(key=lambda e: e.start or datetime.min)
        log_result("DiaryExtractor", "entries_and_notes", f"{len(entries)} entries, {len(notes)} notes")
        return entries, notes

    def _user_notes(self, item: TimelineItem, entry_id: str, day_key: str) -> List[Note]:
        """Non-blank notes of an item whose own date falls on day_key."""
        notes = []
        for index, raw in enumerate(item.notes):
            if raw.is_blank or raw.date is None:
                continue
            if day_key_for(raw.date) != day_key:
                continue
            notes.append(Note(
                note_id=raw.note_id or f"{entry_id}_note_{index}",
                entry_id=entry_id,
                date=raw.date,
                body=raw.body,
            ))
        return notes

    def diary_notes(
        self, day: DayRecord, day_key: str, source_kind: SourceKind = SourceKind.JSON_IMPORT
    ) -> List[DiaryNote]:
        """Builds the display rows of one day, one per note or placeholder.

        Coalescing only runs for backup imports.
        """
        log_call("DiaryExtractor", "diary_notes", day=day_key, source=SourceKind(source_kind).value)
        day_start, day_end = day_bounds(day_key)

        if SourceKind(source_kind) == SourceKind.BACKUP_IMPORT:
            display_items = TimelineCoalescer().coalesce(day.timeline_items)
        else:
            display_items = [DisplayItem(item) for item in day.timeline_items]

        visit_windows = [
            (d.start, d.end)
            for d in display_items
            if d.is_visit and d.start is not None and d.end is not None and d.end >= d.start
        ]
        # Clusters come from the raw items so naming is stable with or without coalescing
        namer = LocationNamer.for_items(day.timeline_items, self.place_names)

        rows: List[DiaryNote] = []
        for display in display_items:
            rows.extend(self._rows_for_item(display, day_key, day_start, day_end, visit_windows, namer))

        log_result("DiaryExtractor", "diary_notes", f"{len(rows)} notes")
        return rows

    def _rows_for_item(
        self,
        display: DisplayItem,
        day_key: str,
        day_start: datetime,
        day_end: datetime,
        visit_windows: Sequence[Tuple[datetime, datetime]],
        namer: LocationNamer,
    ) -> List[DiaryNote]:
        item = display.item
        end = display.end

        notes: Sequence[RawNote] = display.notes
        if not notes:
            # Placeholder so unannotated items still show up
            notes = (RawNote(body="", date=item.start or end),)

        start_day = day_key_for(item.start)
        end_day = day_key_for(end)
        spans_from_previous = bool(start_day and start_day < day_key and end_day and end_day >= day_key)
        spans_into_next = bool(end_day and end_day > day_key and start_day and start_day <= day_key)

        # Only visits are clamped; trips keep their real window
        clamp_start = item.is_visit and spans_from_previous
        clamp_end = item.is_visit and spans_into_next

        duration = None
        if item.start is not None and end is not None:
            clamped_start = max(item.start, day_start) if clamp_start else item.start
            clamped_end = min(end, day_end) if clamp_end else end
            duration = (clamped_end - clamped_start).total_seconds()

        distance, gain = _trip_metrics(item)
        location = namer.name_for(item)
        lat, lng, altitude = resolve_position(item)

        rows: List[DiaryNote] = []
        for note in notes:
            if note.date is None:
                continue

            continuation = spans_from_previous and item.is_visit and note.body == ""
            if day_key_for(note.date) != day_key and not continuation:
                continue

            if self._is_contained_noise(item, note, duration, distance, visit_windows):
                continue

            first = not rows
            rows.append(DiaryNote(
                note_id=note.note_id,
                date=day_start if continuation else note.date,
                body=note.body or "",
                location=location,
                is_visit=item.is_visit,
                activity_type=item.activity_type,
                latitude=lat,
                longitude=lng,
                altitude=altitude,
                duration=duration if first else None,
                distance=distance if first else None,
                elevation_gain=gain if first else None,
                radius_meters=item.radius_meters,
                start=day_start if clamp_start else item.start,
                end=day_end if clamp_end else end,
                timeline_item_id=item.id,
                has_collapsed_segments=display.annotations.has_collapsed_segments,
                merged_count=display.merged_count,
                suppressed_count=display.suppressed_count,
                data_gap=display.annotations.data_gap,
                contained=display.annotations.contained,
                drift_cluster_size=display.annotations.drift_cluster_size,
            ))

        return rows

    def _is_contained_noise(
        self,
        item: TimelineItem,
        note: RawNote,
        duration: Optional[float],
        distance: Optional[float],
        visit_windows: Sequence[Tuple[datetime, datetime]],
    ) -> bool:
        """Noteless low-signal trip lying entirely inside a visit window."""
        if item.is_visit or item.start is None or item.end is None:
            return False
        if not note.is_blank:
            return False

        seconds = duration or 0
        low_signal = (
            (item.activity_type or "").lower() == "unknown"
            or not item.samples
            or 0 < seconds <= TINY_TRIP_SECONDS
            or (distance or 0) <= 0
        )
        if not low_signal:
            return False

        return any(start <= item.start and item.end <= end for start, end in visit_windows)

    def pins(self, day: DayRecord) -> List[Pin]:
        """Map markers for visits that have coordinates."""
        namer = LocationNamer.for_items(day.timeline_items, self.place_names)
        pins = []
        for item in day.timeline_items:
            if not item.is_visit:
                continue
            lat, lng, altitude = resolve_position(item)
            if lat is None or lng is None:
                continue
            pins.append(Pin(
                location=namer.name_for(item),
                latitude=lat,
                longitude=lng,
                altitude=altitude,
                has_note=item.has_user_note,
                start=item.start,
                end=item.end,
                timeline_item_id=item.id,
            ))
        return pins

    def tracks(self, day: DayRecord) -> List[Track]:
        """Polylines for trips with at least two located samples."""
        tracks = []
        for item in day.timeline_items:
            if item.is_visit or len(item.samples) < 2:
                continue
            points = [
                TrackPoint(latitude=s.latitude, longitude=s.longitude, altitude=s.altitude, timestamp=s.timestamp)
                for s in item.samples
                if s.has_coordinates
            ]
            if len(points) < 2:
                continue
            tracks.append(Track(
                timeline_item_id=item.id,
                activity_type=item.activity_type or "activity",
                start=item.start,
                end=item.end,
                points=points,
            ))
        return tracks


def extract_entries_and_notes(
    day: DayRecord, day_key: str, place_names: Optional[PlaceNames] = None
) -> Tuple[List[Entry], List[Note]]:
    return DiaryExtractor(place_names).entries_and_notes(day, day_key)


def extract_notes(
    day: DayRecord,
    day_key: str,
    source_kind: SourceKind = SourceKind.JSON_IMPORT,
    place_names: Optional[PlaceNames] = None,
) -> List[DiaryNote]:
    return DiaryExtractor(place_names).diary_notes(day, day_key, source_kind)


def extract_pins(day: DayRecord, place_names: Optional[PlaceNames] = None) -> List[Pin]:
    return DiaryExtractor(place_names).pins(day)


def extract_tracks(day: DayRecord) -> List[Track]:
    return DiaryExtractor().tracks(day)
