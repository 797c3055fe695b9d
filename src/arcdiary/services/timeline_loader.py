"""Loading and parsing Arc Timeline JSON exports."""

import json
import re
from dataclasses import replace
from datetime import date, datetime, time, tzinfo
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from arcdiary.core.exceptions import DayKeyError, ExportNotFoundError, TimelineParseError
from arcdiary.core.logger import log_call, log_result, log_warning
from arcdiary.models.location import GPSCoordinates, Place, Sample
from arcdiary.models.timeline import DayRecord, RawNote, TimelineItem
from arcdiary.services.location_namer import PlaceNames

DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_timestamp(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parses an ISO 8601 timestamp into a naive local datetime.

    Timestamps with an offset are converted to ``tz`` (system local time
    when None). Naive timestamps are taken as already local.

    Returns:
        datetime or None if the value is missing or malformed
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    # Older interpreters reject the "Z" suffix
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


def day_key_for(moment: Optional[datetime]) -> Optional[str]:
    """Returns the local calendar day key (YYYY-MM-DD) of a timestamp."""
    if moment is None:
        return None
    return moment.strftime("%Y-%m-%d")


def parse_day_key(day_key: str) -> date:
    """Validates a day key.

    Raises:
        DayKeyError: If the key is not a real YYYY-MM-DD date
    """
    if not isinstance(day_key, str) or not DAY_KEY_RE.match(day_key):
        raise DayKeyError(str(day_key))
    try:
        return date.fromisoformat(day_key)
    except ValueError:
        raise DayKeyError(day_key)


def validate_month_key(month_key: str) -> str:
    """Validates a YYYY-MM month key and returns it."""
    if not isinstance(month_key, str) or not MONTH_KEY_RE.match(month_key):
        raise DayKeyError(str(month_key), expected="YYYY-MM")
    month = int(month_key[5:])
    if not 1 <= month <= 12:
        raise DayKeyError(month_key, expected="YYYY-MM")
    return month_key


def day_bounds(day_key: str) -> Tuple[datetime, datetime]:
    """Returns the [00:00:00, 23:59:59] boundaries of a day."""
    day = parse_day_key(day_key)
    return datetime.combine(day, time(0, 0, 0)), datetime.combine(day, time(23, 59, 59))


def order_items_by_linked_list(items: Sequence[TimelineItem]) -> List[TimelineItem]:
    """Orders items by following previous/next links from every chain head.

    Items that are unreachable (broken or cyclic links) keep their input
    order at the end.
    """
    if len(items) < 2:
        return list(items)

    by_id = {item.id: item for item in items}
    by_prev_id = {item.previous_item_id: item for item in items if item.previous_item_id}

    heads = [
        item for item in items
        if not item.previous_item_id or item.previous_item_id not in by_id
    ]
    if not heads:
        heads = [items[0]]

    ordered: List[TimelineItem] = []
    visited = set()

    for head in heads:
        current: Optional[TimelineItem] = head
        while current is not None and current.id not in visited:
            visited.add(current.id)
            ordered.append(current)

            if current.next_item_id and current.next_item_id in by_id:
                current = by_id[current.next_item_id]
            else:
                current = by_prev_id.get(current.id)

    for item in items:
        if item.id not in visited:
            ordered.append(item)

    return ordered


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    # NaN never compares equal to itself
    if result != result:
        return None
    return result


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class TimelineLoader:
    """Loads Arc Timeline exports (daily JSON files plus places folder)."""

    def __init__(self, tz: Optional[tzinfo] = None):
        """
        Args:
            tz: Timezone for day keys (None = system local time)
        """
        self.tz = tz

    def load_day(self, path: Path) -> DayRecord:
        """Loads one day file.

        Raises:
            TimelineParseError: If the file cannot be loaded or parsed
        """
        log_call("TimelineLoader", "load_day", path=str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TimelineParseError(f"Invalid JSON format in {path.name}: {e}")
        except FileNotFoundError:
            raise ExportNotFoundError(f"File not found: {path}")
        except OSError as e:
            raise TimelineParseError(f"Error reading file {path}: {e}")

        record = self.parse_day(data)
        log_result("TimelineLoader", "load_day", f"{len(record.timeline_items)} items")
        return record

    def parse_day(self, data: Any) -> DayRecord:
        """Parses a ``{"timelineItems": [...]}`` record.

        Raises:
            TimelineParseError: If the top-level structure is wrong
        """
        if not isinstance(data, dict):
            raise TimelineParseError("Expected an object with 'timelineItems'")

        raw_items = data.get("timelineItems") or []
        if not isinstance(raw_items, list):
            raise TimelineParseError("'timelineItems' must be a list")

        items: List[TimelineItem] = []
        seen_ids: Dict[str, int] = {}
        for raw in raw_items:
            if not isinstance(raw, dict):
                continue
            item = self.parse_item(raw)
            # Keep identities unique even for id-less duplicates
            count = seen_ids.get(item.id, 0)
            seen_ids[item.id] = count + 1
            if count:
                item = replace(item, id=f"{item.id}#{count}")
            items.append(item)

        if any(item.previous_item_id or item.next_item_id for item in items):
            items = order_items_by_linked_list(items)

        return DayRecord(timeline_items=items)

    def parse_item(self, raw: Dict[str, Any]) -> TimelineItem:
        """Parses a single timeline item dict."""
        start = parse_timestamp(raw.get("startDate"), self.tz)
        end = parse_timestamp(raw.get("endDate"), self.tz)

        place = self._parse_place(raw.get("place"))
        center = self._parse_coordinates(raw.get("center"))

        place_id = (
            _as_str(raw.get("placeId"))
            or (place.id if place else None)
            or _as_str(raw.get("placeUUID"))
        )

        item_id = _as_str(raw.get("itemId"))
        if not item_id:
            lat = center.latitude if center else 0
            lng = center.longitude if center else 0
            item_id = f"{raw.get('startDate') or ''}_{lat}_{lng}"

        samples = tuple(
            sample
            for sample in (self._parse_sample(s) for s in raw.get("samples") or [] if isinstance(s, dict))
            if sample is not None
        )

        return TimelineItem(
            id=item_id,
            is_visit=bool(raw.get("isVisit")),
            start=start,
            end=end,
            place=place,
            place_id=place_id,
            custom_title=_as_str(raw.get("customTitle")),
            street_address=_as_str(raw.get("streetAddress")),
            display_name=_as_str(raw.get("displayName")),
            center=center,
            samples=samples,
            notes=self._parse_notes(raw.get("notes"), start, end),
            activity_type=_as_str(raw.get("activityType")),
            manual_activity_type=bool(raw.get("manualActivityType")),
            recorded_distance=_as_float(raw.get("distance")),
            previous_item_id=_as_str(raw.get("previousItemId")),
            next_item_id=_as_str(raw.get("nextItemId")),
        )

    def _parse_coordinates(self, raw: Any) -> Optional[GPSCoordinates]:
        if not isinstance(raw, dict):
            return None
        lat = _as_float(raw.get("latitude"))
        lng = _as_float(raw.get("longitude"))
        if lat is None or lng is None:
            return None
        return GPSCoordinates(latitude=lat, longitude=lng, altitude=_as_float(raw.get("altitude")))

    def _parse_place(self, raw: Any) -> Optional[Place]:
        if not isinstance(raw, dict):
            return None
        return Place(
            id=_as_str(raw.get("placeId")) or _as_str(raw.get("id")),
            name=_as_str(raw.get("name")),
            center=self._parse_coordinates(raw.get("center")),
            radius_meters=_as_float(raw.get("radiusMeters")),
        )

    def _parse_sample(self, raw: Dict[str, Any]) -> Optional[Sample]:
        """Reads a sample in either nested ({location: {...}}) or flat shape."""
        location = raw.get("location") if isinstance(raw.get("location"), dict) else {}

        def pick(key: str) -> Any:
            value = location.get(key)
            return value if value is not None else raw.get(key)

        timestamp = parse_timestamp(pick("timestamp") or raw.get("date"), self.tz)
        return Sample(
            latitude=_as_float(pick("latitude")),
            longitude=_as_float(pick("longitude")),
            altitude=_as_float(pick("altitude")),
            timestamp=timestamp,
        )

    def _parse_notes(
        self, raw: Any, start: Optional[datetime], end: Optional[datetime]
    ) -> Tuple[RawNote, ...]:
        """Normalizes the free-text or list note shapes into one list."""
        fallback = start or end

        if isinstance(raw, str):
            if not raw.strip():
                return ()
            return (RawNote(body=raw, date=fallback),)

        if not isinstance(raw, list):
            return ()

        notes = []
        for entry in raw:
            if isinstance(entry, str):
                notes.append(RawNote(body=entry, date=fallback))
                continue
            if not isinstance(entry, dict):
                continue
            date_value = entry.get("date")
            notes.append(RawNote(
                body=entry.get("body") or "",
                date=parse_timestamp(date_value, self.tz) if date_value else fallback,
                note_id=_as_str(entry.get("noteId")),
            ))
        return tuple(notes)

    def load_export(self, days_dir: Path, month_key: Optional[str] = None) -> Dict[str, DayRecord]:
        """Loads all day files (optionally one month) keyed by day key.

        Raises:
            ExportNotFoundError: If the days directory does not exist
        """
        log_call("TimelineLoader", "load_export", days_dir=str(days_dir), month=month_key)

        if not days_dir.is_dir():
            raise ExportNotFoundError(f"Days directory not found: {days_dir}")
        if month_key:
            validate_month_key(month_key)

        days: Dict[str, DayRecord] = {}
        for path in sorted(days_dir.glob("*.json")):
            day_key = path.stem
            if not DAY_KEY_RE.match(day_key):
                continue
            if month_key and not day_key.startswith(month_key + "-"):
                continue
            days[day_key] = self.load_day(path)

        log_result("TimelineLoader", "load_export", f"{len(days)} days")
        return days

    def load_place_names(self, places_dir: Path) -> PlaceNames:
        """Builds the place-id -> name table from every JSON file in a folder."""
        log_call("TimelineLoader", "load_place_names", places_dir=str(places_dir))

        names = PlaceNames()
        if not places_dir.is_dir():
            return names

        for path in sorted(places_dir.rglob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    names.update_from_json(json.load(f))
            except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
                log_warning(f"Skipping malformed place file {path.name}: {e}")

        log_result("TimelineLoader", "load_place_names", f"{len(names)} places")
        return names
