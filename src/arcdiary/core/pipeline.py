"""Main pipeline for turning an Arc export into diary output."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from arcdiary.core.config import Config
from arcdiary.core.logger import log_call, log_info, log_result
from arcdiary.models.diary import ActivityStats, DiaryNote, Entry, LocationTotals, Note, Pin, Track
from arcdiary.models.timeline import DayRecord
from arcdiary.services.extractor import DiaryExtractor
from arcdiary.services.ghosts import filter_ghost_items
from arcdiary.services.location_namer import PlaceNames
from arcdiary.services.stats import daily_stats, filter_notes_for_day, location_totals, monthly_stats
from arcdiary.services.timeline_loader import TimelineLoader, parse_day_key, validate_month_key


@dataclass
class DayResult:
    """Everything derived from one day record."""

    day_key: str
    entries: List[Entry] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    diary_notes: List[DiaryNote] = field(default_factory=list)
    pins: List[Pin] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)
    stats: Dict[str, ActivityStats] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "day_key": self.day_key,
            "entries": [e.to_dict() for e in self.entries],
            "notes": [n.to_dict() for n in self.notes],
            "diary_notes": [n.to_dict() for n in self.diary_notes],
            "pins": [p.to_dict() for p in self.pins],
            "tracks": [t.to_dict() for t in self.tracks],
            "stats": {k: v.to_dict() for k, v in self.stats.items()},
        }


@dataclass
class MonthResult:
    """Per-day results plus month-level aggregates."""

    month_key: str
    days: Dict[str, DayResult] = field(default_factory=dict)
    stats: Dict[str, ActivityStats] = field(default_factory=dict)
    locations: List[LocationTotals] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "month_key": self.month_key,
            "days": sorted(self.days),
            "stats": {k: v.to_dict() for k, v in self.stats.items()},
            "locations": [loc.to_dict() for loc in self.locations],
        }


class DiaryPipeline:
    """Orchestrates extraction and aggregation for days and months."""

    def __init__(self, config: Config, place_names: Optional[PlaceNames] = None):
        """
        Args:
            config: Configuration
            place_names: Place-id -> name table (loaded from the export when None)
        """
        self.config = config
        self.loader = TimelineLoader(tz=config.tzinfo)
        if place_names is None:
            place_names = self.loader.load_place_names(config.places_dir)
        self.extractor = DiaryExtractor(place_names)

    def load_day(self, day_key: str) -> DayRecord:
        parse_day_key(day_key)
        return self.loader.load_day(self.config.days_dir / f"{day_key}.json")

    def load_month(self, month_key: str) -> Dict[str, DayRecord]:
        return self.loader.load_export(self.config.days_dir, month_key)

    def process_day(self, day: DayRecord, day_key: str) -> DayResult:
        """Runs every per-day transform on one record."""
        log_call("DiaryPipeline", "process_day", day=day_key, items=len(day.timeline_items))
        parse_day_key(day_key)

        if self.config.filter_ghosts:
            day = DayRecord(timeline_items=filter_ghost_items(day.timeline_items))

        entries, notes = self.extractor.entries_and_notes(day, day_key)
        diary_notes = self.extractor.diary_notes(day, day_key, self.config.source_kind)
        visible = filter_notes_for_day(
            diary_notes, self.config.include_all_locations, self.config.include_all_activities
        )

        result = DayResult(
            day_key=day_key,
            entries=entries,
            notes=notes,
            diary_notes=diary_notes,
            pins=self.extractor.pins(day),
            tracks=self.extractor.tracks(day),
            stats=daily_stats(visible),
        )
        log_result("DiaryPipeline", "process_day", f"{len(entries)} entries, {len(diary_notes)} diary notes")
        return result

    def process_month(self, days: Mapping[str, DayRecord], month_key: str) -> MonthResult:
        """Processes a month's days in chronological order and aggregates them."""
        validate_month_key(month_key)
        log_call("DiaryPipeline", "process_month", month=month_key, days=len(days))

        results: Dict[str, DayResult] = {}
        for day_key in sorted(days):
            if not day_key.startswith(month_key + "-"):
                log_info(f"skipping {day_key}: outside {month_key}")
                continue
            results[day_key] = self.process_day(days[day_key], day_key)

        month = MonthResult(
            month_key=month_key,
            days=results,
            stats=monthly_stats(
                {key: r.diary_notes for key, r in results.items()},
                self.config.include_all_locations,
                self.config.include_all_activities,
            ),
            locations=location_totals(entry for r in results.values() for entry in r.entries),
        )
        log_result("DiaryPipeline", "process_month", f"{len(results)} days, {len(month.stats)} categories")
        return month
