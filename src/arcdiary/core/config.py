"""Configuration for arcdiary."""

from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from arcdiary.core.exceptions import ArcDiaryError
from arcdiary.models.timeline import SourceKind


@dataclass
class Config:
    """Settings for processing an Arc export."""

    # Root of the export (contains days/ and optionally places/)
    export_dir: Path

    # IANA timezone used for day keys; None = system local time
    timezone: Optional[str] = None

    # Which import produced the data (coalescing only runs for backups)
    source_kind: SourceKind = SourceKind.JSON_IMPORT

    # Drop ghost items before extraction
    filter_ghosts: bool = False

    # Visibility filters used for stats (False = only items with a note)
    include_all_locations: bool = True
    include_all_activities: bool = True

    # Verbose mode
    verbose: bool = False

    @property
    def days_dir(self) -> Path:
        return self.export_dir / "days"

    @property
    def places_dir(self) -> Path:
        return self.export_dir / "places"

    @property
    def tzinfo(self) -> Optional[tzinfo]:
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ArcDiaryError(f"Unknown timezone: {self.timezone}")
