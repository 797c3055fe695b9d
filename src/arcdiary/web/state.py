"""In-memory state for the web API."""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from arcdiary.core.pipeline import DayResult, DiaryPipeline, MonthResult
from arcdiary.models.timeline import DayRecord


class LogBuffer:
    """Thread-safe log buffer for the web API."""

    MAX_ENTRIES = 1000

    def __init__(self):
        self.entries: List[dict] = []
        self.lock = threading.Lock()

    def add(self, level: str, message: str, data: Optional[dict] = None):
        """Append a log entry."""
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "message": message,
            "data": data,
        }

        with self.lock:
            self.entries.append(entry)
            if len(self.entries) > self.MAX_ENTRIES:
                self.entries = self.entries[-self.MAX_ENTRIES:]

    def get_all(self) -> List[dict]:
        """Return all log entries."""
        with self.lock:
            return list(self.entries)

    def clear(self):
        """Clear the buffer."""
        with self.lock:
            self.entries.clear()


# Global log buffer
log_buffer = LogBuffer()


class DiaryState:
    """Loaded export plus lazily computed day results."""

    def __init__(self, pipeline: DiaryPipeline, days: Dict[str, DayRecord]):
        self.pipeline = pipeline
        self.days = days
        self._results: Dict[str, DayResult] = {}
        self.lock = threading.Lock()

    @property
    def day_keys(self) -> List[str]:
        return sorted(self.days)

    def day_result(self, day_key: str) -> Optional[DayResult]:
        """Processed day, or None when the export has no such day."""
        record = self.days.get(day_key)
        if record is None:
            return None
        with self.lock:
            if day_key not in self._results:
                self._results[day_key] = self.pipeline.process_day(record, day_key)
            return self._results[day_key]

    def month_result(self, month_key: str) -> MonthResult:
        days = {key: record for key, record in self.days.items() if key.startswith(month_key + "-")}
        return self.pipeline.process_month(days, month_key)
