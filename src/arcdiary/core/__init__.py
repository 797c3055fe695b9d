"""Core modules for arcdiary."""

from arcdiary.core.config import Config
from arcdiary.core.exceptions import ArcDiaryError, DayKeyError, ExportNotFoundError, TimelineParseError
from arcdiary.core import logger

__all__ = [
    "Config",
    "ArcDiaryError",
    "DayKeyError",
    "ExportNotFoundError",
    "TimelineParseError",
    "logger",
]
