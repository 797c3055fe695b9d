"""Custom exceptions for arcdiary."""


class ArcDiaryError(Exception):
    """Base exception for arcdiary."""

    pass


class TimelineParseError(ArcDiaryError):
    """Error while parsing a timeline JSON file."""

    pass


class DayKeyError(ArcDiaryError):
    """Malformed day or month key."""

    def __init__(self, key: str, expected: str = "YYYY-MM-DD") -> None:
        self.key = key
        super().__init__(f"Invalid key '{key}', expected {expected}")


class ExportNotFoundError(ArcDiaryError):
    """Export directory or day file does not exist."""

    pass
