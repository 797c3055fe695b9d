"""Shared builders for raw Arc export items."""

import json
from pathlib import Path
from typing import List, Optional

import pytest

from arcdiary.core import logger
from arcdiary.models.timeline import DayRecord, TimelineItem
from arcdiary.services.timeline_loader import TimelineLoader


def sample(lat, lng, timestamp=None, altitude=None) -> dict:
    """Raw sample in the nested export shape."""
    location = {"latitude": lat, "longitude": lng}
    if timestamp:
        location["timestamp"] = timestamp
    if altitude is not None:
        location["altitude"] = altitude
    return {"location": location}


def visit(
    item_id: str,
    start: str,
    end: str,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    place_id: Optional[str] = None,
    place_name: Optional[str] = None,
    notes=None,
    **extra,
) -> dict:
    raw = {"itemId": item_id, "isVisit": True, "startDate": start, "endDate": end}
    if lat is not None:
        raw["center"] = {"latitude": lat, "longitude": lng}
    if place_id or place_name:
        raw["place"] = {"placeId": place_id, "name": place_name}
    if notes is not None:
        raw["notes"] = notes
    raw.update(extra)
    return raw


def trip(
    item_id: str,
    start: str,
    end: str,
    activity: Optional[str] = "walking",
    samples: Optional[List[dict]] = None,
    notes=None,
    **extra,
) -> dict:
    raw = {"itemId": item_id, "isVisit": False, "startDate": start, "endDate": end}
    if activity is not None:
        raw["activityType"] = activity
    if samples is not None:
        raw["samples"] = samples
    if notes is not None:
        raw["notes"] = notes
    raw.update(extra)
    return raw


def walk_samples(start_lat: float, lng: float, times: List[str], step: float = 0.001) -> List[dict]:
    """Samples walking north by `step` degrees between timestamps."""
    return [sample(start_lat + i * step, lng, timestamp=t) for i, t in enumerate(times)]


def parse_items(*raws: dict) -> List[TimelineItem]:
    return TimelineLoader().parse_day({"timelineItems": list(raws)}).timeline_items


def day_record(*raws: dict) -> DayRecord:
    return TimelineLoader().parse_day({"timelineItems": list(raws)})


def write_day(export_dir: Path, day_key: str, *raws: dict) -> Path:
    days_dir = export_dir / "days"
    days_dir.mkdir(parents=True, exist_ok=True)
    path = days_dir / f"{day_key}.json"
    path.write_text(json.dumps({"timelineItems": list(raws)}), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_logger():
    """Reset logger flags between tests."""
    logger.set_verbose(False)
    logger.set_web_mode(False)
    yield
    logger.set_verbose(False)
    logger.set_web_mode(False)
