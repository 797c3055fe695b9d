"""API endpoints."""

from fastapi import APIRouter, HTTPException, Request

from arcdiary.core.exceptions import DayKeyError
from arcdiary.core.pipeline import DayResult
from arcdiary.services.timeline_loader import parse_day_key, validate_month_key
from arcdiary.web.state import DiaryState, log_buffer

router = APIRouter()


def _state(request: Request) -> DiaryState:
    return request.app.state.diary


def _day(request: Request, day_key: str) -> DayResult:
    try:
        parse_day_key(day_key)
    except DayKeyError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = _state(request).day_result(day_key)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No data for {day_key}")
    return result


@router.get("/api/days")
async def list_days(request: Request):
    """Day keys available in the export."""
    return {"days": _state(request).day_keys}


@router.get("/api/days/{day_key}")
async def get_day(day_key: str, request: Request):
    """Normalized entries and notes of one day."""
    result = _day(request, day_key)
    return {
        "day_key": day_key,
        "entries": [e.to_dict() for e in result.entries],
        "notes": [n.to_dict() for n in result.notes],
    }


@router.get("/api/days/{day_key}/diary")
async def get_diary(day_key: str, request: Request):
    """Display rows of one day (one per note or placeholder)."""
    result = _day(request, day_key)
    return {"day_key": day_key, "notes": [n.to_dict() for n in result.diary_notes]}


@router.get("/api/days/{day_key}/pins")
async def get_pins(day_key: str, request: Request):
    result = _day(request, day_key)
    return {"day_key": day_key, "pins": [p.to_dict() for p in result.pins]}


@router.get("/api/days/{day_key}/tracks")
async def get_tracks(day_key: str, request: Request):
    result = _day(request, day_key)
    return {"day_key": day_key, "tracks": [t.to_dict() for t in result.tracks]}


@router.get("/api/days/{day_key}/stats")
async def get_day_stats(day_key: str, request: Request):
    result = _day(request, day_key)
    return {"day_key": day_key, "stats": {k: v.to_dict() for k, v in result.stats.items()}}


@router.get("/api/months/{month_key}/stats")
async def get_month_stats(month_key: str, request: Request):
    """Monthly activity totals and location summary."""
    try:
        validate_month_key(month_key)
    except DayKeyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _state(request).month_result(month_key).to_dict()


@router.get("/api/logs")
async def get_logs():
    """Buffered log entries."""
    return {"logs": log_buffer.get_all()}
