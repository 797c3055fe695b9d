"""FastAPI application serving diary data."""

from typing import Dict, Optional

from fastapi import FastAPI

from arcdiary import __version__
from arcdiary.core.config import Config
from arcdiary.core.pipeline import DiaryPipeline
from arcdiary.models.timeline import DayRecord
from arcdiary.services.location_namer import PlaceNames
from arcdiary.web.routes import router
from arcdiary.web.state import DiaryState


def create_app(
    config: Config,
    days: Optional[Dict[str, DayRecord]] = None,
    place_names: Optional[PlaceNames] = None,
) -> FastAPI:
    """Create and configure the FastAPI app.

    Args:
        config: Configuration (export_dir is read when days is None)
        days: Preloaded day records keyed by day key
        place_names: Place-id -> name table (read from the export when None)
    """
    app = FastAPI(
        title="arcdiary",
        description="Cleaned Arc Timeline diary",
        version=__version__,
    )

    pipeline = DiaryPipeline(config, place_names=place_names)
    if days is None:
        days = pipeline.loader.load_export(config.days_dir)

    app.state.diary = DiaryState(pipeline, days)
    app.include_router(router)
    return app
