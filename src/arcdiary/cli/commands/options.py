"""Options shared by the day and month commands."""

from pathlib import Path
from typing import Optional

import typer

from arcdiary.core import logger
from arcdiary.core.config import Config
from arcdiary.models.timeline import SourceKind

ExportDirArgument = typer.Argument(
    ...,
    help="Path to the Arc export folder (contains days/ and places/)",
    exists=True,
    file_okay=False,
    dir_okay=True,
    resolve_path=True,
)

SourceOption = typer.Option(
    SourceKind.JSON_IMPORT,
    "--source",
    "-s",
    help="Import source of the export (coalescing only runs for backup-import)",
)

TimezoneOption = typer.Option(
    None,
    "--timezone",
    "-z",
    help="IANA timezone for day boundaries (default: system local time)",
)

FilterGhostsOption = typer.Option(
    False,
    "--filter-ghosts",
    help="Drop sample-less ghost items and duplicated trips",
)

NotesOnlyOption = typer.Option(
    False,
    "--notes-only",
    help="Only count items that have a note in the stats",
)

JsonOption = typer.Option(
    False,
    "--json",
    help="Print JSON instead of tables",
)

VerboseOption = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Verbose output of service calls",
)


def build_config(
    export_dir: Path,
    source: SourceKind,
    timezone: Optional[str],
    filter_ghosts: bool,
    notes_only: bool,
    verbose: bool,
) -> Config:
    logger.set_verbose(verbose)
    return Config(
        export_dir=export_dir,
        timezone=timezone,
        source_kind=source,
        filter_ghosts=filter_ghosts,
        include_all_locations=not notes_only,
        include_all_activities=not notes_only,
        verbose=verbose,
    )
