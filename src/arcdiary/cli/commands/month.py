"""Command month - monthly activity totals and places."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from arcdiary.cli.commands.day import print_stats
from arcdiary.cli.commands.options import (
    ExportDirArgument,
    FilterGhostsOption,
    JsonOption,
    NotesOnlyOption,
    SourceOption,
    TimezoneOption,
    VerboseOption,
    build_config,
)
from arcdiary.cli.formatting import format_duration
from arcdiary.core.exceptions import ArcDiaryError
from arcdiary.core.pipeline import DiaryPipeline
from arcdiary.models.timeline import SourceKind

console = Console()


def month(
    export_dir: Path = ExportDirArgument,
    month_key: str = typer.Argument(..., help="Month to summarize (YYYY-MM)"),
    source: SourceKind = SourceOption,
    timezone: Optional[str] = TimezoneOption,
    filter_ghosts: bool = FilterGhostsOption,
    notes_only: bool = NotesOnlyOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
) -> None:
    """Summarize a month: activity totals and most visited places."""
    config = build_config(export_dir, source, timezone, filter_ghosts, notes_only, verbose)

    try:
        pipeline = DiaryPipeline(config)
        result = pipeline.process_month(pipeline.load_month(month_key), month_key)
    except ArcDiaryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(130)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if not result.days:
        console.print(f"[yellow]No days found for {month_key}[/yellow]")
        return

    console.print(f"[blue]{month_key}[/blue]: {len(result.days)} days")
    print_stats(result.stats, f"Activities {month_key}")

    table = Table(title="Places")
    table.add_column("Location", style="cyan")
    table.add_column("Visits", justify="right")
    table.add_column("Time", justify="right", style="green")
    table.add_column("First", style="dim")
    table.add_column("Last", style="dim")
    for location in result.locations[:20]:
        table.add_row(
            location.name,
            str(location.visit_count),
            format_duration(location.total_duration),
            location.first_visit or "-",
            location.last_visit or "-",
        )
    console.print(table)
