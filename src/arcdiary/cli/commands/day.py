"""Command day - the diary for a single day."""

import json
from pathlib import Path
from typing import Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

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
from arcdiary.cli.formatting import format_distance, format_duration, format_time
from arcdiary.core.exceptions import ArcDiaryError
from arcdiary.core.pipeline import DayResult, DiaryPipeline
from arcdiary.models.diary import ActivityStats
from arcdiary.models.timeline import SourceKind

console = Console()


def print_stats(stats: Dict[str, ActivityStats], title: str) -> None:
    if not stats:
        console.print("[dim]No activities with distance[/dim]")
        return

    table = Table(title=title)
    table.add_column("Activity", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Distance", justify="right", style="green")
    table.add_column("Duration", justify="right")
    table.add_column("Elevation", justify="right")

    for category, totals in sorted(stats.items(), key=lambda kv: -kv[1].distance):
        table.add_row(
            category,
            str(totals.count),
            format_distance(totals.distance),
            format_duration(totals.duration),
            f"{round(totals.elevation_gain)} m" if totals.elevation_gain else "-",
        )
    console.print(table)


def print_day(result: DayResult) -> None:
    table = Table(title=f"Diary {result.day_key}")
    table.add_column("Start", style="dim")
    table.add_column("End", style="dim")
    table.add_column("Location", style="cyan")
    table.add_column("Activity")
    table.add_column("Duration", justify="right")
    table.add_column("Distance", justify="right", style="green")
    table.add_column("Note")

    for entry in result.entries:
        table.add_row(
            format_time(entry.start),
            format_time(entry.end),
            entry.location,
            "" if entry.is_visit else entry.activity_type,
            format_duration(entry.duration),
            "" if entry.is_visit else format_distance(entry.distance),
            "✎" if entry.has_note else "",
        )
    console.print(table)

    for note in result.notes:
        console.print(f"  [bold]{format_time(note.date)}[/bold] {note.body}")

    console.print()
    print_stats(result.stats, "Activities")


def day(
    export_dir: Path = ExportDirArgument,
    day_key: str = typer.Argument(..., help="Day to show (YYYY-MM-DD)"),
    source: SourceKind = SourceOption,
    timezone: Optional[str] = TimezoneOption,
    filter_ghosts: bool = FilterGhostsOption,
    notes_only: bool = NotesOnlyOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the cleaned diary of one day: entries, notes and activity stats."""
    config = build_config(export_dir, source, timezone, filter_ghosts, notes_only, verbose)

    try:
        pipeline = DiaryPipeline(config)
        result = pipeline.process_day(pipeline.load_day(day_key), day_key)
    except ArcDiaryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(130)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    print_day(result)
