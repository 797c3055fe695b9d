"""Command serve - JSON API over an export."""

import socket
import webbrowser
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from arcdiary.cli.commands.options import (
    ExportDirArgument,
    FilterGhostsOption,
    SourceOption,
    TimezoneOption,
    build_config,
)
from arcdiary.core.exceptions import ArcDiaryError
from arcdiary.models.timeline import SourceKind

console = Console()


def find_available_port(start_port: int, max_attempts: int = 10) -> Optional[int]:
    """Finds a free port starting at start_port, trying max_attempts ports."""
    for offset in range(max_attempts):
        candidate = start_port + offset
        if candidate > 65535:
            break
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(("127.0.0.1", candidate))
                return candidate
            except OSError:
                continue
    return None


def serve(
    export_dir: Path = ExportDirArgument,
    source: SourceKind = SourceOption,
    timezone: Optional[str] = TimezoneOption,
    filter_ghosts: bool = FilterGhostsOption,
    port: int = typer.Option(
        8000,
        "--port",
        "-p",
        help="Port for the web server",
        min=1024,
        max=65535,
    ),
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Do not open the browser",
    ),
) -> None:
    """Serve the diary of an export as a JSON API."""
    try:
        import uvicorn
        from arcdiary.web.app import create_app
        from arcdiary.core.logger import set_web_mode
    except ImportError:
        console.print("[red]Error:[/red] Web dependencies are not installed.")
        console.print("Install them with: pip install arcdiary[web]")
        raise typer.Exit(1)

    set_web_mode(True)
    config = build_config(export_dir, source, timezone, filter_ghosts, notes_only=False, verbose=False)

    console.print("[blue]arcdiary API[/blue]")
    console.print(f"  Export: {export_dir}")
    console.print(f"  Source: {config.source_kind.value}")

    try:
        fastapi_app = create_app(config)
    except ArcDiaryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    actual_port = find_available_port(port)
    if actual_port is None:
        console.print(f"[red]Error:[/red] No free port found (tried {port}–{port + 9})")
        raise typer.Exit(1)

    if actual_port != port:
        console.print(f"[yellow]Port {port} is busy, using {actual_port}[/yellow]")

    url = f"http://localhost:{actual_port}/api/days"
    if not no_browser:
        console.print(f"[green]Opening browser:[/green] {url}")
        webbrowser.open(url)
    else:
        console.print(f"[green]Running at:[/green] {url}")

    console.print()
    console.print("[dim]Ctrl+C to quit[/dim]")
    console.print()

    try:
        uvicorn.run(fastapi_app, host="127.0.0.1", port=actual_port, log_level="warning")
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
