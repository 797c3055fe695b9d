"""Main CLI definition for arcdiary."""

from typing import Optional

import typer

from arcdiary import __version__
from arcdiary.cli.commands.day import day
from arcdiary.cli.commands.month import month
from arcdiary.cli.commands.serve import serve


def version_callback(value: bool) -> None:
    if value:
        print(f"arcdiary {__version__}")
        raise typer.Exit()


app = typer.Typer(help="Clean up Arc Timeline exports into a day-by-day diary.")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    pass


app.command()(day)
app.command()(month)
app.command()(serve)


if __name__ == "__main__":
    app()
