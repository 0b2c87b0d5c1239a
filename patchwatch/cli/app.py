from __future__ import annotations

import typer

from patchwatch import __version__
from patchwatch.cli.commands.check import check
from patchwatch.cli.commands.releases import releases


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(check)
app.command()(releases)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Check pinned upstream projects for newer patch releases."""


def main() -> None:
    app()
