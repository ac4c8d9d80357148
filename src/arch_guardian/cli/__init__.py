"""CLI entry point: registers all subcommands."""

from typing import Optional

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="arch-guardian",
    help="Arch Guardian - Architecture Governance for Layered Codebases",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]Arch Guardian[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def _root(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Check a project snapshot against the governance specifications."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .registry import classify as _classify, concepts as _concepts, layers as _layers  # noqa: F401, E402


def main() -> None:
    app()
