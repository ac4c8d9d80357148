"""Main analysis command."""

from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.markup import escape

from ..analyzer import GovernanceAnalyzer, GovernanceReport, load_previous_report
from ..exceptions import GovernanceError, GuardianError
from ..findings.models import Severity
from ..formatters import get_formatter
from ..history import load_history
from ..logging_config import setup_logging
from ..snapshot import load_snapshot
from . import app
from ._common import console, resolve_config

_FAIL_ON = {
    "any": Severity.LOW,
    "high": Severity.HIGH,
    "critical": Severity.CRITICAL,
}


@app.command()
def analyze(
    snapshot: Path = typer.Argument(
        ...,
        help="Project snapshot (JSON) produced by the source-analysis step",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    history: Optional[Path] = typer.Option(
        None,
        "--history",
        "-H",
        help="Modification, test and visual-stability history (JSON)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    rules: Optional[Path] = typer.Option(
        None,
        "--rules",
        "-r",
        help="Rule document (TOML or JSON); falls back to the built-in specs if unusable",
    ),
    previous: Optional[Path] = typer.Option(
        None,
        "--previous",
        help="JSON report of the previous run, for fix-attempt counts",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    spec: Optional[List[str]] = typer.Option(
        None,
        "--spec",
        "-s",
        help="Only run these specifications (repeatable, e.g. --spec Spec-2)",
    ),
    at: Optional[int] = typer.Option(
        None,
        "--at",
        help="Reference time in Unix seconds (default: snapshot time or newest history entry)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    markdown_output: bool = typer.Option(
        False,
        "--markdown",
        help="Output a Markdown report document",
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Exit 1 if findings meet threshold: any | high | critical",
        click_type=click.Choice(["any", "high", "critical"], case_sensitive=False),
    ),
    production: bool = typer.Option(
        False,
        "--production",
        help="Drop invariant-violating findings instead of failing",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Detector threads (default: one per detector)",
        min=1,
        max=32,
        hidden=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
):
    """
    Analyze a project snapshot against the governance specifications.

    Checks single-source-of-truth, constants purity, layer separation,
    renderer boundary purity, magic numbers, structural failures and
    physics priority, then scores compliance.

    [bold cyan]Examples:[/bold cyan]

      arch-guardian analyze snapshot.json

      arch-guardian analyze snapshot.json --history history.json --json

      arch-guardian analyze snapshot.json --previous last.json --fail-on high
    """
    if json_output and markdown_output:
        console.print("[red]Error:[/red] --json and --markdown are mutually exclusive")
        raise typer.Exit(2)

    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        settings = resolve_config(
            config=config,
            workers=workers,
            production=production,
            specs=spec,
            verbose=verbose,
            quiet=quiet,
        )
        project = load_snapshot(snapshot)
        project_history = load_history(history) if history else None
        prior = load_previous_report(previous) if previous else None

        analyzer = GovernanceAnalyzer(config=settings)
        report = analyzer.analyze(
            project,
            history=project_history,
            reference_time=at,
            previous=prior,
            rules_path=rules,
        )

        if json_output:
            get_formatter("json").render(report)
        elif markdown_output:
            get_formatter("markdown").render(report)
        else:
            get_formatter("rich").render(report)

        if fail_on is not None and _should_fail(fail_on, report):
            raise typer.Exit(1)

    except typer.Exit:
        raise

    except (GovernanceError, GuardianError) as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)


def _should_fail(fail_on: str, report: GovernanceReport) -> bool:
    """Check whether findings meet the --fail-on threshold."""
    return report.count_at_least(_FAIL_ON[fail_on.lower()]) > 0
