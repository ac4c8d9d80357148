"""Rich terminal formatter for governance reports."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..analyzer import GovernanceReport
from ..findings.models import Severity
from .base import BaseFormatter

console = Console()

_SEVERITY_STYLE = {
    Severity.CRITICAL: "red bold",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    elif score >= 50:
        return "yellow"
    else:
        return "red"


class RichFormatter(BaseFormatter):
    """Summary panel, one table per finding category, recommendations."""

    def render(self, report: GovernanceReport) -> None:
        score = report.compliance
        style = _score_style(score.overall)
        console.print(
            Panel(
                f"[{style} bold]{score.overall}/100[/{style} bold]  trend: {score.trend.value}\n"
                f"{len(report.findings)} findings, {score.critical_count} critical\n"
                f"[dim]rules: {report.rules_source}[/dim]",
                title="[bold cyan]Architecture Governance[/bold cyan]",
                expand=False,
            )
        )

        for problem in report.problems:
            console.print(f"[yellow]Rule set problem:[/yellow] {escape(problem)}")

        for kind, findings in report.findings_by_category().items():
            table = Table(title=f"{kind} ({len(findings)})", show_lines=False)
            table.add_column("Severity")
            table.add_column("Location", style="cyan")
            table.add_column("Description")
            table.add_column("Spec", style="dim")
            for f in findings:
                sev = _SEVERITY_STYLE[f.severity]
                table.add_row(
                    f"[{sev}]{f.severity.value}[/{sev}]", escape(str(f.location)), escape(f.description), f.spec_id
                )
            console.print(table)

        if report.instability_patterns:
            table = Table(title="Instability patterns")
            table.add_column("Type")
            table.add_column("Subject", style="cyan")
            table.add_column("Frequency", justify="right")
            table.add_column("Samples", justify="right")
            for p in report.instability_patterns:
                table.add_row(p.pattern_type, escape(p.subject), f"{p.frequency:.2f}", str(p.sample_count))
            console.print(table)

        if report.recommendations:
            table = Table(title="Refactoring recommendations")
            table.add_column("Priority")
            table.add_column("Area", style="cyan")
            table.add_column("Refactoring")
            table.add_column("Hours", justify="right")
            for r in report.recommendations:
                table.add_row(r.priority.value, escape(r.area), r.refactoring_type.value, str(r.estimated_hours))
            console.print(table)

        plan = report.refactoring_plan
        if plan is not None:
            freeze = "[red]freeze edits[/red]" if plan.freeze_recommendation else "no freeze"
            console.print(
                f"Refactoring plan: {len(plan.steps)} steps, {plan.total_hours}h "
                f"({plan.complexity.value}), risk {plan.risk_level.value}, {freeze}"
            )

        if not report.findings:
            console.print("[green]No governance violations found.[/green]")

    def format(self, report: GovernanceReport) -> str:
        # Rich output goes directly to the console
        self.render(report)
        return ""
