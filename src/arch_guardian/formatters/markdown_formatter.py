"""Markdown formatter: a governance report document for CI artifacts."""

from ..analyzer import GovernanceReport
from .base import BaseFormatter

_TITLES = {
    "ssot-violation": "Single Source of Truth",
    "constants-pollution": "Constants Purity",
    "layer-violation": "Layer Separation",
    "boundary-violation": "Boundary Purity",
    "magic-number": "Magic Numbers",
    "structural-failure": "Structural Failures",
    "priority-violation": "Physics Priority",
}


def _cell(text: str) -> str:
    return str(text).replace("|", "\\|").replace("\n", " ")


class MarkdownFormatter(BaseFormatter):
    """Render a report as a Markdown document."""

    def render(self, report: GovernanceReport) -> None:
        print(self.format(report))

    def format(self, report: GovernanceReport) -> str:
        score = report.compliance
        lines = [
            "# Architecture Governance Report",
            "",
            f"- Generated at: {report.generated_at}",
            f"- Rules: {report.rules_source}",
            f"- Compliance: **{score.overall}/100** ({score.trend.value})",
            f"- Findings: {len(report.findings)} ({score.critical_count} critical)",
            "",
        ]

        if score.by_spec:
            lines += ["## Compliance by specification", "", "| Spec | Score |", "|---|---|"]
            lines += [f"| {spec} | {value} |" for spec, value in sorted(score.by_spec.items())]
            lines.append("")

        if report.problems:
            lines += ["## Rule set problems", ""]
            lines += [f"- {p}" for p in report.problems]
            lines.append("")

        for kind, findings in report.findings_by_category().items():
            lines += [
                f"## {_TITLES.get(kind, kind)} ({len(findings)})",
                "",
                "| Severity | Location | Description | Rule |",
                "|---|---|---|---|",
            ]
            for f in findings:
                attempts = f" (fix attempts: {f.fix_attempts})" if f.fix_attempts else ""
                lines.append(
                    f"| {f.severity.value} | `{f.location}` | "
                    f"{_cell(f.description)}{attempts} | {_cell(f.rule_reference)} |"
                )
            lines.append("")

        if report.instability_patterns:
            lines += ["## Instability patterns", "", "| Type | Subject | Frequency | Samples |"]
            lines.append("|---|---|---|---|")
            for p in report.instability_patterns:
                lines.append(
                    f"| {p.pattern_type} | {_cell(p.subject)} | {p.frequency:.2f} | {p.sample_count} |"
                )
            lines.append("")

        if report.recommendations:
            lines += ["## Refactoring recommendations", ""]
            for r in report.recommendations:
                lines.append(f"- **{r.priority.value}** {r.description} (~{r.estimated_hours}h)")
            lines.append("")

        plan = report.refactoring_plan
        if plan is not None:
            lines += [
                "## Refactoring plan",
                "",
                f"- Total effort: {plan.total_hours}h ({plan.complexity.value})",
                f"- Overall risk: {plan.risk_level.value}",
                f"- Freeze further edits: {'yes' if plan.freeze_recommendation else 'no'}",
                "",
            ]
            for step in plan.steps:
                after = f" (after {', '.join(map(str, step.dependencies))})" if step.dependencies else ""
                lines.append(f"{step.order}. {step.description}, {step.estimated_hours}h{after}")
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"
