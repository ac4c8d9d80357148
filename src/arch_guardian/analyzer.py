"""GovernanceAnalyzer: runs every detector over one snapshot and scores the result."""

from __future__ import annotations

import concurrent.futures
import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .config import GuardianConfig
from .detectors import DETECTORS, DetectionContext, Detector, StructuralFailureDetector
from .exceptions import (
    DetectorTimeoutError,
    ErrorCode,
    InputFormatError,
    InvariantViolationError,
)
from .findings.models import (
    Finding,
    FindingKind,
    InstabilityPattern,
    Severity,
    StructuralFailureFinding,
)
from .governance.registry import GovernanceRegistry, default_registry
from .governance.rules import load_rule_set, validate_rule_set
from .governance.specs import RuleSet
from .history.models import EMPTY_HISTORY, ProjectHistory
from .logging_config import get_logger
from .refactoring import (
    RefactoringPlan,
    RefactoringRecommendation,
    StabilityAssessment,
    assess_stability,
    plan_refactoring,
    recommend_refactorings,
)
from .snapshot.models import ProjectSnapshot, SourceLocation

logger = get_logger(__name__)

OVERALL_PENALTY = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}
SPEC_PENALTY = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}
STABLE_SCORE = 80


class Trend(Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DEGRADING = "degrading"


@dataclass(frozen=True)
class ComplianceScore:
    """Penalty-based score derived fresh from the current findings."""

    overall: int
    by_spec: dict[str, int]
    critical_count: int
    trend: Trend

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "by_spec": dict(self.by_spec),
            "critical_count": self.critical_count,
            "trend": self.trend.value,
        }


def compute_compliance(findings: list[Finding], spec_ids: list[str]) -> ComplianceScore:
    """Overall and per-spec scores, each starting at 100 and floored at 0.

    Trend is two-bucket: a score of 80 or more is stable, anything lower is
    degrading. ``Trend.IMPROVING`` needs a score series and is never produced.
    """
    overall = max(0, 100 - sum(OVERALL_PENALTY[f.severity] for f in findings))
    by_spec = {
        spec_id: max(
            0, 100 - sum(SPEC_PENALTY[f.severity] for f in findings if f.spec_id == spec_id)
        )
        for spec_id in spec_ids
    }
    return ComplianceScore(
        overall=overall,
        by_spec=by_spec,
        critical_count=sum(1 for f in findings if f.severity == Severity.CRITICAL),
        trend=Trend.STABLE if overall >= STABLE_SCORE else Trend.DEGRADING,
    )


@dataclass(frozen=True)
class GovernanceReport:
    """Everything one analysis run produced."""

    generated_at: int
    findings: tuple[Finding, ...]
    compliance: ComplianceScore
    recommendations: tuple[RefactoringRecommendation, ...] = ()
    instability_patterns: tuple[InstabilityPattern, ...] = ()
    refactoring_plan: Optional[RefactoringPlan] = None
    stability: tuple[StabilityAssessment, ...] = ()
    rules_source: str = "built-in"
    problems: tuple[str, ...] = field(default=())

    def findings_by_category(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = {kind.value: [] for kind in FindingKind}
        for finding in self.findings:
            grouped[finding.kind.value].append(finding)
        return {k: v for k, v in grouped.items() if v}

    def count_at_least(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity.weight <= severity.weight)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "rules_source": self.rules_source,
            "problems": list(self.problems),
            "compliance": self.compliance.to_dict(),
            "summary": {
                "total": len(self.findings),
                "by_severity": {
                    s.value: sum(1 for f in self.findings if f.severity == s) for s in Severity
                },
            },
            "findings": {
                kind: [f.to_dict() for f in group]
                for kind, group in self.findings_by_category().items()
            },
            "recommendations": [r.to_dict() for r in self.recommendations],
            "instability_patterns": [p.to_dict() for p in self.instability_patterns],
            "refactoring_plan": (
                self.refactoring_plan.to_dict() if self.refactoring_plan else None
            ),
            "stability": [s.to_dict() for s in self.stability],
        }


class GovernanceAnalyzer:
    """Load rules, fan detectors out over the snapshot, aggregate and score.

    Every detector reads the same immutable ``DetectionContext``; results are
    concatenated and sorted, so thread scheduling never changes the output.

    Args:
        config: Run configuration (defaults apply when omitted)
        registry: Concept and layer registry (the built-in one when omitted)
        detectors: Detector instances to run (one per rule category by default)
    """

    def __init__(
        self,
        config: Optional[GuardianConfig] = None,
        registry: Optional[GovernanceRegistry] = None,
        detectors: Optional[list[Detector]] = None,
    ):
        self.config = config or GuardianConfig()
        self.registry = registry or default_registry()
        self.detectors = detectors if detectors is not None else [cls() for cls in DETECTORS.values()]

    def load_rules(self, rules_path: Optional[Path] = None) -> tuple[RuleSet, list[str]]:
        path = rules_path or (Path(self.config.rules_file) if self.config.rules_file else None)
        rule_set = load_rule_set(path, timeout=self.config.rules_timeout_seconds)
        problems = list(rule_set.problems) + validate_rule_set(rule_set, self.registry)
        return rule_set, problems

    def analyze(
        self,
        snapshot: ProjectSnapshot,
        history: Optional[ProjectHistory] = None,
        reference_time: Optional[int] = None,
        previous: Optional[GovernanceReport] = None,
        rules_path: Optional[Path] = None,
    ) -> GovernanceReport:
        """Run one analysis.

        Args:
            snapshot: Project structure to inspect
            history: Modification/test/visual history (empty when omitted)
            reference_time: Analysis time in Unix seconds; defaults to the
                snapshot's ``generated_at``, then the newest history entry
            previous: Report of the prior run, for fix-attempt bookkeeping
            rules_path: Rule document overriding ``config.rules_file``

        Raises:
            InvariantViolationError: A detector produced a finding without a
                location (non-production runs only)
        """
        history = history or EMPTY_HISTORY
        now = self.reference_time(snapshot, history, reference_time)
        rule_set, problems = self.load_rules(rules_path)

        context = DetectionContext(
            snapshot=snapshot,
            history=history,
            registry=self.registry,
            rules=rule_set,
            thresholds=self.config.thresholds,
            reference_time=now,
            enabled_specs=tuple(self.config.enabled_specs),
        )

        findings = self._check_invariants(self._run_detectors(context))
        findings.sort(key=lambda f: f.sort_key())
        if previous is not None:
            findings = apply_fix_attempts(findings, previous)

        spec_ids = [s.id for s in rule_set.active_specs(list(self.config.enabled_specs) or None)]
        compliance = compute_compliance(findings, spec_ids)

        failures = [f for f in findings if isinstance(f, StructuralFailureFinding)]
        patterns: list[InstabilityPattern] = []
        if context.rule(StructuralFailureDetector.category) is not None:
            patterns = StructuralFailureDetector.detect_instability_patterns(context)

        report = GovernanceReport(
            generated_at=now,
            findings=tuple(findings),
            compliance=compliance,
            recommendations=tuple(recommend_refactorings(findings)),
            instability_patterns=tuple(patterns),
            refactoring_plan=plan_refactoring(failures) if failures else None,
            stability=tuple(assess_stability(history, now, self.config.thresholds)),
            rules_source=rule_set.source,
            problems=tuple(problems),
        )
        logger.info(
            f"Analysis complete: {len(findings)} findings, "
            f"compliance {compliance.overall} ({compliance.trend.value})"
        )
        return report

    @staticmethod
    def reference_time(
        snapshot: ProjectSnapshot, history: ProjectHistory, explicit: Optional[int] = None
    ) -> int:
        if explicit is not None:
            return int(explicit)
        if snapshot.generated_at is not None:
            return int(snapshot.generated_at)
        latest = history.latest_timestamp()
        return int(latest) if latest is not None else 0

    def _run_detectors(self, context: DetectionContext) -> list[Finding]:
        """Fan out one task per detector; a failing or slow detector contributes nothing."""
        if not self.detectors:
            return []
        timeout = self.config.detector_timeout_seconds
        workers = self.config.workers or len(self.detectors)
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [(d, executor.submit(d.detect, context)) for d in self.detectors]
            findings: list[Finding] = []
            for detector, future in futures:
                try:
                    findings.extend(future.result(timeout=timeout))
                except concurrent.futures.TimeoutError:
                    error = DetectorTimeoutError(
                        f"Detector '{detector.name}' exceeded {timeout}s timeout",
                        ErrorCode.AG401,
                        context={"detector": detector.name},
                    )
                    logger.warning(str(error))
                except Exception as e:
                    logger.warning(f"[{ErrorCode.AG400.value}] Detector '{detector.name}' failed: {e}")
            return findings
        finally:
            executor.shutdown(wait=False)

    def _check_invariants(self, findings: list[Finding]) -> list[Finding]:
        kept: list[Finding] = []
        for finding in findings:
            if finding.location is not None:
                kept.append(finding)
                continue
            error = InvariantViolationError(
                f"{finding.kind.value} finding has no source location: {finding.description}",
                ErrorCode.AG500,
                context={"spec_id": finding.spec_id, "kind": finding.kind.value},
            )
            if not self.config.production:
                raise error
            logger.error(f"{error}; dropping finding")
        return kept


def apply_fix_attempts(findings: list[Finding], previous: GovernanceReport) -> list[Finding]:
    """Carry fix-attempt counts forward for findings that survived a fix."""
    attempts = {f.identity(): f.fix_attempts for f in previous.findings}
    return [
        dataclasses.replace(f, fix_attempts=attempts[f.identity()] + 1)
        if f.identity() in attempts
        else f
        for f in findings
    ]


def report_from_dict(data: Any) -> GovernanceReport:
    """Rebuild the parts of a serialized report needed by a follow-up run.

    Findings come back as base ``Finding`` values; variant fields are not
    needed for fix-attempt bookkeeping.

    Raises:
        InputFormatError: If the document is not a serialized report
    """
    if not isinstance(data, dict) or not isinstance(data.get("findings"), dict):
        raise InputFormatError("Report document must contain a 'findings' mapping", ErrorCode.AG302)
    try:
        findings = []
        for group in data["findings"].values():
            for raw in group:
                loc = raw.get("location")
                findings.append(
                    Finding(
                        spec_id=str(raw["spec_id"]),
                        kind=FindingKind(raw["kind"]),
                        location=(
                            SourceLocation(loc["file"], int(loc["line"]), int(loc["column"]))
                            if loc
                            else None
                        ),
                        description=str(raw["description"]),
                        rule_reference=str(raw.get("rule_reference", "")),
                        severity=Severity(raw["severity"]),
                        detected_at=int(raw.get("detected_at", 0)),
                        fix_attempts=int(raw.get("fix_attempts", 0)),
                    )
                )
        compliance = data.get("compliance") or {}
        score = ComplianceScore(
            overall=int(compliance.get("overall", 100)),
            by_spec={str(k): int(v) for k, v in compliance.get("by_spec", {}).items()},
            critical_count=int(compliance.get("critical_count", 0)),
            trend=Trend(compliance.get("trend", "stable")),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InputFormatError(f"Report document malformed: {e}", ErrorCode.AG302)

    return GovernanceReport(
        generated_at=int(data.get("generated_at", 0)),
        findings=tuple(findings),
        compliance=score,
        rules_source=str(data.get("rules_source", "built-in")),
    )


def load_previous_report(path: Path) -> GovernanceReport:
    """Read a JSON report written by ``arch-guardian analyze --json``."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise InputFormatError(
            f"Cannot read report {path}: {e}", ErrorCode.AG302, context={"path": str(path)}
        )
    return report_from_dict(data)
