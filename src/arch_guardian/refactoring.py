"""Refactoring recommendations, stability scores and refactoring plans.

Recommendations group the findings of one run by the file they point at.
The stability score and the plan only read history-derived data; none of
this module edits code.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from .config import DEFAULT_THRESHOLDS, ThresholdConfig
from .findings.models import (
    FailureType,
    Finding,
    FindingKind,
    Severity,
    StructuralFailureFinding,
)
from .history.models import ProjectHistory, StabilityMetrics
from .logging_config import get_logger

logger = get_logger(__name__)


class RefactoringType(Enum):
    MOVE_TO_AUTHORITY = "move-to-authority"
    SPLIT_LAYER = "split-layer"
    PURIFY_BOUNDARY_LAYER = "purify-boundary-layer"
    EXTRACT_CONSTANT = "extract-constant"
    ELIMINATE_DUPLICATION = "eliminate-duplication"


class RefactoringPriority(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {"critical": 1, "high": 2, "medium": 3, "low": 4}[self.value]


# Hours per finding, summed for a recommendation's estimate.
EFFORT_HOURS: dict[FindingKind, int] = {
    FindingKind.SSOT_VIOLATION: 4,
    FindingKind.LAYER_VIOLATION: 6,
    FindingKind.BOUNDARY_VIOLATION: 8,
    FindingKind.MAGIC_NUMBER: 2,
    FindingKind.STRUCTURAL_FAILURE: 12,
    FindingKind.CONSTANTS_POLLUTION: 3,
    FindingKind.PRIORITY_VIOLATION: 10,
}
DEFAULT_EFFORT_HOURS = 4

# Dominant-kind ties resolve in this order.
_TYPE_BY_KIND: tuple[tuple[FindingKind, RefactoringType], ...] = (
    (FindingKind.SSOT_VIOLATION, RefactoringType.MOVE_TO_AUTHORITY),
    (FindingKind.LAYER_VIOLATION, RefactoringType.SPLIT_LAYER),
    (FindingKind.BOUNDARY_VIOLATION, RefactoringType.PURIFY_BOUNDARY_LAYER),
    (FindingKind.MAGIC_NUMBER, RefactoringType.EXTRACT_CONSTANT),
)

BENEFITS: dict[FindingKind, str] = {
    FindingKind.SSOT_VIOLATION: "One authoritative definition per concept",
    FindingKind.LAYER_VIOLATION: "Layers depend only on what they declare",
    FindingKind.BOUNDARY_VIOLATION: "Renderers stay free of domain logic",
    FindingKind.MAGIC_NUMBER: "Domain values carry names, units and frames",
    FindingKind.STRUCTURAL_FAILURE: "Stops the repeated-fix cycle",
    FindingKind.CONSTANTS_POLLUTION: "Constants modules hold only frozen values",
    FindingKind.PRIORITY_VIOLATION: "Physical correctness is preserved on screen",
}


@dataclass(frozen=True)
class RefactoringRecommendation:
    """Suggested refactoring for one affected area."""

    area: str
    refactoring_type: RefactoringType
    priority: RefactoringPriority
    description: str
    finding_count: int
    estimated_hours: int
    benefits: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "area": self.area,
            "refactoring_type": self.refactoring_type.value,
            "priority": self.priority.value,
            "description": self.description,
            "finding_count": self.finding_count,
            "estimated_hours": self.estimated_hours,
            "benefits": list(self.benefits),
        }


def _priority(findings: list[Finding]) -> RefactoringPriority:
    severities = {f.severity for f in findings}
    if Severity.CRITICAL in severities:
        return RefactoringPriority.CRITICAL
    if Severity.HIGH in severities:
        return RefactoringPriority.HIGH
    if len(findings) >= 2:
        return RefactoringPriority.MEDIUM
    return RefactoringPriority.LOW


def _refactoring_type(findings: list[Finding]) -> RefactoringType:
    """First kind present in ``_TYPE_BY_KIND`` order wins, regardless of counts."""
    kinds = {f.kind for f in findings}
    for kind, refactoring in _TYPE_BY_KIND:
        if kind in kinds:
            return refactoring
    return RefactoringType.ELIMINATE_DUPLICATION


def recommend_refactorings(findings: Iterable[Finding]) -> list[RefactoringRecommendation]:
    """Group findings by file and recommend one refactoring per file.

    Sorted most urgent first, then by area.
    """
    by_area: dict[str, list[Finding]] = defaultdict(list)
    for finding in findings:
        by_area[finding.file].append(finding)

    recommendations = []
    for area, group in by_area.items():
        refactoring = _refactoring_type(group)
        kinds = sorted({f.kind for f in group}, key=lambda k: k.value)
        recommendations.append(
            RefactoringRecommendation(
                area=area,
                refactoring_type=refactoring,
                priority=_priority(group),
                description=(
                    f"{refactoring.value} in {area or 'project'}: "
                    f"{len(group)} finding(s) ({', '.join(k.value for k in kinds)})"
                ),
                finding_count=len(group),
                estimated_hours=sum(EFFORT_HOURS.get(f.kind, DEFAULT_EFFORT_HOURS) for f in group),
                benefits=tuple(BENEFITS[k] for k in kinds if k in BENEFITS),
            )
        )
    recommendations.sort(key=lambda r: (r.priority.weight, r.area))
    return recommendations


# -- stability --------------------------------------------------------------


def stability_score(metrics: StabilityMetrics) -> float:
    """Weighted stability in [0, 1]; ten or more changes in the window zero the churn term."""
    churn = 1 - min(1.0, metrics.modification_frequency / 10)
    return 0.3 * churn + 0.4 * metrics.test_stability + 0.3 * metrics.visual_stability


def classify_stability(score: float, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> str:
    if score < thresholds.urgent_stability:
        return "urgent"
    if score < thresholds.recommended_stability:
        return "recommended"
    return "stable"


@dataclass(frozen=True)
class StabilityAssessment:
    path: str
    score: float
    classification: str
    metrics: StabilityMetrics

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "score": round(self.score, 4),
            "classification": self.classification,
            "modification_frequency": self.metrics.modification_frequency,
            "average_change_interval": self.metrics.average_change_interval,
            "test_stability": self.metrics.test_stability,
            "visual_stability": self.metrics.visual_stability,
        }


def assess_stability(
    history: ProjectHistory,
    reference_time: int,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> list[StabilityAssessment]:
    """Score every file with history, least stable first."""
    assessments = []
    for file_history in history.files:
        metrics = file_history.metrics(
            reference_time,
            thresholds.monitoring_window_seconds,
            history.tests,
            history.visuals,
        )
        score = stability_score(metrics)
        assessments.append(
            StabilityAssessment(
                path=file_history.path,
                score=score,
                classification=classify_stability(score, thresholds),
                metrics=metrics,
            )
        )
    assessments.sort(key=lambda a: (a.score, a.path))
    return assessments


# -- refactoring plan -------------------------------------------------------


class EffortComplexity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"


class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskCategory(Enum):
    FUNCTIONAL = "functional"
    ARCHITECTURAL = "architectural"
    PERFORMANCE = "performance"
    TIMELINE = "timeline"


_FAILURE_SURCHARGE: dict[FailureType, int] = {
    FailureType.REPEATED_MODIFICATIONS: 8,
    FailureType.VISUAL_INSTABILITY: 12,
    FailureType.PARAMETER_TUNING: 6,
    FailureType.ARCHITECTURE_DRIFT: 16,
}

_MITIGATION_STRATEGY = {
    RiskCategory.FUNCTIONAL: "Comprehensive testing before and after refactoring",
    RiskCategory.ARCHITECTURAL: "Incremental refactoring with frequent validation",
    RiskCategory.PERFORMANCE: "Performance benchmarking at each step",
    RiskCategory.TIMELINE: "Break down into smaller, manageable chunks",
}
_MITIGATION_EFFECTIVENESS = {
    RiskCategory.FUNCTIONAL: 0.8,
    RiskCategory.ARCHITECTURAL: 0.7,
    RiskCategory.PERFORMANCE: 0.6,
    RiskCategory.TIMELINE: 0.5,
}
_MITIGATION_HOURS = {RiskLevel.CRITICAL: 8, RiskLevel.HIGH: 4, RiskLevel.MEDIUM: 2}

FREEZE_MODIFICATIONS = 5


@dataclass(frozen=True)
class RefactoringStep:
    order: int
    description: str
    refactoring_type: RefactoringType
    affected_files: tuple[str, ...]
    estimated_hours: int
    dependencies: tuple[int, ...] = ()


@dataclass(frozen=True)
class Risk:
    description: str
    probability: float
    impact: RiskLevel
    category: RiskCategory


@dataclass(frozen=True)
class Mitigation:
    risk_id: str
    strategy: str
    effort_hours: int
    effectiveness: float


@dataclass(frozen=True)
class RefactoringPlan:
    """Plan for repairing a set of structural failures."""

    freeze_recommendation: bool
    steps: tuple[RefactoringStep, ...]
    total_hours: int
    complexity: EffortComplexity
    risk_level: RiskLevel
    risks: tuple[Risk, ...]
    mitigations: tuple[Mitigation, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "freeze_recommendation": self.freeze_recommendation,
            "total_hours": self.total_hours,
            "complexity": self.complexity.value,
            "risk_level": self.risk_level.value,
            "steps": [
                {
                    "order": s.order,
                    "description": s.description,
                    "refactoring_type": s.refactoring_type.value,
                    "affected_files": list(s.affected_files),
                    "estimated_hours": s.estimated_hours,
                    "dependencies": list(s.dependencies),
                }
                for s in self.steps
            ],
            "risks": [
                {
                    "description": r.description,
                    "probability": r.probability,
                    "impact": r.impact.value,
                    "category": r.category.value,
                }
                for r in self.risks
            ],
            "mitigations": [
                {
                    "risk_id": m.risk_id,
                    "strategy": m.strategy,
                    "effort_hours": m.effort_hours,
                    "effectiveness": m.effectiveness,
                }
                for m in self.mitigations
            ],
        }


def estimate_effort(failure: StructuralFailureFinding) -> int:
    return failure.modification_count * 2 + _FAILURE_SURCHARGE.get(failure.failure_type, 0)


def effort_complexity(total_hours: int) -> EffortComplexity:
    if total_hours <= 8:
        return EffortComplexity.LOW
    if total_hours <= 24:
        return EffortComplexity.MEDIUM
    if total_hours <= 80:
        return EffortComplexity.HIGH
    return EffortComplexity.VERY_HIGH


def overall_risk(risks: Iterable[Risk]) -> RiskLevel:
    impacts = {r.impact for r in risks}
    for level in (RiskLevel.CRITICAL, RiskLevel.HIGH, RiskLevel.MEDIUM):
        if level in impacts:
            return level
    return RiskLevel.LOW


def _steps_for(failure: StructuralFailureFinding, first: int) -> list[RefactoringStep]:
    files = (failure.file,)
    area = failure.problem_area or failure.file
    return [
        RefactoringStep(
            first, f"Analyze structural failure in {area}", RefactoringType.EXTRACT_CONSTANT, files, 2
        ),
        RefactoringStep(
            first + 1,
            f"Create proper abstraction for {area}",
            RefactoringType.SPLIT_LAYER,
            files,
            8,
            (first,),
        ),
        RefactoringStep(
            first + 2,
            "Migrate existing code to new abstraction",
            RefactoringType.MOVE_TO_AUTHORITY,
            files,
            4,
            (first + 1,),
        ),
    ]


def _risks_for(failure: StructuralFailureFinding) -> list[Risk]:
    area = failure.problem_area or failure.file
    risks = [
        Risk(
            f"Refactoring {area} may break existing functionality",
            0.3,
            RiskLevel.HIGH,
            RiskCategory.FUNCTIONAL,
        )
    ]
    if failure.modification_count >= FREEZE_MODIFICATIONS:
        risks.append(
            Risk(
                "High modification count indicates deep structural issues",
                0.7,
                RiskLevel.CRITICAL,
                RiskCategory.ARCHITECTURAL,
            )
        )
    return risks


def plan_refactoring(failures: Iterable[StructuralFailureFinding]) -> RefactoringPlan:
    """Three ordered steps per failure, with effort, risks and mitigations.

    A freeze on further edits is recommended once any failing area has been
    modified five or more times.
    """
    failures = list(failures)
    steps: list[RefactoringStep] = []
    risks: list[Risk] = []
    total = 0
    for failure in failures:
        steps.extend(_steps_for(failure, len(steps) + 1))
        total += estimate_effort(failure)
        risks.extend(_risks_for(failure))

    mitigations = tuple(
        Mitigation(
            risk_id=str(index),
            strategy=_MITIGATION_STRATEGY.get(risk.category, "Regular review and validation"),
            effort_hours=_MITIGATION_HOURS.get(risk.impact, 1),
            effectiveness=_MITIGATION_EFFECTIVENESS.get(risk.category, 0.6),
        )
        for index, risk in enumerate(risks)
    )
    plan = RefactoringPlan(
        freeze_recommendation=any(
            f.modification_count >= FREEZE_MODIFICATIONS for f in failures
        ),
        steps=tuple(steps),
        total_hours=total,
        complexity=effort_complexity(total),
        risk_level=overall_risk(risks),
        risks=tuple(risks),
        mitigations=mitigations,
    )
    logger.debug(
        f"Refactoring plan: {len(steps)} steps, {total}h, {plan.complexity.value} complexity"
    )
    return plan
