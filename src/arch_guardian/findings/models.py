"""Finding taxonomy produced by the governance detectors.

Every finding is created by exactly one detector and is immutable. The only
later change is the orchestrator's fix-attempt bookkeeping, which produces
a copy through ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Optional

from ..governance.layers import LayerName
from ..history.models import ModificationRecord
from ..snapshot.models import SourceLocation


class FindingKind(Enum):
    """Closed set of finding kinds."""

    SSOT_VIOLATION = "ssot-violation"
    LAYER_VIOLATION = "layer-violation"
    BOUNDARY_VIOLATION = "boundary-violation"
    MAGIC_NUMBER = "magic-number"
    STRUCTURAL_FAILURE = "structural-failure"
    CONSTANTS_POLLUTION = "constants-pollution"
    PRIORITY_VIOLATION = "priority-violation"


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        """Sort weight, most severe first."""
        return _SEVERITY_WEIGHT[self]


_SEVERITY_WEIGHT = {
    Severity.CRITICAL: 1,
    Severity.HIGH: 2,
    Severity.MEDIUM: 3,
    Severity.LOW: 4,
}


class SsotViolationType(Enum):
    DUPLICATE_DEFINITION = "duplicate-definition"
    UNAUTHORIZED_DEFINITION = "unauthorized-definition"


class LayerViolationType(Enum):
    CROSS_LAYER_IMPORT = "cross-layer-import"
    WRONG_DIRECTION = "wrong-direction"
    MIXED_RESPONSIBILITY = "mixed-responsibility"
    FORBIDDEN_IMPORT = "forbidden-import"


class BoundaryViolationType(Enum):
    INVALID_INPUT = "invalid-input"
    PHYSICS_KNOWLEDGE = "physics-knowledge"
    FORBIDDEN_IMPORT = "forbidden-import"
    COMPUTATION_LOGIC = "computation-logic"


class PollutionType(Enum):
    FUNCTION_DEFINITION = "function definition"
    CLASS_DEFINITION = "class definition"
    CONDITIONAL_BRANCH = "conditional branch"
    UNFROZEN_OBJECT = "unfrozen object"


class MagicNumberIssue(Enum):
    HARDCODED_CONSTANT = "hardcoded-constant"
    UNIT_CLARITY = "unit-clarity"


class FailureType(Enum):
    REPEATED_MODIFICATIONS = "repeated-modifications"
    PARAMETER_TUNING = "parameter-tuning"
    VISUAL_INSTABILITY = "visual-instability"
    ARCHITECTURE_DRIFT = "architecture-drift"


class RefactoringUrgency(Enum):
    IMMEDIATE = "immediate"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _plain(value: Any) -> Any:
    """Convert finding field values to JSON-ready primitives."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, SourceLocation):
        return {"file": value.file, "line": value.line, "column": value.column}
    if isinstance(value, ModificationRecord):
        return {
            "timestamp": value.timestamp,
            "description": value.description,
            "author": value.author,
            "change_kind": value.change_kind,
        }
    if isinstance(value, (tuple, list)):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class Finding:
    """One detected violation of a governance rule."""

    spec_id: str
    kind: FindingKind
    location: Optional[SourceLocation]
    description: str
    rule_reference: str
    severity: Severity
    detected_at: int = 0
    fix_attempts: int = 0

    @property
    def file(self) -> str:
        return self.location.file if self.location else ""

    def sort_key(self) -> tuple:
        loc = self.location
        return (
            loc.file if loc else "",
            loc.line if loc else 0,
            loc.column if loc else 0,
            self.kind.value,
            self.spec_id,
            self.description,
        )

    def identity(self) -> tuple:
        """Key that survives re-runs; used for fix-attempt bookkeeping."""
        return (self.spec_id, self.kind.value) + self.sort_key()[:3] + (self.description,)

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
        data["variant"] = type(self).__name__
        return data


@dataclass(frozen=True)
class SsotFinding(Finding):
    concept_name: str = ""
    violation: SsotViolationType = SsotViolationType.DUPLICATE_DEFINITION
    authority_location: Optional[SourceLocation] = None
    offending_location: Optional[SourceLocation] = None


@dataclass(frozen=True)
class ConstantsPollutionFinding(Finding):
    pollution: PollutionType = PollutionType.FUNCTION_DEFINITION
    construct: str = ""


@dataclass(frozen=True)
class LayerFinding(Finding):
    violation: LayerViolationType = LayerViolationType.CROSS_LAYER_IMPORT
    source_layer: Optional[LayerName] = None
    target_layer: Optional[LayerName] = None
    import_path: str = ""
    unmatched_responsibilities: tuple[str, ...] = ()


@dataclass(frozen=True)
class BoundaryFinding(Finding):
    violation: BoundaryViolationType = BoundaryViolationType.PHYSICS_KNOWLEDGE
    offending: tuple[str, ...] = ()
    suggested_fix: str = ""


@dataclass(frozen=True)
class MagicNumberFinding(Finding):
    issue: MagicNumberIssue = MagicNumberIssue.HARDCODED_CONSTANT
    value: Optional[float] = None
    category: str = ""
    concept_name: Optional[str] = None
    suggested_source: str = ""
    missing_metadata: tuple[str, ...] = ()


@dataclass(frozen=True)
class StructuralFailureFinding(Finding):
    problem_area: str = ""
    failure_type: FailureType = FailureType.ARCHITECTURE_DRIFT
    urgency: RefactoringUrgency = RefactoringUrgency.LOW
    modification_count: int = 0
    history: tuple[ModificationRecord, ...] = ()


@dataclass(frozen=True)
class PriorityFinding(Finding):
    construct: str = ""
    concern: str = ""


@dataclass(frozen=True)
class InstabilityPattern:
    """A flaky test or visually unstable component observed in history."""

    pattern_type: str  # "test_flakiness" | "visual_inconsistency"
    subject: str
    frequency: float
    sample_count: int
    affected: tuple[str, ...] = ()
    first_seen: int = 0
    last_seen: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
