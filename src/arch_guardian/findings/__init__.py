"""Finding taxonomy and severity calculation."""

from .models import (
    BoundaryFinding,
    BoundaryViolationType,
    ConstantsPollutionFinding,
    FailureType,
    Finding,
    FindingKind,
    InstabilityPattern,
    LayerFinding,
    LayerViolationType,
    MagicNumberFinding,
    MagicNumberIssue,
    PollutionType,
    PriorityFinding,
    RefactoringUrgency,
    Severity,
    SsotFinding,
    SsotViolationType,
    StructuralFailureFinding,
)
from .severity import SeverityContext, calculate_severity

__all__ = [
    "BoundaryFinding",
    "BoundaryViolationType",
    "ConstantsPollutionFinding",
    "FailureType",
    "Finding",
    "FindingKind",
    "InstabilityPattern",
    "LayerFinding",
    "LayerViolationType",
    "MagicNumberFinding",
    "MagicNumberIssue",
    "PollutionType",
    "PriorityFinding",
    "RefactoringUrgency",
    "Severity",
    "SsotFinding",
    "SsotViolationType",
    "StructuralFailureFinding",
    "SeverityContext",
    "calculate_severity",
]
