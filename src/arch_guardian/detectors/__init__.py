"""One detector strategy per governance rule category."""

from .base import DetectionContext, Detector
from .boundary import BoundaryPurityChecker
from .layers import LayerSeparationValidator, classify_responsibilities
from .magic_numbers import MagicNumberDetector, suggest_authority_source
from .priority import PhysicsPriorityDetector
from .ssot import ConstantsPurityDetector, SsotDetector, is_constants_file
from .structural import StructuralFailureDetector, classify_failure_type, urgency_for
from ..governance.specs import RuleCategory

DETECTORS: dict[RuleCategory, type[Detector]] = {
    RuleCategory.PRIORITY: PhysicsPriorityDetector,
    RuleCategory.SSOT: SsotDetector,
    RuleCategory.CONSTANTS_PURITY: ConstantsPurityDetector,
    RuleCategory.LAYER: LayerSeparationValidator,
    RuleCategory.BOUNDARY: BoundaryPurityChecker,
    RuleCategory.MAGIC_NUMBER: MagicNumberDetector,
    RuleCategory.STRUCTURAL: StructuralFailureDetector,
}

__all__ = [
    "DETECTORS",
    "DetectionContext",
    "Detector",
    "BoundaryPurityChecker",
    "ConstantsPurityDetector",
    "LayerSeparationValidator",
    "MagicNumberDetector",
    "PhysicsPriorityDetector",
    "SsotDetector",
    "StructuralFailureDetector",
    "classify_failure_type",
    "classify_responsibilities",
    "is_constants_file",
    "suggest_authority_source",
    "urgency_for",
]
