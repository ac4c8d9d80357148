"""Physics correctness over visual appeal."""

from __future__ import annotations

import re

from ..findings.models import Finding, FindingKind, PriorityFinding
from ..findings.severity import calculate_severity
from ..governance.concepts import is_physics_identifier
from ..governance.specs import RuleCategory
from ..snapshot.models import SourceLocation
from .base import DetectionContext, Detector

VISUAL_PRIORITY_NAMES = (
    "visuallyCorrect",
    "looksBetter",
    "forVisualAccuracy",
    "adjustForDisplay",
    "tweakForAppearance",
)

_VISUAL = re.compile(r"visual", re.IGNORECASE)


class PhysicsPriorityDetector(Detector):
    """Names that announce a value was bent to look right on screen."""

    name = "physics_priority"
    category = RuleCategory.PRIORITY

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        severity = calculate_severity(FindingKind.PRIORITY_VIOLATION)
        findings: list[Finding] = []
        for summary in sorted(context.snapshot.files, key=lambda f: f.path):
            for fn in summary.functions:
                if not any(pattern in fn.name for pattern in VISUAL_PRIORITY_NAMES):
                    continue
                findings.append(
                    PriorityFinding(
                        spec_id=spec_id,
                        kind=FindingKind.PRIORITY_VIOLATION,
                        location=fn.location or SourceLocation(summary.path),
                        description=(
                            f"Function '{fn.name}' suggests visual priority over physics correctness"
                        ),
                        rule_reference=reference,
                        severity=severity,
                        detected_at=context.reference_time,
                        construct=fn.name,
                        concern="visual-priority-function",
                    )
                )
            for var in summary.variables:
                if not self.is_visual_override(context, var.name):
                    continue
                findings.append(
                    PriorityFinding(
                        spec_id=spec_id,
                        kind=FindingKind.PRIORITY_VIOLATION,
                        location=var.location or SourceLocation(summary.path),
                        description=(
                            f"Variable '{var.name}' suggests visual override of a physics concept"
                        ),
                        rule_reference=reference,
                        severity=severity,
                        detected_at=context.reference_time,
                        construct=var.name,
                        concern="visual-override",
                    )
                )
        return findings

    @staticmethod
    def is_visual_override(context: DetectionContext, name: str) -> bool:
        """``visualAxialTilt`` is an override; ``visualScale`` is not."""
        if not _VISUAL.search(name):
            return False
        rest = _VISUAL.sub("", name).strip("_")
        if not rest:
            return False
        return is_physics_identifier(rest) or context.registry.match_concept(rest) is not None
