"""Hard-coded domain constants and unit/frame clarity of configuration values."""

from __future__ import annotations

import math
import posixpath
from typing import Optional

from ..findings.models import Finding, FindingKind, MagicNumberFinding, MagicNumberIssue, Severity
from ..findings.severity import SeverityContext, calculate_severity
from ..governance.concepts import Concept, ConceptKind, authority_source_for
from ..governance.paths import strip_extension
from ..governance.specs import RuleCategory
from ..snapshot.models import SourceLocation
from .base import DetectionContext, Detector
from .ssot import is_constants_file

KNOWN_VALUES: dict[str, tuple[float, ...]] = {
    "angle": (
        23.44, 90, 180, 270, 360, math.pi, math.pi / 2, math.pi / 4, 2 * math.pi,
        # other planets' axial tilts
        25.19, 177.36, 3.13, 26.73, 97.77, 28.32,
    ),
    "period": (24, 365.25, 687, 11.86, 29.46, 84.01, 164.8),
    "scale": (1000, 10000, 100000, 1000000),
    "physics": (9.81, 6.67430e-11, 299792458),
}

COMMON_NUMBERS = frozenset({0, 1, 2, 3, 4, 5, 10, 100, -1})

_UNIT_NEEDED = (
    "radius", "distance", "size", "mass", "period", "speed", "velocity", "time", "duration",
    "angle", "acceleration",
)
_FRAME_NEEDED = ("position", "coordinate", "vector", "orientation", "rotation")
_UNIT_EXEMPT = ("ratio", "factor", "scale", "opacity", "alpha")


_SUGGESTED_UNITS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("radius", "distance", "size"), "km"),
    (("mass",), "kg"),
    (("period", "time", "duration"), "hours"),
    (("angle",), "degrees"),
    (("speed", "velocity"), "km/s"),
    (("acceleration",), "m/s^2"),
)


def suggest_unit(name: str) -> str:
    lowered = name.lower()
    for words, unit in _SUGGESTED_UNITS:
        if any(word in lowered for word in words):
            return unit
    return ""


def suggest_authority_source(value: float, context: str) -> str:
    """Pick the authoritative file a literal most likely belongs in.

    The identifier context is checked first; the value tables second.
    """
    ctx = context.lower()
    if any(word in ctx for word in ("frame", "reference", "coordinate")):
        return authority_source_for(ConceptKind.REFERENCE_FRAME)
    if "tilt" in ctx or "axis" in ctx:
        return authority_source_for(ConceptKind.ANGLE)
    if "period" in ctx or "rotation" in ctx:
        return authority_source_for(ConceptKind.ROTATION_PERIOD)
    if "radius" in ctx or "mass" in ctx:
        return authority_source_for(ConceptKind.PHYSICAL_PARAMETER)
    if value in KNOWN_VALUES["angle"]:
        return authority_source_for(ConceptKind.ANGLE)
    if value in KNOWN_VALUES["period"]:
        return authority_source_for(ConceptKind.ROTATION_PERIOD)
    return authority_source_for(ConceptKind.PHYSICAL_PARAMETER)


def known_category(value: float, tolerance: float) -> Optional[str]:
    for category, values in KNOWN_VALUES.items():
        if any(abs(value - known) < tolerance for known in values):
            return category
    return None


def is_config_file(path: str) -> bool:
    normalized = path.replace("\\", "/")
    stem = posixpath.basename(strip_extension(normalized)).lower()
    return "/constants/" in normalized or stem.endswith("constants") or stem.endswith("config")


class MagicNumberDetector(Detector):
    """Find literals that duplicate registered concepts or known domain values."""

    name = "magic_numbers"
    category = RuleCategory.MAGIC_NUMBER

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        findings = self.detect_hardcoded_constants(context, spec_id, reference)
        findings.extend(self.check_unit_clarity(context, spec_id, reference))
        return findings

    def _classify(
        self, context: DetectionContext, value: float, identifier: str
    ) -> tuple[Optional[str], Optional[Concept]]:
        tolerance = context.thresholds.magic_number_tolerance
        concept = context.registry.concept_for_value(value, tolerance)
        if concept is None and identifier:
            concept = context.registry.match_concept(identifier)
        category = "concept" if concept is not None else known_category(value, tolerance)
        return category, concept

    def detect_hardcoded_constants(
        self, context: DetectionContext, spec_id: str, reference: str
    ) -> list[Finding]:
        findings: list[Finding] = []
        registry = context.registry
        for path in sorted(context.snapshot.sources):
            if is_config_file(path) or registry.is_authority_file(path):
                continue
            if is_constants_file(path, registry.layer_of(path)):
                continue
            for literal in context.scanner.numeric_literals(context.snapshot.source_lines(path)):
                if literal.value in COMMON_NUMBERS:
                    continue
                category, concept = self._classify(context, literal.value, literal.context)
                if category is None:
                    continue
                physics = concept is not None or category == "physics"
                source = (
                    concept.authority_source
                    if concept is not None
                    else suggest_authority_source(literal.value, literal.context)
                )
                what = f"concept '{concept.name}'" if concept else f"{category} value"
                findings.append(
                    MagicNumberFinding(
                        spec_id=spec_id,
                        kind=FindingKind.MAGIC_NUMBER,
                        location=SourceLocation(path, literal.line, literal.column),
                        description=(
                            f"Hard-coded {what} {literal.text}"
                            + (f" in '{literal.context}'" if literal.context else "")
                            + f"; import it from {source}"
                        ),
                        rule_reference=reference,
                        severity=calculate_severity(
                            FindingKind.MAGIC_NUMBER, SeverityContext(is_physics_constant=physics)
                        ),
                        detected_at=context.reference_time,
                        issue=MagicNumberIssue.HARDCODED_CONSTANT,
                        value=literal.value,
                        category=category,
                        concept_name=concept.name if concept else None,
                        suggested_source=source,
                    )
                )
        return findings

    def check_unit_clarity(
        self, context: DetectionContext, spec_id: str, reference: str
    ) -> list[Finding]:
        """Numeric configuration values must say their unit and frame."""
        findings: list[Finding] = []
        for summary in sorted(context.snapshot.files, key=lambda f: f.path):
            path = summary.path
            if not (
                is_config_file(path) or is_constants_file(path, context.registry.layer_of(path))
            ):
                continue
            lines = context.snapshot.source_lines(path)
            for var in summary.variables:
                value = var.numeric_value
                if value is None:
                    continue
                missing = self._missing_metadata(context, var.name, value, var.location, lines)
                if not missing:
                    continue
                category, concept = self._classify(context, value, var.name)
                if category is None:
                    severity = Severity.LOW
                else:
                    severity = calculate_severity(
                        FindingKind.MAGIC_NUMBER,
                        SeverityContext(is_physics_constant=concept is not None or category == "physics"),
                    )
                findings.append(
                    MagicNumberFinding(
                        spec_id=spec_id,
                        kind=FindingKind.MAGIC_NUMBER,
                        location=var.location or SourceLocation(path),
                        description=(
                            f"Configuration value '{var.name}' = {var.value} has no "
                            f"{' or '.join(missing)} metadata"
                        ),
                        rule_reference=reference,
                        severity=severity,
                        detected_at=context.reference_time,
                        issue=MagicNumberIssue.UNIT_CLARITY,
                        value=value,
                        category=category or "",
                        concept_name=concept.name if concept else None,
                        suggested_source=suggest_unit(var.name) if "unit" in missing else "",
                        missing_metadata=tuple(missing),
                    )
                )
        return findings

    @staticmethod
    def _missing_metadata(
        context: DetectionContext,
        name: str,
        value: float,
        location: Optional[SourceLocation],
        lines: tuple[str, ...],
    ) -> list[str]:
        lowered = name.lower()
        if any(word in lowered for word in _UNIT_EXEMPT) or abs(value) <= 1:
            return []

        text = name
        if location is not None and 0 < location.line <= len(lines):
            text = f"{name} {lines[location.line - 1]}"

        missing: list[str] = []
        if any(word in lowered for word in _UNIT_NEEDED) and not context.scanner.units_in(text):
            missing.append("unit")
        needs_frame = any(word in lowered for word in _FRAME_NEEDED) and "period" not in lowered
        if needs_frame and not context.scanner.frames_in(text):
            missing.append("reference-frame")
        return missing
