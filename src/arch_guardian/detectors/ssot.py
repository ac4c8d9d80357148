"""Single-source-of-truth detection and constants-module purity."""

from __future__ import annotations

import posixpath
from collections import defaultdict

from ..findings.models import (
    ConstantsPollutionFinding,
    Finding,
    FindingKind,
    PollutionType,
    Severity,
    SsotFinding,
    SsotViolationType,
)
from ..findings.severity import SeverityContext, calculate_severity
from ..governance.concepts import Concept
from ..governance.layers import LayerName
from ..governance.paths import strip_extension
from ..governance.specs import RuleCategory
from ..logging_config import get_logger
from ..snapshot.models import SourceLocation, VariableRecord
from .base import DetectionContext, Detector

logger = get_logger(__name__)


class SsotDetector(Detector):
    """Find concepts defined in more than one place or outside their authority.

    Two independent rules:
    - duplicates: when more than one file declares a concept, every
      declaration after the first is reported (severity by concept type);
    - unauthorized definitions: every declaration outside the concept's
      authoritative source is critical, duplicated or not.
    """

    name = "ssot"
    category = RuleCategory.SSOT

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        declarations = self.collect_declarations(context)
        findings: list[Finding] = []
        for concept_name in sorted(declarations):
            concept, sites = declarations[concept_name]
            findings.extend(self._duplicates(context, concept, sites, spec_id, reference))
            findings.extend(self._unauthorized(context, concept, sites, spec_id, reference))
        return findings

    def collect_declarations(
        self, context: DetectionContext
    ) -> dict[str, tuple[Concept, list[SourceLocation]]]:
        """Map concept name to (concept, declaration locations), authority first."""
        found: dict[str, tuple[Concept, list[SourceLocation]]] = {}
        for summary in sorted(context.snapshot.files, key=lambda f: f.path):
            imported = {name for imp in summary.imports for name in imp.names}
            for var in summary.variables:
                if _is_alias(var, imported):
                    continue
                concept = context.registry.match_concept(var.name)
                if concept is None:
                    continue
                location = var.location or SourceLocation(summary.path)
                found.setdefault(concept.name, (concept, []))[1].append(location)

        for concept, sites in found.values():
            sites.sort(key=lambda loc: (not concept.is_authoritative(loc.file), loc))
        return found

    def _duplicates(
        self,
        context: DetectionContext,
        concept: Concept,
        sites: list[SourceLocation],
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        if len({site.file for site in sites}) < 2:
            return []
        first = sites[0]
        severity = calculate_severity(
            FindingKind.SSOT_VIOLATION, SeverityContext(is_physics_concept=concept.physics)
        )
        return [
            SsotFinding(
                spec_id=spec_id,
                kind=FindingKind.SSOT_VIOLATION,
                location=site,
                description=(
                    f"Concept '{concept.name}' ({concept.kind.value}) is defined again; "
                    f"first definition at {first}"
                ),
                rule_reference=reference,
                severity=severity,
                detected_at=context.reference_time,
                concept_name=concept.name,
                violation=SsotViolationType.DUPLICATE_DEFINITION,
                authority_location=first,
                offending_location=site,
            )
            for site in sites[1:]
        ]

    def _unauthorized(
        self,
        context: DetectionContext,
        concept: Concept,
        sites: list[SourceLocation],
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        findings: list[Finding] = []
        for site in sites:
            if concept.is_authoritative(site.file):
                continue
            layer = context.registry.layer_of(site.file)
            forbidden = " in a forbidden context" if layer in concept.forbidden_contexts else ""
            findings.append(
                SsotFinding(
                    spec_id=spec_id,
                    kind=FindingKind.SSOT_VIOLATION,
                    location=site,
                    description=(
                        f"Concept '{concept.name}' defined outside its authoritative source"
                        f"{forbidden} ({layer.value}); import it from {concept.authority_source}"
                    ),
                    rule_reference=reference,
                    severity=Severity.CRITICAL,
                    detected_at=context.reference_time,
                    concept_name=concept.name,
                    violation=SsotViolationType.UNAUTHORIZED_DEFINITION,
                    offending_location=site,
                )
            )
        return findings


def _is_alias(var: VariableRecord, imported: set[str]) -> bool:
    """A declaration that only re-binds an imported name is usage, not definition."""
    return var.value is not None and var.value.strip() in imported


def is_constants_file(path: str, layer: LayerName) -> bool:
    if layer == LayerName.CONSTANTS:
        return True
    stem = posixpath.basename(strip_extension(path.replace("\\", "/")))
    return stem.lower().endswith("constants")


class ConstantsPurityDetector(Detector):
    """Constants modules may only declare frozen values.

    Each function, class, conditional branch or mutable exported container
    is one constants-pollution finding.
    """

    name = "constants_purity"
    category = RuleCategory.CONSTANTS_PURITY

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        findings: list[Finding] = []
        severity = calculate_severity(FindingKind.CONSTANTS_POLLUTION)
        for path in context.snapshot.all_paths():
            if not is_constants_file(path, context.registry.layer_of(path)):
                continue
            for pollution, construct, location in self.constructs(context, path):
                findings.append(
                    ConstantsPollutionFinding(
                        spec_id=spec_id,
                        kind=FindingKind.CONSTANTS_POLLUTION,
                        location=location,
                        description=f"Constants module contains a {pollution.value}: {construct}",
                        rule_reference=reference,
                        severity=severity,
                        detected_at=context.reference_time,
                        pollution=pollution,
                        construct=construct,
                    )
                )
        return findings

    @staticmethod
    def constructs(
        context: DetectionContext, path: str
    ) -> list[tuple[PollutionType, str, SourceLocation]]:
        found: list[tuple[PollutionType, str, SourceLocation]] = []
        summary = context.snapshot.file(path)
        if summary is not None:
            for fn in summary.functions:
                found.append(
                    (PollutionType.FUNCTION_DEFINITION, fn.name, fn.location or SourceLocation(path))
                )
            for cls in summary.classes:
                found.append(
                    (PollutionType.CLASS_DEFINITION, cls.name, cls.location or SourceLocation(path))
                )

        lines = context.snapshot.source_lines(path)
        for hit in context.scanner.conditional_branches(lines):
            found.append(
                (
                    PollutionType.CONDITIONAL_BRANCH,
                    f"{hit.keyword} statement",
                    SourceLocation(path, hit.line, hit.column),
                )
            )
        for export in context.scanner.container_exports(lines):
            if not export.frozen:
                found.append(
                    (
                        PollutionType.UNFROZEN_OBJECT,
                        export.name,
                        SourceLocation(path, export.line, export.column),
                    )
                )
        if found:
            logger.debug(f"{path}: {len(found)} constants-purity constructs")
        return found
