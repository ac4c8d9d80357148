"""Layer separation: dependency legality, import deny-lists, single responsibility."""

from __future__ import annotations

import re

from ..findings.models import Finding, FindingKind, LayerFinding, LayerViolationType, Severity
from ..findings.severity import SeverityContext, calculate_severity
from ..governance.layers import LayerName, Responsibility
from ..governance.paths import glob_matches, path_matches
from ..governance.specs import RuleCategory
from ..snapshot.models import ImportRecord, ModuleInfo, SourceLocation
from .base import DetectionContext, Detector

# Identifier fragments that reveal what a module is really doing.
RESPONSIBILITY_MARKERS: dict[Responsibility, tuple[str, ...]] = {
    Responsibility.RENDERING: (
        "render", "mesh", "material", "scene", "camera", "canvas", "shader", "texture", "three",
        "sprite", "draw",
    ),
    Responsibility.PHYSICS: (
        "physics", "force", "velocity", "acceleration", "gravity", "kepler", "orbit", "attitude",
        "torque", "inertia",
    ),
    Responsibility.ASTRONOMY: (
        "astronomy", "ephemeris", "celestial", "sidereal", "julian", "j2000", "ecliptic",
        "equatorial", "obliquity",
    ),
    Responsibility.CONSTANTS: ("constant", "constants"),
    Responsibility.INFRASTRUCTURE: (
        "config", "state", "store", "cache", "logger", "util", "api", "fetch", "storage",
    ),
}

_SCREAMING_CONSTANT = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)+$")


def classify_responsibilities(identifiers: list[str]) -> set[Responsibility]:
    """Responsibilities suggested by exported/imported identifier names."""
    found: set[Responsibility] = set()
    for identifier in identifiers:
        lowered = identifier.lower()
        for responsibility, markers in RESPONSIBILITY_MARKERS.items():
            if any(marker in lowered for marker in markers):
                found.add(responsibility)
        if _SCREAMING_CONSTANT.match(identifier):
            found.add(Responsibility.CONSTANTS)
    return found


class LayerSeparationValidator(Detector):
    """Classify every module into a layer and check what it imports.

    For each import: a disallowed target layer is a cross-layer-import (or
    wrong-direction, when the reverse edge is the allowed one); an import
    matching the importing layer's deny-list is a separate critical finding.
    """

    name = "layer_separation"
    category = RuleCategory.LAYER

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        findings = self.validate_layer_boundaries(context, spec_id, reference)
        findings.extend(self.validate_dependency_graph(context, spec_id, reference))
        findings.extend(
            self.check_single_responsibility(
                context, list(context.snapshot.modules), spec_id, reference
            )
        )
        return findings

    def get_layer(self, context: DetectionContext, path: str) -> LayerName:
        return context.registry.layer_of(path)

    def validate_layer_boundaries(
        self, context: DetectionContext, spec_id: str, reference: str
    ) -> list[Finding]:
        findings: list[Finding] = []
        for path in context.snapshot.all_paths():
            for site in context.snapshot.import_sites(path):
                findings.extend(self._check_import(context, path, site, spec_id, reference))
        return findings

    def _check_import(
        self,
        context: DetectionContext,
        path: str,
        site: ImportRecord,
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        registry = context.registry
        source_layer = self.get_layer(context, path)
        target_layer = self.get_layer(context, site.source)
        definition = registry.get_layer(source_layer)
        if definition is None:
            return []

        location = site.location or SourceLocation(path)
        findings: list[Finding] = []

        if not definition.may_depend_on(target_layer):
            target_def = registry.get_layer(target_layer)
            reversed_ok = target_def is not None and target_def.may_depend_on(source_layer)
            violation = (
                LayerViolationType.WRONG_DIRECTION
                if reversed_ok
                else LayerViolationType.CROSS_LAYER_IMPORT
            )
            severity = calculate_severity(
                FindingKind.LAYER_VIOLATION,
                SeverityContext(
                    crosses_multiple_layers=registry.crosses_multiple_layers(
                        source_layer, target_layer
                    )
                ),
            )
            findings.append(
                LayerFinding(
                    spec_id=spec_id,
                    kind=FindingKind.LAYER_VIOLATION,
                    location=location,
                    description=(
                        f"{source_layer.label} module imports {site.source} "
                        f"from the {target_layer.label} layer ({violation.value})"
                    ),
                    rule_reference=reference,
                    severity=severity,
                    detected_at=context.reference_time,
                    violation=violation,
                    source_layer=source_layer,
                    target_layer=target_layer,
                    import_path=site.source,
                )
            )

        for pattern in definition.forbidden_imports:
            if glob_matches(site.source, pattern):
                findings.append(
                    LayerFinding(
                        spec_id=spec_id,
                        kind=FindingKind.LAYER_VIOLATION,
                        location=location,
                        description=(
                            f"{source_layer.label} module imports {site.source}, "
                            f"which matches the forbidden pattern '{pattern}'"
                        ),
                        rule_reference=reference,
                        severity=Severity.CRITICAL,
                        detected_at=context.reference_time,
                        violation=LayerViolationType.FORBIDDEN_IMPORT,
                        source_layer=source_layer,
                        target_layer=target_layer,
                        import_path=site.source,
                    )
                )
                break

        return findings

    def validate_dependency_graph(
        self, context: DetectionContext, spec_id: str, reference: str
    ) -> list[Finding]:
        """Check graph edges that no module import list already covered."""
        covered: set[tuple[str, str]] = set()
        for path in context.snapshot.all_paths():
            for site in context.snapshot.import_sites(path):
                covered.add((path, site.source))
        for module in context.snapshot.modules:
            for dep in module.dependencies:
                covered.add((module.path, dep))

        findings: list[Finding] = []
        for source, target in sorted(set(context.snapshot.graph.edges)):
            if any(src == source and path_matches(target, imp) for src, imp in covered):
                continue
            site = ImportRecord(target, (), SourceLocation(source))
            findings.extend(self._check_import(context, source, site, spec_id, reference))
        return findings

    def check_single_responsibility(
        self,
        context: DetectionContext,
        modules: list[ModuleInfo],
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        findings: list[Finding] = []
        for module in sorted(modules, key=lambda m: m.path):
            layer = self.get_layer(context, module.path)
            definition = context.registry.get_layer(layer)
            if definition is None or not definition.responsibilities:
                continue
            identifiers = list(module.exports) + [
                name for site in context.snapshot.import_sites(module.path) for name in site.names
            ]
            detected = classify_responsibilities(identifiers)
            unmatched = sorted(r.value for r in detected - definition.responsibilities)
            if not unmatched:
                continue
            findings.append(
                LayerFinding(
                    spec_id=spec_id,
                    kind=FindingKind.LAYER_VIOLATION,
                    location=SourceLocation(module.path),
                    description=(
                        f"{layer.label} module mixes responsibilities outside its boundary: "
                        f"{', '.join(unmatched)}"
                    ),
                    rule_reference=reference,
                    severity=calculate_severity(FindingKind.LAYER_VIOLATION, SeverityContext()),
                    detected_at=context.reference_time,
                    violation=LayerViolationType.MIXED_RESPONSIBILITY,
                    source_layer=layer,
                    unmatched_responsibilities=tuple(unmatched),
                )
            )
        return findings
