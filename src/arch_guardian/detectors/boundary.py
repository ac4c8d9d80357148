"""Boundary purity for the presentation layer ("renderer stupidity").

A presentation module should only receive positions, attitudes and visual
parameters. It must not know domain concepts, import computational modules
or compute anything physical itself.
"""

from __future__ import annotations

from ..findings.models import BoundaryFinding, BoundaryViolationType, Finding, FindingKind
from ..findings.severity import SeverityContext, calculate_severity
from ..governance.layers import BoundaryProfile, LayerName
from ..governance.specs import RuleCategory
from ..logging_config import get_logger
from ..snapshot.models import SourceLocation
from .base import DetectionContext, Detector

logger = get_logger(__name__)

_KNOWLEDGE_FIX = "Receive computed position vectors and attitude matrices instead of domain values"
_IMPORT_FIX = "Import computed results through an infrastructure adapter, not the computation module"
_INPUT_FIX = "Accept only position, attitude and visual-parameter inputs"


class BoundaryPurityChecker(Detector):
    """Four independent checks over presentation-layer modules."""

    name = "boundary_purity"
    category = RuleCategory.BOUNDARY

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        profile = context.registry.boundary_profile
        findings: list[Finding] = []
        for path in self.presentation_modules(context):
            findings.extend(self.check_inputs(context, profile, path, spec_id, reference))
            findings.extend(self.check_knowledge(context, profile, path, spec_id, reference))
            findings.extend(self.check_imports(context, profile, path, spec_id, reference))
            findings.extend(self.check_computations(context, profile, path, spec_id, reference))
        return findings

    @staticmethod
    def presentation_modules(context: DetectionContext) -> list[str]:
        return [
            p
            for p in context.snapshot.all_paths()
            if context.registry.layer_of(p) == LayerName.PRESENTATION
        ]

    def _finding(
        self,
        context: DetectionContext,
        spec_id: str,
        reference: str,
        location: SourceLocation,
        violation: BoundaryViolationType,
        description: str,
        offending: tuple[str, ...],
        fix: str,
        computes: bool = False,
    ) -> BoundaryFinding:
        return BoundaryFinding(
            spec_id=spec_id,
            kind=FindingKind.BOUNDARY_VIOLATION,
            location=location,
            description=description,
            rule_reference=reference,
            severity=calculate_severity(
                FindingKind.BOUNDARY_VIOLATION, SeverityContext(has_physics_computation=computes)
            ),
            detected_at=context.reference_time,
            violation=violation,
            offending=offending,
            suggested_fix=fix,
        )

    def check_inputs(
        self,
        context: DetectionContext,
        profile: BoundaryProfile,
        path: str,
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        """Declared inputs must use the visual vocabulary.

        Inputs are function parameters plus names imported from anything other
        than the infrastructure layer (framework and utility imports are not
        data inputs).
        """
        if not profile.allowed_inputs:
            return []
        allowed = [a.lower() for a in profile.allowed_inputs]
        inputs: list[tuple[str, SourceLocation]] = []

        summary = context.snapshot.file(path)
        if summary is not None:
            for fn in summary.functions:
                for param in fn.parameters:
                    inputs.append((param, fn.location or SourceLocation(path)))
        for site in context.snapshot.import_sites(path):
            if context.registry.layer_of(site.source) == LayerName.INFRASTRUCTURE:
                continue
            for name in site.names:
                inputs.append((name, site.location or SourceLocation(path)))

        bad = [(name, loc) for name, loc in inputs if not any(a in name.lower() for a in allowed)]
        if not bad:
            return []
        names = tuple(sorted({name for name, _ in bad}))
        first = min(loc for _, loc in bad)
        return [
            self._finding(
                context,
                spec_id,
                reference,
                first,
                BoundaryViolationType.INVALID_INPUT,
                f"Presentation module accepts non-visual inputs: {', '.join(names)}",
                names,
                _INPUT_FIX,
            )
        ]

    def check_knowledge(
        self,
        context: DetectionContext,
        profile: BoundaryProfile,
        path: str,
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        hits = context.scanner.scan_keywords(
            context.snapshot.source_lines(path), profile.forbidden_concepts
        )
        if not hits:
            return []
        seen = {h.keyword for h in hits}
        keywords = tuple(k for k in dict.fromkeys(profile.forbidden_concepts) if k in seen)
        return [
            self._finding(
                context,
                spec_id,
                reference,
                SourceLocation(path, hits[0].line, hits[0].column),
                BoundaryViolationType.PHYSICS_KNOWLEDGE,
                f"Presentation module references domain concepts: {', '.join(keywords)}",
                keywords,
                _KNOWLEDGE_FIX,
            )
        ]

    def check_imports(
        self,
        context: DetectionContext,
        profile: BoundaryProfile,
        path: str,
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        findings: list[Finding] = []
        for site in context.snapshot.import_sites(path):
            matched = context.scanner.matching_patterns(
                site.source, profile.forbidden_import_patterns
            )
            if not matched:
                continue
            findings.append(
                self._finding(
                    context,
                    spec_id,
                    reference,
                    site.location or SourceLocation(path),
                    BoundaryViolationType.FORBIDDEN_IMPORT,
                    f"Presentation module imports computational module {site.source}",
                    tuple(matched),
                    _IMPORT_FIX,
                )
            )
        return findings

    def check_computations(
        self,
        context: DetectionContext,
        profile: BoundaryProfile,
        path: str,
        spec_id: str,
        reference: str,
    ) -> list[Finding]:
        summary = context.snapshot.file(path)
        if summary is None:
            return []
        findings: list[Finding] = []

        function_fix = profile.remediations.get(
            "function", "Move {name} to the computation layer and pass the result in"
        )
        for fn in summary.functions:
            matched = context.scanner.matching_patterns(fn.name, profile.forbidden_function_patterns)
            if not matched:
                continue
            findings.append(
                self._finding(
                    context,
                    spec_id,
                    reference,
                    fn.location or SourceLocation(path),
                    BoundaryViolationType.COMPUTATION_LOGIC,
                    f"Presentation function '{fn.name}' performs domain computation",
                    (fn.name,),
                    function_fix.format(name=fn.name),
                    computes=True,
                )
            )

        for computation in summary.computations:
            if computation.kind not in profile.forbidden_computation_kinds:
                continue
            label = computation.description or computation.kind
            findings.append(
                self._finding(
                    context,
                    spec_id,
                    reference,
                    computation.location or SourceLocation(path),
                    BoundaryViolationType.COMPUTATION_LOGIC,
                    f"Presentation module performs {computation.kind} computation: {label}",
                    (computation.kind,) + computation.variables,
                    profile.remediations.get(
                        computation.kind, "Move the computation to the physics layer"
                    ),
                    computes=True,
                )
            )
        if findings:
            logger.debug(f"{path}: {len(findings)} computation violations")
        return findings
