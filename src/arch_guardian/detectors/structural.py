"""Structural-failure detection over modification, test and visual history.

Everything here is a batch computation over the immutable history supplied
with the run; the reference time anchors the monitoring window.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from typing import Iterable, Optional

from ..findings.models import (
    FailureType,
    Finding,
    FindingKind,
    InstabilityPattern,
    RefactoringUrgency,
    StructuralFailureFinding,
)
from ..findings.severity import calculate_severity
from ..governance.paths import path_matches
from ..governance.specs import RuleCategory
from ..history.models import FileHistory, ModificationRecord
from ..logging_config import get_logger
from ..snapshot.models import SourceLocation
from .base import DetectionContext, Detector

logger = get_logger(__name__)

# Checked in this order; the first group with a hit decides the failure type.
FIX_KEYWORDS = frozenset({"fix", "bug"})
TUNE_KEYWORDS = frozenset({"adjust", "tune", "tweak"})
VISUAL_KEYWORDS = frozenset({"visual", "render"})

TUNABLE_NAME_PARTS = ("factor", "multiplier", "offset", "adjustment", "correction", "tweak")
TUNING_WORDS = ("adjust", "tweak")
_BELOW_HIGH = (RefactoringUrgency.MEDIUM, RefactoringUrgency.LOW)
ALL_COMPONENTS = "all components"


def classify_failure_type(descriptions: Iterable[str]) -> FailureType:
    text = " ".join(d.lower() for d in descriptions)
    if any(kw in text for kw in FIX_KEYWORDS):
        return FailureType.REPEATED_MODIFICATIONS
    if any(kw in text for kw in TUNE_KEYWORDS):
        return FailureType.PARAMETER_TUNING
    if any(kw in text for kw in VISUAL_KEYWORDS):
        return FailureType.VISUAL_INSTABILITY
    return FailureType.ARCHITECTURE_DRIFT


def urgency_for(count: int) -> RefactoringUrgency:
    if count >= 10:
        return RefactoringUrgency.IMMEDIATE
    if count >= 7:
        return RefactoringUrgency.HIGH
    if count >= 5:
        return RefactoringUrgency.MEDIUM
    return RefactoringUrgency.LOW


def is_tunable_name(name: str) -> bool:
    lowered = name.lower()
    return any(part in lowered for part in TUNABLE_NAME_PARTS)


class StructuralFailureDetector(Detector):
    """Three strikes: repeated edits to one area mean it needs redesign.

    Repeated modifications and parameter tuning become findings. Flaky tests
    and visually unstable components are reported separately as
    ``InstabilityPattern`` values through ``detect_instability_patterns``.
    """

    name = "structural_failure"
    category = RuleCategory.STRUCTURAL

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        findings = self.detect_repeated_modifications(context, spec_id, reference)
        findings.extend(self.detect_parameter_tuning(context, spec_id, reference))
        return findings

    @staticmethod
    def window(context: DetectionContext) -> tuple[int, int]:
        end = context.reference_time
        return end - context.thresholds.monitoring_window_seconds, end

    def detect_repeated_modifications(
        self, context: DetectionContext, spec_id: str, reference: str
    ) -> list[Finding]:
        start, end = self.window(context)
        threshold = context.thresholds.modification_threshold
        findings: list[Finding] = []
        for history in sorted(context.history.files, key=lambda h: h.path):
            recent = history.records_within(start, end)
            if len(recent) < threshold:
                continue
            failure_type = classify_failure_type(r.description for r in recent)
            findings.append(
                self._finding(
                    context,
                    spec_id,
                    reference,
                    SourceLocation(history.path),
                    history.path,
                    failure_type,
                    recent,
                    f"{history.path} was modified {len(recent)} times in "
                    f"{context.thresholds.monitoring_window_days} days "
                    f"({failure_type.value}); redesign it instead of patching again",
                )
            )
        return findings

    def detect_parameter_tuning(
        self, context: DetectionContext, spec_id: str, reference: str
    ) -> list[Finding]:
        """Coefficients that keep being nudged by hand.

        Once a coefficient reaches ``parameter_tuning_threshold`` touches the
        finding is at least high urgency.
        """
        min_touches = context.thresholds.tuning_touch_threshold
        chronic = context.thresholds.parameter_tuning_threshold
        findings: list[Finding] = []
        for summary in sorted(context.snapshot.files, key=lambda f: f.path):
            history = self._history_for(context, summary.path)
            if history is None:
                continue
            for var in summary.variables:
                if not is_tunable_name(var.name):
                    continue
                touches = self.tuning_touches(history, var.name)
                if len(touches) < min_touches:
                    continue
                finding = self._finding(
                    context,
                    spec_id,
                    reference,
                    var.location or SourceLocation(summary.path),
                    f"{summary.path}:{var.name}",
                    FailureType.PARAMETER_TUNING,
                    touches,
                    f"Parameter '{var.name}' was tuned {len(touches)} times; "
                    f"derive it from the model instead of adjusting it by hand",
                )
                if len(touches) >= chronic and finding.urgency in _BELOW_HIGH:
                    finding = replace(finding, urgency=RefactoringUrgency.HIGH)
                findings.append(finding)
        return findings

    @staticmethod
    def tuning_touches(history: FileHistory, variable: str) -> list[ModificationRecord]:
        name = variable.lower()
        return [
            r
            for r in history.sorted_records()
            if name in r.description.lower()
            or any(word in r.description.lower() for word in TUNING_WORDS)
        ]

    @staticmethod
    def _history_for(context: DetectionContext, path: str) -> Optional[FileHistory]:
        exact = context.history.for_path(path)
        if exact is not None:
            return exact
        for history in context.history.files:
            if path_matches(history.path, path):
                return history
        return None

    def _finding(
        self,
        context: DetectionContext,
        spec_id: str,
        reference: str,
        location: SourceLocation,
        area: str,
        failure_type: FailureType,
        records: list[ModificationRecord],
        description: str,
    ) -> StructuralFailureFinding:
        return StructuralFailureFinding(
            spec_id=spec_id,
            kind=FindingKind.STRUCTURAL_FAILURE,
            location=location,
            description=description,
            rule_reference=reference,
            severity=calculate_severity(FindingKind.STRUCTURAL_FAILURE),
            detected_at=context.reference_time,
            problem_area=area,
            failure_type=failure_type,
            urgency=urgency_for(len(records)),
            modification_count=len(records),
            history=tuple(records),
        )

    @staticmethod
    def detect_instability_patterns(context: DetectionContext) -> list[InstabilityPattern]:
        """Flaky tests and visually unstable components.

        A test with enough samples is flaky when its pass rate is strictly
        between the low and high bounds (always failing or always passing is
        not flakiness). A component is visually unstable when its stable
        ratio falls below the instability threshold. When no component is
        reported on its own, the same test runs over all samples together.
        """
        t = context.thresholds
        patterns: list[InstabilityPattern] = []

        runs = defaultdict(list)
        for run in context.history.tests:
            runs[run.test_name].append(run)
        for name in sorted(runs):
            group = runs[name]
            if len(group) < t.flaky_min_samples:
                continue
            pass_rate = sum(1 for r in group if r.passed) / len(group)
            if not t.flaky_pass_rate_low < pass_rate < t.flaky_pass_rate_high:
                continue
            stamps = [r.timestamp for r in group]
            patterns.append(
                InstabilityPattern(
                    pattern_type="test_flakiness",
                    subject=name,
                    frequency=1 - pass_rate,
                    sample_count=len(group),
                    affected=tuple(sorted({r.file for r in group if r.file})),
                    first_seen=min(stamps),
                    last_seen=max(stamps),
                )
            )

        samples = defaultdict(list)
        for sample in context.history.visuals:
            samples[sample.component].append(sample)
        for component in sorted(samples):
            group = samples[component]
            if len(group) < t.visual_min_samples:
                continue
            ratio = sum(1 for s in group if s.stable) / len(group)
            if ratio >= t.instability_threshold:
                continue
            stamps = [s.timestamp for s in group]
            patterns.append(
                InstabilityPattern(
                    pattern_type="visual_inconsistency",
                    subject=component,
                    frequency=1 - ratio,
                    sample_count=len(group),
                    affected=("visual-rendering", component),
                    first_seen=min(stamps),
                    last_seen=max(stamps),
                )
            )

        reported = {p.subject for p in patterns if p.pattern_type == "visual_inconsistency"}
        everything = list(context.history.visuals)
        if not reported and len(everything) >= t.visual_min_samples:
            ratio = sum(1 for s in everything if s.stable) / len(everything)
            if ratio < t.instability_threshold:
                stamps = [s.timestamp for s in everything]
                patterns.append(
                    InstabilityPattern(
                        pattern_type="visual_inconsistency",
                        subject=ALL_COMPONENTS,
                        frequency=1 - ratio,
                        sample_count=len(everything),
                        affected=("visual-rendering", *sorted(samples)),
                        first_seen=min(stamps),
                        last_seen=max(stamps),
                    )
                )

        if patterns:
            logger.debug(f"Found {len(patterns)} instability patterns")
        return patterns
