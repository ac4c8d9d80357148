"""Tests for the GovernanceAnalyzer pipeline and compliance scoring."""

import json
import time

import pytest

from arch_guardian.analyzer import (
    GovernanceAnalyzer,
    Trend,
    apply_fix_attempts,
    compute_compliance,
    report_from_dict,
)
from arch_guardian.config import GuardianConfig
from arch_guardian.detectors import Detector
from arch_guardian.exceptions import ErrorCode, InvariantViolationError
from arch_guardian.findings import Finding, FindingKind, Severity
from arch_guardian.governance import RuleCategory
from arch_guardian.refactoring import RefactoringPriority, RefactoringType
from arch_guardian.snapshot import FileSummary, ImportRecord, SourceLocation

from conftest import NOW, build_history, runs_for

EARTH = "src/components/Earth.tsx"


@pytest.fixture
def violating_snapshot(make_snapshot):
    """A renderer that imports the axial-tilt authority directly."""
    site = SourceLocation(EARTH, 1, 1)
    return make_snapshot(
        files=[FileSummary(EARTH, imports=(ImportRecord("../../lib/astronomy/constants/axialTilt", (), site),))]
    )


class LocationlessDetector(Detector):
    name = "locationless"
    category = RuleCategory.SSOT

    def _detect(self, context, spec_id, reference):
        return [Finding(spec_id, FindingKind.SSOT_VIOLATION, None, "nowhere", reference, Severity.LOW)]


class ExplodingDetector(Detector):
    name = "exploding"
    category = RuleCategory.PRIORITY

    def detect(self, context):
        raise RuntimeError("boom")


class FailingDetector(Detector):
    name = "failing"
    category = RuleCategory.PRIORITY

    def _detect(self, context, spec_id, reference):
        raise ValueError("cannot decide")


class SlowDetector(Detector):
    name = "slow"
    category = RuleCategory.PRIORITY

    def detect(self, context):
        time.sleep(1.0)
        return []


class TestComplianceScore:
    def test_no_findings(self):
        score = compute_compliance([], ["Spec-2"])
        assert score.overall == 100
        assert score.by_spec == {"Spec-2": 100}
        assert score.trend == Trend.STABLE

    def test_penalties_and_floor(self):
        findings = [
            Finding("Spec-2", FindingKind.SSOT_VIOLATION, SourceLocation("a.ts"), "d", "r", Severity.CRITICAL)
        ] * 6
        score = compute_compliance(findings, ["Spec-2", "Spec-3"])
        assert score.overall == 0
        assert score.by_spec == {"Spec-2": 0, "Spec-3": 100}
        assert score.critical_count == 6
        assert score.trend == Trend.DEGRADING

    def test_stable_boundary(self):
        findings = [
            Finding("Spec-4", FindingKind.MAGIC_NUMBER, SourceLocation("a.ts"), "d", "r", Severity.HIGH)
        ] * 2
        assert compute_compliance(findings, []).trend == Trend.STABLE
        assert compute_compliance(findings * 2, []).trend == Trend.DEGRADING


class TestAnalyze:
    """End-to-end runs over small snapshots."""

    def test_clean_project(self, clean_snapshot):
        report = GovernanceAnalyzer().analyze(clean_snapshot)

        assert report.findings == ()
        assert report.compliance.overall == 100
        assert report.compliance.trend == Trend.STABLE
        assert set(report.compliance.by_spec.values()) == {100}
        assert "Spec-0" in report.compliance.by_spec
        assert report.recommendations == ()
        assert report.refactoring_plan is None
        assert report.problems == ()
        assert report.generated_at == NOW

    def test_renderer_importing_constants(self, violating_snapshot):
        report = GovernanceAnalyzer().analyze(violating_snapshot)

        by_kind = report.findings_by_category()
        assert len(by_kind["layer-violation"]) == 2
        assert len(by_kind["boundary-violation"]) == 1
        assert report.compliance.overall == 65
        assert report.compliance.critical_count == 1
        assert report.compliance.by_spec["Spec-6"] == 60
        assert report.compliance.by_spec["Spec-3"] == 92
        assert report.compliance.trend == Trend.DEGRADING

        [rec] = report.recommendations
        assert rec.area == EARTH
        assert rec.refactoring_type == RefactoringType.SPLIT_LAYER
        assert rec.priority == RefactoringPriority.CRITICAL
        assert rec.estimated_hours == 20

    def test_output_is_deterministic(self, violating_snapshot):
        analyzer = GovernanceAnalyzer()
        first = analyzer.analyze(violating_snapshot).to_dict()
        second = analyzer.analyze(violating_snapshot).to_dict()
        assert first == second

    def test_single_worker_matches_parallel(self, violating_snapshot):
        parallel = GovernanceAnalyzer().analyze(violating_snapshot).to_dict()
        serial = GovernanceAnalyzer(GuardianConfig(workers=1)).analyze(violating_snapshot).to_dict()
        assert parallel == serial

    def test_enabled_specs_limit_the_run(self, violating_snapshot):
        report = GovernanceAnalyzer(GuardianConfig(enabled_specs=["Spec-3"])).analyze(violating_snapshot)
        assert {f.spec_id for f in report.findings} == {"Spec-3"}
        assert report.compliance.by_spec == {"Spec-3": 92}

    def test_history_feeds_structural_checks(self, empty_snapshot):
        history = build_history(
            {EARTH: ["fix tilt", "fix tilt", "fix tilt"]},
            tests=runs_for("renders earth", 7, 3),
        )
        report = GovernanceAnalyzer().analyze(empty_snapshot, history=history)

        assert [f.kind for f in report.findings] == [FindingKind.STRUCTURAL_FAILURE]
        assert report.refactoring_plan is not None
        assert [p.pattern_type for p in report.instability_patterns] == ["test_flakiness"]
        assert [s.path for s in report.stability] == [EARTH]

    def test_reference_time_fallbacks(self, empty_snapshot):
        history = build_history({EARTH: ["edit"]}, end=NOW + 50)
        assert GovernanceAnalyzer.reference_time(empty_snapshot, history, 7) == 7
        assert GovernanceAnalyzer.reference_time(empty_snapshot, history) == NOW
        undated = type(empty_snapshot)()
        assert GovernanceAnalyzer.reference_time(undated, history) == NOW + 50
        assert GovernanceAnalyzer.reference_time(undated, build_history()) == 0

    def test_unusable_rules_file_is_reported(self, clean_snapshot, tmp_path):
        path = tmp_path / "rules.toml"
        path.write_text("not = [valid")
        report = GovernanceAnalyzer().analyze(clean_snapshot, rules_path=path)
        assert report.rules_source == "built-in"
        assert report.problems and "AG201" in report.problems[0]


class TestFixAttempts:
    """Findings that survive a rerun count as another fix attempt."""

    def test_previous_report_increments(self, violating_snapshot):
        analyzer = GovernanceAnalyzer()
        first = analyzer.analyze(violating_snapshot)
        second = analyzer.analyze(violating_snapshot, previous=first)
        third = analyzer.analyze(violating_snapshot, previous=second)

        assert {f.fix_attempts for f in second.findings} == {1}
        assert {f.fix_attempts for f in third.findings} == {2}

    def test_previous_report_from_json(self, violating_snapshot):
        analyzer = GovernanceAnalyzer()
        first = analyzer.analyze(violating_snapshot)
        previous = report_from_dict(json.loads(json.dumps(first.to_dict())))

        assert len(previous.findings) == len(first.findings)
        second = analyzer.analyze(violating_snapshot, previous=previous)
        assert {f.fix_attempts for f in second.findings} == {1}

    def test_new_findings_start_at_zero(self, violating_snapshot, clean_snapshot):
        previous = GovernanceAnalyzer().analyze(clean_snapshot)
        findings = list(GovernanceAnalyzer().analyze(violating_snapshot).findings)
        assert {f.fix_attempts for f in apply_fix_attempts(findings, previous)} == {0}


class TestDetectorIsolation:
    """Detector failures never abort the analysis."""

    def test_finding_without_location_fails_loudly(self, clean_snapshot):
        analyzer = GovernanceAnalyzer(detectors=[LocationlessDetector()])
        with pytest.raises(InvariantViolationError) as exc_info:
            analyzer.analyze(clean_snapshot)
        assert exc_info.value.code == ErrorCode.AG500
        assert exc_info.value.recoverable is False

    def test_finding_without_location_dropped_in_production(self, clean_snapshot):
        analyzer = GovernanceAnalyzer(GuardianConfig(production=True), detectors=[LocationlessDetector()])
        assert analyzer.analyze(clean_snapshot).findings == ()

    @pytest.mark.parametrize("detector_cls", [ExplodingDetector, FailingDetector])
    def test_failing_detector_contributes_nothing(self, violating_snapshot, detector_cls):
        from arch_guardian.detectors import LayerSeparationValidator

        analyzer = GovernanceAnalyzer(detectors=[detector_cls(), LayerSeparationValidator()])
        report = analyzer.analyze(violating_snapshot)
        assert {f.kind for f in report.findings} == {FindingKind.LAYER_VIOLATION}

    def test_slow_detector_times_out(self, clean_snapshot):
        analyzer = GovernanceAnalyzer(
            GuardianConfig(detector_timeout_seconds=0.05), detectors=[SlowDetector()]
        )
        assert analyzer.analyze(clean_snapshot).findings == ()
