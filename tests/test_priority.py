"""Tests for the physics-priority detector."""

import pytest

from arch_guardian.detectors import DetectionContext, PhysicsPriorityDetector
from arch_guardian.findings import FindingKind, Severity
from arch_guardian.snapshot import FileSummary, FunctionRecord, SourceLocation, VariableRecord

EARTH = "src/components/Earth.tsx"


class TestPhysicsPriorityDetector:
    """Names that trade physical correctness for appearance."""

    def test_visual_priority_function(self, make_snapshot):
        fn = FunctionRecord("adjustForDisplay", ("tilt",), SourceLocation(EARTH, 12, 1))
        findings = PhysicsPriorityDetector().detect(
            DetectionContext(make_snapshot(files=[FileSummary(EARTH, functions=(fn,))]))
        )

        assert len(findings) == 1
        assert findings[0].kind == FindingKind.PRIORITY_VIOLATION
        assert findings[0].severity == Severity.HIGH
        assert findings[0].concern == "visual-priority-function"
        assert findings[0].spec_id == "Spec-0"
        assert findings[0].location == SourceLocation(EARTH, 12, 1)

    @pytest.mark.parametrize(
        "name, flagged",
        [
            ("visualAxialTilt", True),
            ("VISUAL_EARTH_RADIUS", True),
            ("visualRotationPeriod", True),
            ("visualScale", False),
            ("visual", False),
            ("tiltOffset", False),
        ],
    )
    def test_visual_override_variables(self, make_snapshot, name, flagged):
        var = VariableRecord(name, SourceLocation(EARTH, 3, 7), "1")
        findings = PhysicsPriorityDetector().detect(
            DetectionContext(make_snapshot(files=[FileSummary(EARTH, variables=(var,))]))
        )
        assert bool(findings) is flagged
        if flagged:
            assert findings[0].concern == "visual-override"
            assert findings[0].construct == name

    def test_plain_code_is_clean(self, clean_snapshot):
        assert PhysicsPriorityDetector().detect(DetectionContext(clean_snapshot)) == []
