"""Tests for the layer separation validator."""

from arch_guardian.detectors import DetectionContext, LayerSeparationValidator, classify_responsibilities
from arch_guardian.findings import LayerViolationType, Severity
from arch_guardian.governance import LayerName, Responsibility
from arch_guardian.snapshot import FileSummary, ImportRecord, ModuleInfo, SourceLocation

EARTH = "src/components/Earth.tsx"


def importing(path, source, line=1, names=()):
    return FileSummary(path, imports=(ImportRecord(source, names, SourceLocation(path, line, 1)),))


def run(snapshot):
    return LayerSeparationValidator().detect(DetectionContext(snapshot))


class TestImportRules:
    """Per-import dependency and deny-list checks."""

    def test_presentation_importing_constants(self, make_snapshot):
        findings = run(make_snapshot(files=[importing(EARTH, "../../lib/astronomy/constants/axialTilt")]))

        by_violation = {f.violation: f for f in findings}
        assert set(by_violation) == {
            LayerViolationType.CROSS_LAYER_IMPORT,
            LayerViolationType.FORBIDDEN_IMPORT,
        }
        cross = by_violation[LayerViolationType.CROSS_LAYER_IMPORT]
        assert cross.source_layer == LayerName.PRESENTATION
        assert cross.target_layer == LayerName.CONSTANTS
        assert cross.severity == Severity.HIGH
        assert cross.location == SourceLocation(EARTH, 1, 1)
        assert by_violation[LayerViolationType.FORBIDDEN_IMPORT].severity == Severity.CRITICAL

    def test_presentation_importing_physics_and_domain(self, make_snapshot):
        for source in ("@/lib/physics/attitude", "@/lib/astronomy/ephemeris"):
            findings = run(make_snapshot(files=[importing(EARTH, source)]))
            violations = {f.violation for f in findings}
            assert LayerViolationType.CROSS_LAYER_IMPORT in violations
            assert LayerViolationType.FORBIDDEN_IMPORT in violations

    def test_presentation_may_use_infrastructure(self, make_snapshot):
        for source in ("@/lib/state/store", "three", "react"):
            assert run(make_snapshot(files=[importing(EARTH, source)])) == []

    def test_reverse_of_allowed_edge_is_wrong_direction(self, make_snapshot):
        path = "src/lib/astronomy/ephemeris.ts"
        findings = run(make_snapshot(files=[importing(path, "@/lib/physics/attitude")]))

        assert len(findings) == 1
        assert findings[0].violation == LayerViolationType.WRONG_DIRECTION
        assert findings[0].severity == Severity.MEDIUM

    def test_constants_layer_may_import_nothing(self, make_snapshot):
        path = "src/lib/astronomy/constants/rotation.ts"
        findings = run(make_snapshot(files=[importing(path, "./axialTilt")]))

        forbidden = [f for f in findings if f.violation == LayerViolationType.FORBIDDEN_IMPORT]
        assert len(forbidden) == 1
        assert "'*'" in forbidden[0].description

    def test_module_import_strings_without_file_summary(self, make_snapshot):
        snapshot = make_snapshot(modules=[ModuleInfo(EARTH, imports=("@/lib/physics/orbit",))])
        findings = run(snapshot)
        assert findings
        assert all(f.location == SourceLocation(EARTH) for f in findings)


class TestDependencyGraph:
    """Graph edges not covered by an import statement."""

    def test_uncovered_edge_is_checked(self, make_snapshot):
        snapshot = make_snapshot(
            modules=[ModuleInfo(EARTH), ModuleInfo("src/lib/physics/attitude.ts")],
            edges=[(EARTH, "src/lib/physics/attitude.ts")],
        )
        findings = run(snapshot)

        assert {f.violation for f in findings} == {
            LayerViolationType.CROSS_LAYER_IMPORT,
            LayerViolationType.FORBIDDEN_IMPORT,
        }
        assert all(f.location == SourceLocation(EARTH) for f in findings)

    def test_edge_covered_by_import_is_not_reported_twice(self, make_snapshot):
        snapshot = make_snapshot(
            files=[importing(EARTH, "@/lib/physics/attitude")],
            edges=[(EARTH, "src/lib/physics/attitude.ts")],
        )
        assert len(run(snapshot)) == 2


class TestSingleResponsibility:
    """Exported and imported names must fit the layer."""

    def test_classify_responsibilities(self):
        found = classify_responsibilities(["renderMesh", "computeOrbit", "EARTH_RADIUS_KM"])
        assert found == {Responsibility.RENDERING, Responsibility.PHYSICS, Responsibility.CONSTANTS}

    def test_physics_module_that_renders(self, make_snapshot):
        path = "src/lib/physics/attitude.ts"
        snapshot = make_snapshot(files=[FileSummary(path, exports=("computeAttitude", "renderMesh"))])
        findings = run(snapshot)

        assert len(findings) == 1
        assert findings[0].violation == LayerViolationType.MIXED_RESPONSIBILITY
        assert findings[0].unmatched_responsibilities == ("rendering",)
        assert findings[0].severity == Severity.MEDIUM

    def test_presentation_module_with_physics_exports(self, make_snapshot):
        snapshot = make_snapshot(files=[FileSummary(EARTH, exports=("EarthMesh", "orbitVelocity"))])
        findings = run(snapshot)
        assert [f.unmatched_responsibilities for f in findings] == [("physics",)]

    def test_focused_module_is_clean(self, clean_snapshot):
        assert run(clean_snapshot) == []
