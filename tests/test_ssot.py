"""Tests for the SSOT and constants-purity detectors."""

import pytest

from arch_guardian.detectors import ConstantsPurityDetector, DetectionContext, SsotDetector
from arch_guardian.findings import FindingKind, PollutionType, Severity, SsotViolationType
from arch_guardian.governance import default_registry
from arch_guardian.snapshot import (
    ClassRecord,
    FileSummary,
    FunctionRecord,
    ImportRecord,
    SourceLocation,
    VariableRecord,
)

AUTHORITY = "src/lib/astronomy/constants/axialTilt.ts"
ATTITUDE = "src/lib/physics/attitude.ts"


def tilt_declaration(path, name="AXIAL_TILT", line=1, value="23.44"):
    return VariableRecord(name, SourceLocation(path, line, 7), value, exported=True)


class TestSsotDetector:
    """Duplicate and unauthorized concept definitions."""

    def test_no_findings_when_only_authority_defines(self, make_snapshot):
        snapshot = make_snapshot(
            files=[FileSummary(AUTHORITY, variables=(tilt_declaration(AUTHORITY, "EARTH_AXIAL_TILT"),))]
        )
        assert SsotDetector().detect(DetectionContext(snapshot)) == []

    def test_duplicate_outside_authority(self, make_snapshot):
        snapshot = make_snapshot(
            files=[
                FileSummary(AUTHORITY, variables=(tilt_declaration(AUTHORITY, "EARTH_AXIAL_TILT"),)),
                FileSummary(ATTITUDE, variables=(tilt_declaration(ATTITUDE, line=3),)),
            ]
        )
        findings = SsotDetector().detect(DetectionContext(snapshot))

        by_violation = {f.violation: f for f in findings}
        assert len(findings) == 2
        duplicate = by_violation[SsotViolationType.DUPLICATE_DEFINITION]
        assert duplicate.severity == Severity.HIGH
        assert duplicate.authority_location == SourceLocation(AUTHORITY, 1, 7)
        assert duplicate.location == SourceLocation(ATTITUDE, 3, 7)
        unauthorized = by_violation[SsotViolationType.UNAUTHORIZED_DEFINITION]
        assert unauthorized.severity == Severity.CRITICAL
        assert unauthorized.spec_id == "Spec-2"
        assert unauthorized.concept_name == "earth_axial_tilt"

    def test_reexport_of_imported_name_is_not_a_definition(self, make_snapshot):
        snapshot = make_snapshot(
            files=[
                FileSummary(
                    ATTITUDE,
                    imports=(ImportRecord("../astronomy/constants/axialTilt", ("EARTH_AXIAL_TILT",)),),
                    variables=(tilt_declaration(ATTITUDE, "axialTilt", value="EARTH_AXIAL_TILT"),),
                )
            ]
        )
        assert SsotDetector().detect(DetectionContext(snapshot)) == []

    def test_forbidden_context_is_mentioned(self, make_snapshot):
        path = "src/components/Earth.tsx"
        snapshot = make_snapshot(files=[FileSummary(path, variables=(tilt_declaration(path),))])
        findings = SsotDetector().detect(DetectionContext(snapshot))
        assert len(findings) == 1
        assert findings[0].severity == Severity.CRITICAL
        assert "forbidden context" in findings[0].description

    @pytest.mark.parametrize("concept", default_registry().all_concepts(), ids=lambda c: c.name)
    def test_every_concept_outside_authority_is_critical(self, make_snapshot, concept):
        identifiers = {
            "earth_axial_tilt": "AXIAL_TILT",
            "earth_radius": "EARTH_RADIUS",
            "earth_rotation_period": "ROTATION_PERIOD",
            "j2000_frame": "J2000_EPOCH",
        }
        path = "src/lib/state/misc.ts"
        var = VariableRecord(identifiers[concept.name], SourceLocation(path, 2, 1), "1")
        snapshot = make_snapshot(files=[FileSummary(path, variables=(var,))])

        findings = SsotDetector().detect(DetectionContext(snapshot))

        assert [f.severity for f in findings] == [Severity.CRITICAL]
        assert findings[0].concept_name == concept.name
        assert concept.authority_source in findings[0].description


class TestConstantsPurityDetector:
    """Constants modules hold frozen values only."""

    def test_exported_function_yields_exactly_one_finding(self, make_snapshot):
        source = "export function toRadians(d) { return d * Math.PI / 180; }\n"
        snapshot = make_snapshot(
            files=[
                FileSummary(
                    AUTHORITY,
                    functions=(FunctionRecord("toRadians", ("d",), SourceLocation(AUTHORITY, 1, 1), exported=True),),
                )
            ],
            sources={AUTHORITY: source},
        )
        findings = ConstantsPurityDetector().detect(DetectionContext(snapshot))

        assert len(findings) == 1
        assert findings[0].kind == FindingKind.CONSTANTS_POLLUTION
        assert findings[0].pollution == PollutionType.FUNCTION_DEFINITION
        assert findings[0].pollution.value == "function definition"
        assert findings[0].severity == Severity.MEDIUM

    def test_each_construct_is_one_finding(self, make_snapshot):
        source = "\n".join(
            [
                "export const TILT = 23.44;",
                "if (debug) { console.log(TILT); }",
                "export const TABLE = { earth: 23.44 };",
                "export class Helper {}",
            ]
        )
        snapshot = make_snapshot(
            files=[
                FileSummary(AUTHORITY, classes=(ClassRecord("Helper", SourceLocation(AUTHORITY, 4, 1)),))
            ],
            sources={AUTHORITY: source},
        )
        findings = ConstantsPurityDetector().detect(DetectionContext(snapshot))

        assert sorted(f.pollution.value for f in findings) == [
            "class definition",
            "conditional branch",
            "unfrozen object",
        ]
        assert [f.location.line for f in findings] == [2, 3, 4]

    def test_clean_constants_module(self, make_snapshot):
        source = "export const TILT = 23.44;\nexport const TABLE = { earth: 23.44 } as const;\n"
        snapshot = make_snapshot(files=[FileSummary(AUTHORITY)], sources={AUTHORITY: source})
        assert ConstantsPurityDetector().detect(DetectionContext(snapshot)) == []

    def test_object_frozen_after_declaration(self, make_snapshot):
        path = "src/lib/astronomy/constants/planets.ts"
        source = "export const PLANET_COLORS = {\n  earth: '0x2e6fdb',\n};\nObject.freeze(PLANET_COLORS);\n"
        snapshot = make_snapshot(files=[FileSummary(path)], sources={path: source})
        assert ConstantsPurityDetector().detect(DetectionContext(snapshot)) == []

    def test_constants_named_file_outside_constants_layer(self, make_snapshot):
        path = "src/config/physicsConstants.ts"
        snapshot = make_snapshot(
            files=[FileSummary(path, functions=(FunctionRecord("scale", (), SourceLocation(path, 5, 1)),))]
        )
        findings = ConstantsPurityDetector().detect(DetectionContext(snapshot))
        assert len(findings) == 1

    def test_non_constants_module_is_ignored(self, make_snapshot):
        snapshot = make_snapshot(
            files=[FileSummary(ATTITUDE, functions=(FunctionRecord("attitude", (), SourceLocation(ATTITUDE)),))]
        )
        assert ConstantsPurityDetector().detect(DetectionContext(snapshot)) == []
