"""Tests for the text scanner heuristics."""

from arch_guardian.text_scanner import TextScanner, code_only


class TestCodeOnly:
    """String and comment blanking."""

    def test_blanks_strings_and_comments_keeping_columns(self):
        line = 'const a = "23.44"; // tilt 23.44'
        cleaned = code_only(line)
        assert len(cleaned) == len(line)
        assert "23.44" not in cleaned
        assert cleaned.startswith("const a = ")


class TestKeywords:
    """Whole-word keyword search."""

    def test_keywords_are_whole_words_and_case_insensitive(self):
        scanner = TextScanner()
        assert scanner.keywords_in("const Radius = r;", ["radius", "mass"]) == ["radius"]
        assert scanner.keywords_in("const massive = 1;", ["mass"]) == []

    def test_scan_keywords_reports_positions_in_order(self):
        scanner = TextScanner()
        hits = scanner.scan_keywords(["let a = 1;", "  use(period, radius)"], ["radius", "period"])
        assert [(h.line, h.column, h.keyword) for h in hits] == [
            (2, 7, "period"),
            (2, 15, "radius"),
        ]

    def test_matching_patterns(self):
        scanner = TextScanner()
        matched = scanner.matching_patterns("../../lib/astronomy/constants/axialTilt", [
            r"lib/astronomy",
            r"constants/axialTilt",
            r"kepler",
        ])
        assert matched == [r"lib/astronomy", r"constants/axialTilt"]


class TestNumericLiterals:
    """Number extraction with identifier context."""

    def test_literal_with_assignment_context(self):
        scanner = TextScanner()
        literals = scanner.numeric_literals(["const tilt = 23.44;"])
        assert len(literals) == 1
        lit = literals[0]
        assert lit.value == 23.44
        assert lit.text == "23.44"
        assert lit.line == 1
        assert lit.column == 14
        assert lit.context == "tilt"

    def test_skips_strings_comments_and_imports(self):
        scanner = TextScanner()
        lines = [
            'import { x } from "./v2";',
            'const label = "365.25 days";',
            "// 23.44 degrees",
        ]
        assert scanner.numeric_literals(lines) == []

    def test_numbers_inside_identifiers_are_ignored(self):
        scanner = TextScanner()
        assert scanner.numeric_literals(["const vec3 = mesh2.position;"]) == []


class TestStructureHeuristics:
    """Conditionals and exported containers."""

    def test_conditional_branches(self):
        scanner = TextScanner()
        hits = scanner.conditional_branches(["if (x) {", "  // if (y)", "while (z) {}"])
        assert [(h.line, h.keyword) for h in hits] == [(1, "if"), (3, "while")]

    def test_container_exports_frozen_and_unfrozen(self):
        scanner = TextScanner()
        lines = [
            "export const PARAMS = {",
            "  radius: 6371,",
            "} as const;",
            "export const MUTABLE = { a: 1 };",
            "export const LIST = Object.freeze([1, 2]);",
        ]
        exports = {e.name: e.frozen for e in scanner.container_exports(lines)}
        assert exports == {"PARAMS": True, "MUTABLE": False}

    def test_frozen_array_export(self):
        scanner = TextScanner()
        exports = scanner.container_exports(["export const TILTS = [23.44, 25.19] as const;"])
        assert len(exports) == 1
        assert exports[0].frozen

    def test_freeze_call_on_later_line(self):
        scanner = TextScanner()
        lines = [
            "export const PLANET_COLORS = {",
            "  earth: 'blue',",
            "};",
            "export const SIZES = [1, 2];",
            "Object.freeze(PLANET_COLORS);",
            "// Object.freeze(SIZES);",
        ]
        exports = {e.name: e.frozen for e in scanner.container_exports(lines)}
        assert exports == {"PLANET_COLORS": True, "SIZES": False}


class TestMetadata:
    """Unit and reference-frame detection."""

    def test_units_in_comment(self):
        scanner = TextScanner()
        assert scanner.units_in("EARTH_RADIUS = 6371; // km")
        assert scanner.units_in("period: 23.93 // hours")

    def test_unit_folded_into_identifier(self):
        scanner = TextScanner()
        assert "identifier-suffix" in scanner.units_in("EARTH_RADIUS_KM")
        assert "identifier-suffix" in scanner.units_in("radiusKm")

    def test_no_unit(self):
        scanner = TextScanner()
        assert scanner.units_in("EARTH_RADIUS = 6371;") == []

    def test_unit_patterns_are_case_sensitive(self):
        scanner = TextScanner()
        assert scanner.units_in("SUN_DISTANCE = 1500; // Type M star") == []
        assert scanner.units_in("SUN_DISTANCE = 1500; // m") == [r"\bm\b"]
        assert scanner.frames_in("ECLIPTIC_POSITION") == []

    def test_frames(self):
        scanner = TextScanner()
        assert scanner.frames_in("position in J2000 ecliptic") == ["J2000", "ecliptic"]
        assert scanner.frames_in("position = [1, 2, 3]") == []
