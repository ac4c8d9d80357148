"""Tests for the severity calculator."""

import itertools

import pytest

from arch_guardian.findings import FindingKind, Severity, SeverityContext, calculate_severity


def all_contexts():
    for flags in itertools.product([False, True], repeat=4):
        yield SeverityContext(*flags)


class TestSeverityTable:
    """Each finding kind maps to a fixed level for a given context."""

    def test_structural_failure_is_always_critical(self):
        for ctx in all_contexts():
            assert calculate_severity(FindingKind.STRUCTURAL_FAILURE, ctx) == Severity.CRITICAL

    def test_ssot_depends_on_physics_concept(self):
        assert (
            calculate_severity(FindingKind.SSOT_VIOLATION, SeverityContext(is_physics_concept=True))
            == Severity.HIGH
        )
        assert calculate_severity(FindingKind.SSOT_VIOLATION) == Severity.MEDIUM

    def test_boundary_depends_on_physics_computation(self):
        ctx = SeverityContext(has_physics_computation=True)
        assert calculate_severity(FindingKind.BOUNDARY_VIOLATION, ctx) == Severity.HIGH
        assert calculate_severity(FindingKind.BOUNDARY_VIOLATION) == Severity.MEDIUM

    def test_layer_depends_on_layer_distance(self):
        ctx = SeverityContext(crosses_multiple_layers=True)
        assert calculate_severity(FindingKind.LAYER_VIOLATION, ctx) == Severity.HIGH
        assert calculate_severity(FindingKind.LAYER_VIOLATION) == Severity.MEDIUM

    def test_magic_number_depends_on_physics_constant(self):
        ctx = SeverityContext(is_physics_constant=True)
        assert calculate_severity(FindingKind.MAGIC_NUMBER, ctx) == Severity.MEDIUM
        assert calculate_severity(FindingKind.MAGIC_NUMBER) == Severity.LOW

    def test_fixed_levels(self):
        assert calculate_severity(FindingKind.CONSTANTS_POLLUTION) == Severity.MEDIUM
        assert calculate_severity(FindingKind.PRIORITY_VIOLATION) == Severity.HIGH


class TestSeverityProperties:
    """Purity and fallback behaviour."""

    @pytest.mark.parametrize("kind", list(FindingKind))
    def test_result_is_one_of_four_levels_and_pure(self, kind):
        for ctx in all_contexts():
            first = calculate_severity(kind, ctx)
            assert first in set(Severity)
            assert calculate_severity(kind, ctx) == first

    def test_kind_may_be_given_as_string(self):
        ctx = SeverityContext(is_physics_constant=True)
        assert calculate_severity("magic-number", ctx) == Severity.MEDIUM

    def test_unknown_kind_is_low(self):
        assert calculate_severity("not-a-kind") == Severity.LOW
        assert calculate_severity("not-a-kind", SeverityContext(True, True, True, True)) == Severity.LOW

    def test_severity_weights_order_critical_first(self):
        ordered = sorted(Severity, key=lambda s: s.weight)
        assert ordered == [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]
