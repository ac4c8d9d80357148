"""Severity calculator: (finding kind, context flags) -> severity level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .models import FindingKind, Severity


@dataclass(frozen=True)
class SeverityContext:
    """Flags the detectors know about a finding when they rank it."""

    is_physics_concept: bool = False
    has_physics_computation: bool = False
    crosses_multiple_layers: bool = False
    is_physics_constant: bool = False


def _when(flag: str, yes: Severity, no: Severity) -> Callable[[SeverityContext], Severity]:
    return lambda ctx: yes if getattr(ctx, flag) else no


_TABLE: dict[FindingKind, Callable[[SeverityContext], Severity]] = {
    FindingKind.STRUCTURAL_FAILURE: lambda ctx: Severity.CRITICAL,
    FindingKind.SSOT_VIOLATION: _when("is_physics_concept", Severity.HIGH, Severity.MEDIUM),
    FindingKind.BOUNDARY_VIOLATION: _when(
        "has_physics_computation", Severity.HIGH, Severity.MEDIUM
    ),
    FindingKind.LAYER_VIOLATION: _when("crosses_multiple_layers", Severity.HIGH, Severity.MEDIUM),
    FindingKind.MAGIC_NUMBER: _when("is_physics_constant", Severity.MEDIUM, Severity.LOW),
    FindingKind.CONSTANTS_POLLUTION: lambda ctx: Severity.MEDIUM,
    FindingKind.PRIORITY_VIOLATION: lambda ctx: Severity.HIGH,
}

# Every kind must have a row; a new kind without one fails at import time.
assert set(_TABLE) == set(FindingKind), "severity table is missing a finding kind"


def calculate_severity(
    kind: Union[FindingKind, str], context: SeverityContext = SeverityContext()
) -> Severity:
    """Map a finding kind and its context to a severity.

    Unrecognized kinds (including unknown strings) rank as LOW.
    """
    if isinstance(kind, str):
        try:
            kind = FindingKind(kind)
        except ValueError:
            return Severity.LOW
    rank = _TABLE.get(kind)
    if rank is None:
        return Severity.LOW
    return rank(context)
