"""Domain concepts and their single authoritative source."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from .layers import LayerName
from .paths import path_matches


class ConceptKind(Enum):
    """Closed set of concept kinds."""

    ANGLE = "angle"
    PHYSICAL_PARAMETER = "physical-parameter"
    ROTATION_PERIOD = "rotation-period"
    ORBITAL_PERIOD = "orbital-period"
    REFERENCE_FRAME = "reference-frame"
    RADIUS = "radius"
    MASS = "mass"
    GRAVITATIONAL_PARAMETER = "gravitational-parameter"

    @classmethod
    def parse(cls, value: str) -> ConceptKind:
        """Parse a kind name; anything unrecognized is a physical parameter."""
        try:
            return cls(value.strip().lower().replace("_", "-"))
        except ValueError:
            return cls.PHYSICAL_PARAMETER


CONSTANTS_ROOT = "lib/astronomy/constants"

AUTHORITY_FILES: dict[ConceptKind, str] = {
    ConceptKind.ANGLE: f"{CONSTANTS_ROOT}/axialTilt.ts",
    ConceptKind.PHYSICAL_PARAMETER: f"{CONSTANTS_ROOT}/physicalParams.ts",
    ConceptKind.RADIUS: f"{CONSTANTS_ROOT}/physicalParams.ts",
    ConceptKind.MASS: f"{CONSTANTS_ROOT}/physicalParams.ts",
    ConceptKind.GRAVITATIONAL_PARAMETER: f"{CONSTANTS_ROOT}/physicalParams.ts",
    ConceptKind.ROTATION_PERIOD: f"{CONSTANTS_ROOT}/rotation.ts",
    ConceptKind.ORBITAL_PERIOD: f"{CONSTANTS_ROOT}/rotation.ts",
    ConceptKind.REFERENCE_FRAME: f"{CONSTANTS_ROOT}/referenceFrames.ts",
}


def authority_source_for(kind: ConceptKind) -> str:
    """The conventional authoritative file for a kind of concept."""
    return AUTHORITY_FILES[kind]


# Checked in order; first match wins.
_KIND_PATTERNS: tuple[tuple[ConceptKind, tuple[str, ...]], ...] = (
    (ConceptKind.ANGLE, (r"AXIAL.*TILT", r"OBLIQUITY", r"AXIS_?ANGLE", r"TILT_?ANGLE")),
    (ConceptKind.ROTATION_PERIOD, (r"ROTATION.*PERIOD", r"SIDEREAL", r"SPIN_?PERIOD")),
    (ConceptKind.ORBITAL_PERIOD, (r"ORBITAL.*PERIOD", r"YEAR", r"REVOLUTION")),
    (ConceptKind.REFERENCE_FRAME, (r"FRAME", r"J2000", r"ICRF", r"ECLIPTIC")),
    (ConceptKind.GRAVITATIONAL_PARAMETER, (r"(^|_)GM($|_)", r"GRAVITATIONAL_?PARAM")),
    (ConceptKind.RADIUS, (r"RADIUS",)),
    (ConceptKind.MASS, (r"(^|_)MASS",)),
)

_PHYSICS_IDENTIFIER = re.compile(
    r"AXIAL|TILT|OBLIQUITY|PERIOD|SIDEREAL|ORBIT|FRAME|J2000|ICRF|ECLIPTIC|RADIUS|MASS"
    r"|(^|_)GM($|_)|INCLINATION|ECCENTRICITY|SEMI_?MAJOR_?AXIS"
)


def _screaming(identifier: str) -> str:
    """camelCase / kebab / spaced identifiers to SCREAMING_SNAKE."""
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", identifier)
    return re.sub(r"[^A-Za-z0-9]+", "_", snake).upper()


def is_physics_identifier(identifier: str) -> bool:
    return bool(_PHYSICS_IDENTIFIER.search(_screaming(identifier)))


def identify_concept_kind(identifier: str) -> ConceptKind:
    """Classify an identifier by naming convention.

    Unresolvable names fall into the generic physical-parameter bucket.
    """
    name = _screaming(identifier)
    for kind, patterns in _KIND_PATTERNS:
        if any(re.search(p, name) for p in patterns):
            return kind
    return ConceptKind.PHYSICAL_PARAMETER


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class Concept:
    """A named domain quantity with exactly one authoritative source.

    Attributes:
        name: Registry key (e.g. "earth_axial_tilt").
        kind: Concept kind.
        authority_source: Path of the only file allowed to define it.
        naming_patterns: Regexes (case-insensitive) identifying declarations
            of this concept by identifier name.
        allowed_usage: Human-readable usage rules.
        forbidden_contexts: Layers that must not reference it directly.
        unit: Optional unit of measure.
        reference_frame: Optional reference-frame metadata.
        known_values: Reference values the magic-number detector looks for.
        physics: Whether this is a physics concept (drives severity).
    """

    name: str
    kind: ConceptKind
    authority_source: str
    naming_patterns: tuple[str, ...] = ()
    allowed_usage: tuple[str, ...] = ()
    forbidden_contexts: tuple[LayerName, ...] = ()
    unit: str | None = None
    reference_frame: str | None = None
    known_values: tuple[float, ...] = ()
    physics: bool = True

    def matches_identifier(self, identifier: str) -> bool:
        return any(_compiled(p).search(identifier) for p in self.naming_patterns)

    def matches_value(self, value: float, tolerance: float) -> bool:
        return any(abs(value - known) <= tolerance for known in self.known_values)

    def is_authoritative(self, path: str) -> bool:
        return path_matches(path, self.authority_source)


DEFAULT_CONCEPTS: tuple[Concept, ...] = (
    Concept(
        name="earth_axial_tilt",
        kind=ConceptKind.ANGLE,
        authority_source=authority_source_for(ConceptKind.ANGLE),
        naming_patterns=(r"axial.?tilt", r"obliquity", r"axis.?angle", r"tilt.?angle"),
        allowed_usage=("import from authority", "pass computed attitude to renderer"),
        forbidden_contexts=(LayerName.PRESENTATION,),
        unit="degrees",
        reference_frame="J2000",
        known_values=(23.44, 23.4392811, 23.439281),
    ),
    Concept(
        name="earth_radius",
        kind=ConceptKind.RADIUS,
        authority_source=authority_source_for(ConceptKind.RADIUS),
        naming_patterns=(r"earth.?radius", r"radius.?earth", r"equatorial.?radius"),
        allowed_usage=("import from authority",),
        forbidden_contexts=(LayerName.PRESENTATION,),
        unit="km",
        known_values=(6371.0, 6378.137, 6356.752),
    ),
    Concept(
        name="earth_rotation_period",
        kind=ConceptKind.ROTATION_PERIOD,
        authority_source=authority_source_for(ConceptKind.ROTATION_PERIOD),
        naming_patterns=(r"rotation.?period", r"sidereal.?day", r"spin.?period"),
        allowed_usage=("import from authority",),
        forbidden_contexts=(LayerName.PRESENTATION,),
        unit="hours",
        known_values=(23.9344696, 86164.0905),
    ),
    Concept(
        name="j2000_frame",
        kind=ConceptKind.REFERENCE_FRAME,
        authority_source=authority_source_for(ConceptKind.REFERENCE_FRAME),
        naming_patterns=(r"j2000", r"reference.?frame", r"icrf"),
        allowed_usage=("import from authority",),
        forbidden_contexts=(LayerName.PRESENTATION,),
        known_values=(2451545.0,),
    ),
)
