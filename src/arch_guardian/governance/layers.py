"""Architecture layers, path classification and the presentation boundary profile."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .paths import contains_fragment


class LayerName(Enum):
    """The fixed set of architectural tiers."""

    PRESENTATION = "presentation"
    COMPUTATION_PHYSICS = "computation-physics"
    COMPUTATION_DOMAIN = "computation-domain"
    CONSTANTS = "constants"
    INFRASTRUCTURE = "infrastructure"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class Responsibility(Enum):
    """Coarse responsibility a module appears to carry."""

    RENDERING = "rendering"
    PHYSICS = "physics"
    ASTRONOMY = "astronomy"
    CONSTANTS = "constants"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True)
class LayerDefinition:
    """One architectural tier.

    Attributes:
        name: Layer name.
        allowed_dependencies: Layers this one may import from.
        forbidden_imports: Glob-like import deny-list ("*" forbids everything).
        allowed_operations: Kinds of work the layer may perform.
        responsibility_boundaries: Human-readable statements of scope.
        responsibilities: Responsibility categories a module in this layer may show.
    """

    name: LayerName
    allowed_dependencies: frozenset[LayerName] = frozenset()
    forbidden_imports: tuple[str, ...] = ()
    allowed_operations: tuple[str, ...] = ()
    responsibility_boundaries: tuple[str, ...] = ()
    responsibilities: frozenset[Responsibility] = frozenset()

    def may_depend_on(self, other: LayerName) -> bool:
        return other == self.name or other in self.allowed_dependencies


DEFAULT_LAYERS: tuple[LayerDefinition, ...] = (
    LayerDefinition(
        name=LayerName.CONSTANTS,
        allowed_dependencies=frozenset(),
        forbidden_imports=("*",),
        allowed_operations=("declare frozen values",),
        responsibility_boundaries=(
            "Define authoritative values",
            "No logic",
            "No imports",
        ),
        responsibilities=frozenset({Responsibility.CONSTANTS}),
    ),
    LayerDefinition(
        name=LayerName.COMPUTATION_DOMAIN,
        allowed_dependencies=frozenset({LayerName.CONSTANTS}),
        forbidden_imports=("src/components/**", "src/lib/3d/**"),
        allowed_operations=("ephemeris computation", "coordinate transforms", "time scales"),
        responsibility_boundaries=(
            "Compute astronomical quantities",
            "Own reference-frame conversions",
            "No rendering knowledge",
        ),
        responsibilities=frozenset(
            {
                Responsibility.ASTRONOMY,
                Responsibility.PHYSICS,
                Responsibility.CONSTANTS,
                Responsibility.INFRASTRUCTURE,
            }
        ),
    ),
    LayerDefinition(
        name=LayerName.COMPUTATION_PHYSICS,
        allowed_dependencies=frozenset({LayerName.CONSTANTS, LayerName.COMPUTATION_DOMAIN}),
        forbidden_imports=("src/components/**",),
        allowed_operations=("attitude computation", "rotation matrices", "physical derivation"),
        responsibility_boundaries=(
            "Derive orientation from physics",
            "Produce render-ready matrices",
            "No rendering knowledge",
        ),
        responsibilities=frozenset(
            {
                Responsibility.PHYSICS,
                Responsibility.ASTRONOMY,
                Responsibility.CONSTANTS,
                Responsibility.INFRASTRUCTURE,
            }
        ),
    ),
    LayerDefinition(
        name=LayerName.PRESENTATION,
        allowed_dependencies=frozenset({LayerName.INFRASTRUCTURE}),
        forbidden_imports=(
            "lib/astronomy/constants/**",
            "lib/astronomy/**",
            "lib/physics/**",
        ),
        allowed_operations=("render", "apply matrices", "display"),
        responsibility_boundaries=(
            "Render position vectors",
            "Apply attitude matrices",
            "Display visual parameters",
            "No physics knowledge",
            "No computations",
        ),
        responsibilities=frozenset({Responsibility.RENDERING, Responsibility.INFRASTRUCTURE}),
    ),
    LayerDefinition(
        name=LayerName.INFRASTRUCTURE,
        allowed_dependencies=frozenset({LayerName.CONSTANTS}),
        forbidden_imports=(),
        allowed_operations=("configuration", "state", "utilities"),
        responsibility_boundaries=("Provide shared plumbing", "No domain computation"),
        responsibilities=frozenset(
            {Responsibility.INFRASTRUCTURE, Responsibility.RENDERING, Responsibility.CONSTANTS}
        ),
    ),
)


# (path fragment, layer). The longest matching fragment wins; ties go to the
# earlier entry.
LAYER_PATH_RULES: tuple[tuple[str, LayerName], ...] = (
    ("src/components/", LayerName.PRESENTATION),
    ("src/lib/3d/", LayerName.PRESENTATION),
    ("lib/astronomy/constants/", LayerName.CONSTANTS),
    ("constants/", LayerName.CONSTANTS),
    ("lib/axial-tilt/", LayerName.COMPUTATION_PHYSICS),
    ("lib/physics/", LayerName.COMPUTATION_PHYSICS),
    ("lib/space-time-foundation/", LayerName.COMPUTATION_PHYSICS),
    ("lib/astronomy/", LayerName.COMPUTATION_DOMAIN),
    ("lib/infrastructure/", LayerName.INFRASTRUCTURE),
    ("lib/config/", LayerName.INFRASTRUCTURE),
    ("lib/state", LayerName.INFRASTRUCTURE),
)


def classify_layer(
    path: str,
    rules: tuple[tuple[str, LayerName], ...] = LAYER_PATH_RULES,
    default: LayerName = LayerName.INFRASTRUCTURE,
) -> LayerName:
    """Classify a module or import path into a layer.

    >>> classify_layer("src/components/Earth.tsx")
    <LayerName.PRESENTATION: 'presentation'>
    >>> classify_layer("../../lib/astronomy/constants/axialTilt")
    <LayerName.CONSTANTS: 'constants'>
    >>> classify_layer("three")
    <LayerName.INFRASTRUCTURE: 'infrastructure'>
    """
    best: tuple[int, LayerName] | None = None
    for fragment, layer in rules:
        if contains_fragment(path, fragment) and (best is None or len(fragment) > best[0]):
            best = (len(fragment), layer)
    return best[1] if best is not None else default


@dataclass(frozen=True)
class BoundaryProfile:
    """What the presentation layer may accept and must never contain.

    Attributes:
        allowed_inputs: Visual vocabulary (substring match, case-insensitive).
        forbidden_concepts: Domain keywords (whole word, case-insensitive).
        forbidden_import_patterns: Regexes over import paths.
        forbidden_function_patterns: Regexes over function names.
        forbidden_computation_kinds: Computation tags that must not appear.
        remediations: Suggested fix per computation kind.
    """

    allowed_inputs: tuple[str, ...] = ()
    forbidden_concepts: tuple[str, ...] = ()
    forbidden_import_patterns: tuple[str, ...] = ()
    forbidden_function_patterns: tuple[str, ...] = ()
    forbidden_computation_kinds: frozenset[str] = frozenset()
    remediations: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.allowed_inputs
            or self.forbidden_concepts
            or self.forbidden_import_patterns
            or self.forbidden_function_patterns
        )


DEFAULT_BOUNDARY_PROFILE = BoundaryProfile(
    allowed_inputs=(
        "positionVector",
        "attitudeMatrix",
        "visualParams",
        "position",
        "rotation",
        "scale",
        "color",
        "opacity",
        "texture",
        "material",
        "geometry",
        "quaternion",
    ),
    forbidden_concepts=(
        "axialTilt",
        "period",
        "referenceFrame",
        "orbitalPeriod",
        "rotationPeriod",
        "physicalParams",
        "GM",
        "mass",
        "radius",
        "ephemeris",
        "kepler",
        "orbital",
        "physics",
        "astronomy",
    ),
    forbidden_import_patterns=(
        r"lib/astronomy",
        r"lib/physics",
        r"constants/axialTilt",
        r"constants/physicalParams",
        r"constants/rotation",
        r"constants/referenceFrames",
        r"orbital",
        r"ephemeris",
        r"kepler",
    ),
    forbidden_function_patterns=(
        r"calculate.*angle",
        r"compute.*period",
        r"derive.*physics",
        r"orbital",
        r"kepler",
        r"ephemeris",
        r"axial.*tilt",
        r"rotation.*period",
    ),
    forbidden_computation_kinds=frozenset({"physics", "trigonometric"}),
    remediations={
        "trigonometric": "Move angle calculations to physics layer and pass computed rotation matrix",
        "physics": "Move physics calculations to appropriate physics/astronomy layer",
        "function": "Move {name} to physics layer and pass result as input parameter",
    },
)
