"""Governance registry, layers, concepts and rule model."""

from .concepts import (
    DEFAULT_CONCEPTS,
    Concept,
    ConceptKind,
    authority_source_for,
    identify_concept_kind,
    is_physics_identifier,
)
from .layers import (
    DEFAULT_BOUNDARY_PROFILE,
    DEFAULT_LAYERS,
    BoundaryProfile,
    LayerDefinition,
    LayerName,
    Responsibility,
    classify_layer,
)
from .paths import glob_matches, path_matches
from .registry import GovernanceRegistry, RegistryBuilder, default_registry
from .rules import load_rule_set, parse_rule_document, validate_rule_set
from .specs import (
    DEFAULT_RULE_SET,
    DEFAULT_SPECS,
    EnforcementLevel,
    FailureAction,
    GovernanceRule,
    GovernanceSpec,
    RuleCategory,
    RuleSet,
)

__all__ = [
    "Concept",
    "ConceptKind",
    "DEFAULT_CONCEPTS",
    "authority_source_for",
    "identify_concept_kind",
    "is_physics_identifier",
    "BoundaryProfile",
    "DEFAULT_BOUNDARY_PROFILE",
    "DEFAULT_LAYERS",
    "LayerDefinition",
    "LayerName",
    "Responsibility",
    "classify_layer",
    "glob_matches",
    "path_matches",
    "GovernanceRegistry",
    "RegistryBuilder",
    "default_registry",
    "load_rule_set",
    "parse_rule_document",
    "validate_rule_set",
    "DEFAULT_RULE_SET",
    "DEFAULT_SPECS",
    "EnforcementLevel",
    "FailureAction",
    "GovernanceRule",
    "GovernanceSpec",
    "RuleCategory",
    "RuleSet",
]
