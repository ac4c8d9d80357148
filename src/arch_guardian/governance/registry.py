"""Immutable concept and layer registry.

The registry is built once through a ``RegistryBuilder`` and then handed to
every detector. Nothing mutates it afterwards, so detectors can share it
across threads without locking.
"""

from __future__ import annotations

from collections import deque
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..exceptions import DuplicateRegistrationError, ErrorCode, RegistryError
from .concepts import DEFAULT_CONCEPTS, Concept
from .layers import (
    DEFAULT_BOUNDARY_PROFILE,
    DEFAULT_LAYERS,
    LAYER_PATH_RULES,
    BoundaryProfile,
    LayerDefinition,
    LayerName,
    classify_layer,
)


class GovernanceRegistry:
    """Read-only view over the registered concepts and layers."""

    def __init__(
        self,
        concepts: Mapping[str, Concept],
        layers: Mapping[LayerName, LayerDefinition],
        boundary_profile: BoundaryProfile,
        path_rules: tuple[tuple[str, LayerName], ...] = LAYER_PATH_RULES,
    ):
        self._concepts = MappingProxyType(dict(concepts))
        self._layers = MappingProxyType(dict(layers))
        self.boundary_profile = boundary_profile
        self.path_rules = path_rules

    # -- concepts ----------------------------------------------------------

    def get_concept(self, name: str) -> Optional[Concept]:
        return self._concepts.get(name)

    def all_concepts(self) -> tuple[Concept, ...]:
        return tuple(self._concepts.values())

    def match_concept(self, identifier: str) -> Optional[Concept]:
        """First registered concept whose naming convention matches ``identifier``."""
        for concept in self._concepts.values():
            if concept.matches_identifier(identifier):
                return concept
        return None

    def concept_for_value(self, value: float, tolerance: float) -> Optional[Concept]:
        for concept in self._concepts.values():
            if concept.matches_value(value, tolerance):
                return concept
        return None

    def is_authority_file(self, path: str) -> bool:
        return any(c.is_authoritative(path) for c in self._concepts.values())

    # -- layers ------------------------------------------------------------

    def get_layer(self, name: LayerName) -> Optional[LayerDefinition]:
        return self._layers.get(name)

    def all_layers(self) -> tuple[LayerDefinition, ...]:
        return tuple(self._layers.values())

    def layer_of(self, path: str) -> LayerName:
        return classify_layer(path, self.path_rules)

    def layer_distance(self, source: LayerName, target: LayerName) -> Optional[int]:
        """Hops between two layers in the undirected allowed-dependency graph.

        Returns None when the layers are not connected.
        """
        if source == target:
            return 0
        neighbours: dict[LayerName, set[LayerName]] = {name: set() for name in LayerName}
        for layer in self._layers.values():
            for dep in layer.allowed_dependencies:
                neighbours[layer.name].add(dep)
                neighbours[dep].add(layer.name)

        seen = {source}
        queue = deque([(source, 0)])
        while queue:
            node, hops = queue.popleft()
            for nxt in sorted(neighbours[node], key=lambda n: n.value):
                if nxt == target:
                    return hops + 1
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append((nxt, hops + 1))
        return None

    def crosses_multiple_layers(self, source: LayerName, target: LayerName) -> bool:
        distance = self.layer_distance(source, target)
        return distance is None or distance > 1


class RegistryBuilder:
    """Collects registrations, then freezes them into a GovernanceRegistry.

    A second registration under the same name is a programming error and
    raises ``DuplicateRegistrationError``.
    """

    def __init__(self) -> None:
        self._concepts: dict[str, Concept] = {}
        self._layers: dict[LayerName, LayerDefinition] = {}
        self._boundary_profile: BoundaryProfile = DEFAULT_BOUNDARY_PROFILE
        self._path_rules = LAYER_PATH_RULES

    def register_concept(self, concept: Concept) -> RegistryBuilder:
        if not concept.authority_source:
            raise RegistryError(
                f"Concept '{concept.name}' has no authoritative source",
                ErrorCode.AG102,
                context={"concept": concept.name},
                recoverable=False,
            )
        if concept.name in self._concepts:
            raise DuplicateRegistrationError(
                f"Concept '{concept.name}' is already registered",
                ErrorCode.AG100,
                context={"concept": concept.name},
                recoverable=False,
            )
        self._concepts[concept.name] = concept
        return self

    def register_layer(self, layer: LayerDefinition) -> RegistryBuilder:
        if layer.name in self._layers:
            raise DuplicateRegistrationError(
                f"Layer '{layer.name.value}' is already registered",
                ErrorCode.AG101,
                context={"layer": layer.name.value},
                recoverable=False,
            )
        self._layers[layer.name] = layer
        return self

    def with_boundary_profile(self, profile: BoundaryProfile) -> RegistryBuilder:
        self._boundary_profile = profile
        return self

    def with_path_rules(self, rules: Iterable[tuple[str, LayerName]]) -> RegistryBuilder:
        self._path_rules = tuple(rules)
        return self

    def build(self) -> GovernanceRegistry:
        return GovernanceRegistry(
            self._concepts, self._layers, self._boundary_profile, self._path_rules
        )


@lru_cache(maxsize=1)
def default_registry() -> GovernanceRegistry:
    """The built-in registry, constructed once per process."""
    builder = RegistryBuilder()
    for concept in DEFAULT_CONCEPTS:
        builder.register_concept(concept)
    for layer in DEFAULT_LAYERS:
        builder.register_layer(layer)
    return builder.build()
