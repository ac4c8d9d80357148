"""Governance rule model and the built-in specification set.

Rules are plain data. Behaviour lives in one detector per ``RuleCategory``
(see ``arch_guardian.detectors``), so a rule set can be logged, diffed and
loaded from a document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class RuleCategory(Enum):
    """Detector strategy a rule is enforced by."""

    PRIORITY = "priority"
    SSOT = "ssot"
    CONSTANTS_PURITY = "constants-purity"
    LAYER = "layer"
    BOUNDARY = "boundary"
    MAGIC_NUMBER = "magic-number"
    STRUCTURAL = "structural"


class EnforcementLevel(Enum):
    STRICT = "strict"
    ADVISORY = "advisory"
    DISABLED = "disabled"


class FailureAction(Enum):
    """What the surrounding pipeline should do when a spec fails."""

    BLOCK = "block"
    WARN = "warn"
    REPORT = "report"


@dataclass(frozen=True)
class GovernanceRule:
    """One enforceable rule inside a specification."""

    id: str
    category: RuleCategory
    description: str
    enforcement: EnforcementLevel = EnforcementLevel.STRICT

    @property
    def reference(self) -> str:
        return f"{self.id}: {self.description}"


@dataclass(frozen=True)
class GovernanceSpec:
    """A numbered governance specification (e.g. "Spec-2")."""

    id: str
    title: str
    description: str = ""
    rules: tuple[GovernanceRule, ...] = ()
    enforcement: EnforcementLevel = EnforcementLevel.STRICT
    failure_action: FailureAction = FailureAction.REPORT
    enabled: bool = True

    @property
    def active(self) -> bool:
        return self.enabled and self.enforcement != EnforcementLevel.DISABLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "enforcement": self.enforcement.value,
            "failure_action": self.failure_action.value,
            "enabled": self.enabled,
            "rules": [
                {
                    "id": r.id,
                    "category": r.category.value,
                    "description": r.description,
                    "enforcement": r.enforcement.value,
                }
                for r in self.rules
            ],
        }


@dataclass(frozen=True)
class RuleSet:
    """The specifications in force for one analysis run."""

    specs: tuple[GovernanceSpec, ...]
    source: str = "built-in"
    problems: tuple[str, ...] = field(default=())

    def active_specs(self, only: Optional[list[str]] = None) -> list[GovernanceSpec]:
        return [s for s in self.specs if s.active and (not only or s.id in only)]

    def rule_for(
        self, category: RuleCategory, only: Optional[list[str]] = None
    ) -> Optional[tuple[GovernanceSpec, GovernanceRule]]:
        """The first active rule enforcing ``category``, with its spec."""
        for spec in self.active_specs(only):
            for rule in spec.rules:
                if rule.category == category and rule.enforcement != EnforcementLevel.DISABLED:
                    return spec, rule
        return None

    def get_spec(self, spec_id: str) -> Optional[GovernanceSpec]:
        for spec in self.specs:
            if spec.id == spec_id:
                return spec
        return None


DEFAULT_SPECS: tuple[GovernanceSpec, ...] = (
    GovernanceSpec(
        id="Spec-0",
        title="Constitution: physics correctness over visual appeal",
        description="Physical correctness is never traded for how a render looks.",
        rules=(
            GovernanceRule(
                "Spec-0.1",
                RuleCategory.PRIORITY,
                "Visual tuning must not override physically correct values",
            ),
        ),
        failure_action=FailureAction.BLOCK,
    ),
    GovernanceSpec(
        id="Spec-1",
        title="Architecture Guardian",
        description="Governance oversight across all other specifications.",
        rules=(),
        enforcement=EnforcementLevel.ADVISORY,
    ),
    GovernanceSpec(
        id="Spec-2",
        title="Single Source of Truth",
        description="Every physics concept has exactly one authoritative definition.",
        rules=(
            GovernanceRule(
                "Spec-2.1",
                RuleCategory.SSOT,
                "Each concept is defined once, in its authoritative source",
            ),
            GovernanceRule(
                "Spec-2.2",
                RuleCategory.CONSTANTS_PURITY,
                "Constants modules hold frozen values only: no logic, functions or classes",
            ),
        ),
        failure_action=FailureAction.BLOCK,
    ),
    GovernanceSpec(
        id="Spec-3",
        title="Renderer boundary purity",
        description="Renderers receive positions, attitudes and visual parameters only.",
        rules=(
            GovernanceRule(
                "Spec-3.1",
                RuleCategory.BOUNDARY,
                "Presentation code accepts visual inputs only and performs no domain computation",
            ),
        ),
        failure_action=FailureAction.BLOCK,
    ),
    GovernanceSpec(
        id="Spec-4",
        title="No magic numbers",
        description="Domain constants are imported from their authority, with units and frames.",
        rules=(
            GovernanceRule(
                "Spec-4.1",
                RuleCategory.MAGIC_NUMBER,
                "Hard-coded domain values must be imported from their authoritative source",
            ),
        ),
        enforcement=EnforcementLevel.STRICT,
        failure_action=FailureAction.WARN,
    ),
    GovernanceSpec(
        id="Spec-5",
        title="Structural failure detection",
        description="Three fixes to the same problem means the structure is wrong.",
        rules=(
            GovernanceRule(
                "Spec-5.1",
                RuleCategory.STRUCTURAL,
                "Three or more fixes to one area within the monitoring window require redesign",
            ),
        ),
        failure_action=FailureAction.WARN,
    ),
    GovernanceSpec(
        id="Spec-6",
        title="Layer separation",
        description="Each layer depends only on the layers it declares.",
        rules=(
            GovernanceRule(
                "Spec-6.1",
                RuleCategory.LAYER,
                "Imports must follow the allowed-dependency graph and layer deny-lists",
            ),
        ),
        failure_action=FailureAction.BLOCK,
    ),
)


DEFAULT_RULE_SET = RuleSet(specs=DEFAULT_SPECS)
