"""Shared detector plumbing: the per-run context and the strategy base class."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..findings.models import Finding
from ..governance.registry import GovernanceRegistry, default_registry
from ..governance.specs import DEFAULT_RULE_SET, GovernanceRule, GovernanceSpec, RuleCategory, RuleSet
from ..history.models import EMPTY_HISTORY, ProjectHistory
from ..logging_config import get_logger
from ..snapshot.models import ProjectSnapshot
from ..text_scanner import DEFAULT_SCANNER, TextScanner

logger = get_logger(__name__)


@dataclass(frozen=True)
class DetectionContext:
    """Everything a detector may read. Shared read-only across detector threads."""

    snapshot: ProjectSnapshot
    history: ProjectHistory = EMPTY_HISTORY
    registry: GovernanceRegistry = field(default_factory=default_registry)
    rules: RuleSet = DEFAULT_RULE_SET
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
    reference_time: int = 0
    scanner: TextScanner = DEFAULT_SCANNER
    enabled_specs: tuple[str, ...] = ()

    def rule(self, category: RuleCategory) -> Optional[tuple[GovernanceSpec, GovernanceRule]]:
        return self.rules.rule_for(category, list(self.enabled_specs) or None)


class Detector:
    """Base class for one rule-category strategy.

    Subclasses set ``name`` and ``category`` and implement ``_detect``.
    ``detect`` never raises: a detector that cannot make a determination
    returns an empty list.
    """

    name: ClassVar[str] = "detector"
    category: ClassVar[RuleCategory]

    def detect(self, context: DetectionContext) -> list[Finding]:
        bound = context.rule(self.category)
        if bound is None:
            logger.debug(f"{self.name}: no active rule for {self.category.value}, skipping")
            return []
        spec, rule = bound
        try:
            findings = self._detect(context, spec.id, rule.reference)
        except Exception as e:
            logger.warning(f"{self.name} could not analyze the snapshot: {e}")
            return []
        return sorted(findings, key=lambda f: f.sort_key())

    def _detect(self, context: DetectionContext, spec_id: str, reference: str) -> list[Finding]:
        raise NotImplementedError
