"""Rule-document loading with timeout and fallback to the built-in specs.

A rule document is TOML or JSON::

    [[specs]]
    id = "Spec-2"
    title = "Single Source of Truth"
    enforcement = "strict"          # strict | advisory | disabled
    failure_action = "block"        # block | warn | report
    enabled = true

    [[specs.rules]]
    id = "Spec-2.1"
    category = "ssot"
    description = "Each concept is defined once"

Loading never aborts an analysis: any failure is logged and the built-in
rule set is used instead.
"""

from __future__ import annotations

import concurrent.futures
import json
from pathlib import Path
from typing import Any, Optional

from ..exceptions import ErrorCode, RuleLoadError
from ..logging_config import get_logger
from .registry import GovernanceRegistry
from .specs import (
    DEFAULT_RULE_SET,
    EnforcementLevel,
    FailureAction,
    GovernanceRule,
    GovernanceSpec,
    RuleCategory,
    RuleSet,
)

logger = get_logger(__name__)


def parse_rule_document(text: str, suffix: str = ".toml") -> RuleSet:
    """Parse rule document text into a RuleSet.

    Raises:
        RuleLoadError: If the text cannot be parsed or has the wrong shape
    """
    try:
        if suffix.lower() == ".json":
            data = json.loads(text)
        else:
            try:
                import tomllib
            except ModuleNotFoundError:
                import tomli as tomllib  # type: ignore
            data = tomllib.loads(text)
    except ValueError as e:
        raise RuleLoadError(f"Rule document parse failed: {e}", ErrorCode.AG201)

    return _rule_set_from_dict(data)


def _rule_set_from_dict(data: Any) -> RuleSet:
    if not isinstance(data, dict) or not isinstance(data.get("specs"), list):
        raise RuleLoadError("Rule document must contain a 'specs' list", ErrorCode.AG203)

    specs = []
    try:
        for raw in data["specs"]:
            rules = tuple(
                GovernanceRule(
                    id=str(r["id"]),
                    category=RuleCategory(r["category"]),
                    description=str(r.get("description", "")),
                    enforcement=EnforcementLevel(r.get("enforcement", "strict")),
                )
                for r in raw.get("rules", [])
            )
            specs.append(
                GovernanceSpec(
                    id=str(raw["id"]),
                    title=str(raw.get("title", raw["id"])),
                    description=str(raw.get("description", "")),
                    rules=rules,
                    enforcement=EnforcementLevel(raw.get("enforcement", "strict")),
                    failure_action=FailureAction(raw.get("failure_action", "report")),
                    enabled=bool(raw.get("enabled", True)),
                )
            )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise RuleLoadError(f"Rule document schema mismatch: {e}", ErrorCode.AG203)

    ids = [s.id for s in specs]
    if len(ids) != len(set(ids)):
        raise RuleLoadError("Rule document declares a spec id twice", ErrorCode.AG203)

    return RuleSet(specs=tuple(specs))


def _read_rule_file(path: Path) -> RuleSet:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuleLoadError(
            f"Cannot read rule document {path}: {e}",
            ErrorCode.AG200,
            context={"path": str(path)},
        )
    rule_set = parse_rule_document(text, path.suffix)
    return RuleSet(specs=rule_set.specs, source=str(path))


def _fallback(reason: str) -> RuleSet:
    logger.warning(f"{reason}; using built-in specifications")
    return RuleSet(specs=DEFAULT_RULE_SET.specs, problems=(f"{reason}; using built-in specifications",))


def load_rule_set(path: Optional[Path], timeout: float = 5.0) -> RuleSet:
    """Load a rule document, falling back to the built-in specs on any failure."""
    if path is None:
        return DEFAULT_RULE_SET

    path = Path(path)
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(_read_rule_file, path)
        try:
            rule_set = future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            raise RuleLoadError(
                f"Loading rule document {path} exceeded {timeout}s",
                ErrorCode.AG202,
                context={"path": str(path)},
            )
    except RuleLoadError as e:
        return _fallback(str(e))
    except Exception as e:
        return _fallback(f"Unexpected error loading {path}: {e}")
    finally:
        executor.shutdown(wait=False)

    logger.debug(f"Loaded {len(rule_set.specs)} specifications from {path}")
    return rule_set


def validate_rule_set(rule_set: RuleSet, registry: GovernanceRegistry) -> list[str]:
    """Sanity-check a rule set against the registry.

    Problems are returned (and logged) but never raised.
    """
    problems: list[str] = []

    spec0 = rule_set.get_spec("Spec-0")
    if spec0 is None or not spec0.active:
        problems.append("Spec-0 (physics priority) must be present and enabled")

    if not registry.all_concepts():
        problems.append("At least one concept with an authoritative source must be registered")

    if rule_set.rule_for(RuleCategory.BOUNDARY) and registry.boundary_profile.is_empty():
        problems.append("Boundary rules are enabled but the renderer vocabulary is empty")

    for spec in rule_set.specs:
        if spec.active and not spec.rules and spec.id != "Spec-1":
            problems.append(f"{spec.id} is enabled but declares no rules")

    for problem in problems:
        logger.warning(f"Rule set problem: {problem}")
    return problems
