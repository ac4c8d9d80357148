"""Tests for rule-document loading and rule-set validation."""

import time

import pytest

import arch_guardian.governance.rules as rules_module
from arch_guardian.exceptions import ErrorCode, RuleLoadError
from arch_guardian.governance import (
    DEFAULT_RULE_SET,
    GovernanceSpec,
    RuleCategory,
    RuleSet,
    default_registry,
    load_rule_set,
    parse_rule_document,
    validate_rule_set,
)
from arch_guardian.governance.specs import EnforcementLevel

RULES_TOML = """
[[specs]]
id = "Spec-0"
title = "Constitution"

[[specs.rules]]
id = "Spec-0.1"
category = "priority"
description = "Physics first"

[[specs]]
id = "Spec-2"
title = "Single Source of Truth"
enforcement = "advisory"

[[specs.rules]]
id = "Spec-2.1"
category = "ssot"
description = "Defined once"
"""


class TestParseRuleDocument:
    def test_toml(self):
        rule_set = parse_rule_document(RULES_TOML)

        assert [s.id for s in rule_set.specs] == ["Spec-0", "Spec-2"]
        spec, rule = rule_set.rule_for(RuleCategory.SSOT)
        assert spec.enforcement == EnforcementLevel.ADVISORY
        assert rule.reference == "Spec-2.1: Defined once"
        assert rule_set.rule_for(RuleCategory.LAYER) is None

    def test_json(self):
        text = '{"specs": [{"id": "Spec-6", "rules": [{"id": "Spec-6.1", "category": "layer"}]}]}'
        rule_set = parse_rule_document(text, ".json")
        assert rule_set.specs[0].title == "Spec-6"
        assert rule_set.rule_for(RuleCategory.LAYER) is not None

    @pytest.mark.parametrize(
        "text, suffix, code",
        [
            ("specs = [", ".toml", ErrorCode.AG201),
            ("{not json", ".json", ErrorCode.AG201),
            ('title = "no specs"', ".toml", ErrorCode.AG203),
            ('{"specs": [{"id": "S", "rules": [{"id": "r", "category": "bogus"}]}]}', ".json", ErrorCode.AG203),
            ('{"specs": [{"id": "S"}, {"id": "S"}]}', ".json", ErrorCode.AG203),
        ],
    )
    def test_bad_documents(self, text, suffix, code):
        with pytest.raises(RuleLoadError) as exc_info:
            parse_rule_document(text, suffix)
        assert exc_info.value.code == code


class TestLoadRuleSet:
    """Loading never aborts; failures fall back to the built-in specs."""

    def test_no_path_is_built_in(self):
        assert load_rule_set(None) is DEFAULT_RULE_SET

    def test_valid_file(self, tmp_path):
        path = tmp_path / "rules.toml"
        path.write_text(RULES_TOML)
        rule_set = load_rule_set(path)
        assert rule_set.source == str(path)
        assert len(rule_set.specs) == 2

    def test_missing_file_falls_back(self, tmp_path):
        rule_set = load_rule_set(tmp_path / "missing.toml")
        assert rule_set.specs == DEFAULT_RULE_SET.specs
        assert rule_set.source == "built-in"
        assert "AG200" in rule_set.problems[0]

    def test_malformed_file_falls_back(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("[1, 2, 3]")
        rule_set = load_rule_set(path)
        assert rule_set.specs == DEFAULT_RULE_SET.specs
        assert "AG203" in rule_set.problems[0]

    def test_timeout_falls_back(self, tmp_path, monkeypatch):
        def slow_read(path):
            time.sleep(1.0)
            return RuleSet(specs=())

        monkeypatch.setattr(rules_module, "_read_rule_file", slow_read)
        rule_set = load_rule_set(tmp_path / "rules.toml", timeout=0.05)

        assert rule_set.specs == DEFAULT_RULE_SET.specs
        assert "AG202" in rule_set.problems[0]


class TestValidateRuleSet:
    def test_built_in_rules_are_consistent(self):
        assert validate_rule_set(DEFAULT_RULE_SET, default_registry()) == []

    def test_missing_constitution(self):
        rule_set = RuleSet(specs=(GovernanceSpec(id="Spec-2", title="SSOT"),))
        problems = validate_rule_set(rule_set, default_registry())
        assert any("Spec-0" in p for p in problems)
        assert any("Spec-2 is enabled but declares no rules" in p for p in problems)

    def test_disabled_constitution(self):
        rule_set = RuleSet(
            specs=(GovernanceSpec(id="Spec-0", title="C", enabled=False),),
        )
        assert any("Spec-0" in p for p in validate_rule_set(rule_set, default_registry()))
