"""
Tests for the Rule Catalogue and RuleTable
==========================================

Tests cover:
- Rule catalogue integrity (unique ids, compilable patterns)
- Rule lookup and filtering helpers
- First-match and all-match semantics
- Language scoping
- Invalid patterns being skipped
- Disabled rules
"""

import logging
import re

import pytest

from exec_guard.models import Rule, SeverityLevel
from exec_guard.rule_table import RuleTable, build_default_tables
from exec_guard.rules import (
    BLOCKED_COMMAND_RULES,
    DEFAULT_TABLES,
    RULESET_VERSION,
    get_default_rules,
    get_rule_by_id,
    list_rule_categories,
    list_rule_ids,
)


# =============================================================================
# CATALOGUE
# =============================================================================

class TestCatalogue:
    """Tests for the default rule catalogue."""

    def test_rule_ids_are_unique(self):
        ids = list_rule_ids()
        assert len(ids) == len(set(ids))

    def test_every_pattern_compiles(self):
        for rules in DEFAULT_TABLES.values():
            for rule in rules:
                re.compile(rule.pattern)

    def test_blocked_commands_are_high_or_critical(self):
        """Every blocked command rule refuses at HIGH or CRITICAL."""
        for rule in BLOCKED_COMMAND_RULES:
            assert rule.severity in (SeverityLevel.HIGH, SeverityLevel.CRITICAL), rule.rule_id

    def test_required_categories_covered(self):
        categories = set(list_rule_categories("blocked_command"))
        for expected in (
            "filesystem",
            "reverse_shell",
            "remote_execution",
            "credentials",
            "privilege_escalation",
            "security_controls",
            "crypto_mining",
            "resource_exhaustion",
            "kernel",
            "network_capture",
            "log_destruction",
        ):
            assert expected in categories


class TestLookupHelpers:
    """Tests for get_default_rules, get_rule_by_id and friends."""

    def test_get_default_rules_by_category(self):
        rules = get_default_rules("blocked_command", category="reverse_shell")
        assert rules
        assert all(r.category == "reverse_shell" for r in rules)

    def test_get_default_rules_min_severity(self):
        rules = get_default_rules("blocked_command", min_severity=SeverityLevel.CRITICAL)
        assert rules
        assert all(r.severity == SeverityLevel.CRITICAL for r in rules)

    def test_get_default_rules_unknown_table(self):
        with pytest.raises(KeyError):
            get_default_rules("nope")

    def test_get_rule_by_id(self):
        rule = get_rule_by_id("risk-sudo")
        assert rule is not None
        assert "elevated privileges" in rule.reason

    def test_get_rule_by_id_missing(self):
        assert get_rule_by_id("does-not-exist") is None

    def test_list_rule_ids_keeps_table_order(self):
        ids = list_rule_ids("blocked_command")
        assert ids[0] == BLOCKED_COMMAND_RULES[0].rule_id
        assert ids[-1] == BLOCKED_COMMAND_RULES[-1].rule_id


# =============================================================================
# RULE TABLE
# =============================================================================

@pytest.fixture
def small_table():
    return RuleTable(
        "test",
        [
            Rule(rule_id="first", pattern=r"(?i)\bfoo\b", reason="first foo"),
            Rule(rule_id="second", pattern=r"(?i)\bfoo\w*", reason="second foo"),
            Rule(
                rule_id="py-only",
                pattern=r"\bbar\b",
                reason="python bar",
                languages=frozenset({"python"}),
            ),
        ],
    )


class TestRuleTable:
    """Tests for RuleTable matching semantics."""

    def test_first_match_wins(self, small_table):
        match = small_table.first_match("FOO")
        assert match is not None
        assert match.rule.rule_id == "first"
        assert match.matched_text == "FOO"

    def test_all_matches_in_order(self, small_table):
        ids = [m.rule.rule_id for m in small_table.all_matches("foo")]
        assert ids == ["first", "second"]

    def test_no_match(self, small_table):
        assert small_table.first_match("nothing here") is None
        assert small_table.all_matches("nothing here") == []

    def test_scoped_rule_needs_language(self, small_table):
        assert small_table.first_match("bar") is None
        assert small_table.first_match("bar", language="javascript") is None
        match = small_table.first_match("bar", language="python")
        assert match is not None
        assert match.rule.rule_id == "py-only"

    def test_invalid_pattern_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="exec_guard.rule_table"):
            table = RuleTable(
                "broken",
                [
                    Rule(rule_id="bad", pattern=r"(unclosed", reason="bad"),
                    Rule(rule_id="good", pattern=r"ok", reason="good"),
                ],
            )
        assert len(table) == 1
        assert [r.rule_id for r in table.rules] == ["good"]
        assert "bad" in caplog.text

    def test_without(self, small_table):
        trimmed = small_table.without(["first"])
        assert len(trimmed) == 2
        assert trimmed.first_match("foo").rule.rule_id == "second"
        assert len(small_table) == 3

    def test_version_defaults_to_ruleset(self, small_table):
        assert small_table.version == RULESET_VERSION
        assert "test" in repr(small_table)


class TestBuildDefaultTables:
    """Tests for build_default_tables."""

    def test_builds_all_tables(self):
        tables = build_default_tables()
        assert set(tables) == set(DEFAULT_TABLES)
        assert len(tables["blocked_command"]) == len(BLOCKED_COMMAND_RULES)

    def test_disabled_rules_removed(self):
        tables = build_default_tables(["risk-sudo"])
        assert "risk-sudo" not in [r.rule_id for r in tables["advisory_command"].rules]
