"""
Rule Table Engine
=================

Compiled, ordered view over a list of detection rules.

This module provides:
- RuleTable: Compiles a rule list once and evaluates it in table order
- RuleMatch: A rule together with the text it matched
- build_default_tables(): The four default tables, minus disabled rules

Matching semantics:
- first_match(): first rule in table order wins, remaining rules are skipped
- all_matches(): every matching rule, in table order (advisory use)
- Language-scoped rules are only evaluated for languages in their scope
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from .models import Rule
from .rules import DEFAULT_TABLES, RULESET_VERSION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleMatch:
    """
    Result of a rule matching some text.

    Attributes:
        rule: The rule that matched
        matched_text: The specific text that matched
    """

    rule: Rule
    matched_text: str


class RuleTable:
    """
    An immutable, versioned table of compiled rules.

    Rules whose pattern does not compile are logged and left out, so a bad
    rule never breaks validation of everything else.

    Example:
        table = RuleTable("blocked_command", BLOCKED_COMMAND_RULES)
        match = table.first_match("rm -rf /")
        if match:
            print(match.rule.reason)
    """

    def __init__(
        self,
        name: str,
        rules: Iterable[Rule],
        version: str = RULESET_VERSION,
    ) -> None:
        self.name = name
        self.version = version
        self._entries: list[tuple[Rule, re.Pattern[str]]] = []

        for rule in rules:
            try:
                compiled = re.compile(rule.pattern)
            except re.error as e:
                logger.warning(
                    f"Invalid regex pattern for rule {rule.rule_id} in table {name}: {e}"
                )
                continue
            self._entries.append((rule, compiled))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RuleTable(name={self.name!r}, version={self.version!r}, rules={len(self)})"

    @property
    def rules(self) -> list[Rule]:
        """Active rules in evaluation order."""
        return [rule for rule, _ in self._entries]

    def first_match(self, text: str, language: str | None = None) -> RuleMatch | None:
        """
        Return the first rule (in table order) that matches ``text``.

        Args:
            text: Command or code to check
            language: Normalized language; rules scoped to other languages
                are skipped. None means only unscoped rules apply.

        Returns:
            RuleMatch for the first hit, or None
        """
        for rule, compiled in self._entries:
            if not rule.applies_to(language):
                continue
            match = compiled.search(text)
            if match:
                return RuleMatch(rule=rule, matched_text=match.group(0))
        return None

    def all_matches(self, text: str, language: str | None = None) -> list[RuleMatch]:
        """Return every matching rule, in table order."""
        matches = []
        for rule, compiled in self._entries:
            if not rule.applies_to(language):
                continue
            match = compiled.search(text)
            if match:
                matches.append(RuleMatch(rule=rule, matched_text=match.group(0)))
        return matches

    def without(self, rule_ids: Iterable[str]) -> "RuleTable":
        """Return a copy of this table with the given rule IDs removed."""
        excluded = set(rule_ids)
        return RuleTable(
            self.name,
            (rule for rule in self.rules if rule.rule_id not in excluded),
            version=self.version,
        )


def build_default_tables(disabled_rules: Iterable[str] = ()) -> dict[str, RuleTable]:
    """
    Compile every default table.

    Args:
        disabled_rules: Rule IDs to leave out of all tables

    Returns:
        Mapping of table name to RuleTable
    """
    excluded = set(disabled_rules)
    if excluded:
        logger.info(f"Disabled rules: {', '.join(sorted(excluded))}")

    return {
        name: RuleTable(name, (r for r in rules if r.rule_id not in excluded))
        for name, rules in DEFAULT_TABLES.items()
    }
