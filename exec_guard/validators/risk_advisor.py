"""
Risk Advisor
============

Non-blocking warnings for commands that are allowed but risky (sudo,
recursive deletes, force-kills, service restarts, package removal).
Never blocks and keeps no state.
"""

from __future__ import annotations

from ..rule_table import RuleTable
from ..rules import ADVISORY_COMMAND_RULES


class RiskAdvisor:
    """Evaluates commands against the advisory RuleTable."""

    def __init__(self, table: RuleTable | None = None) -> None:
        self.table = table or RuleTable("advisory_command", ADVISORY_COMMAND_RULES)

    def warnings(self, command: object) -> list[str]:
        """
        Get human-readable warnings for a command.

        Args:
            command: Command string

        Returns:
            Warning strings in table order (empty if nothing is risky)
        """
        if not isinstance(command, str):
            return []
        return [match.rule.reason for match in self.table.all_matches(command.strip())]


_default_advisor: RiskAdvisor | None = None


def get_command_risk_warnings(command: object) -> list[str]:
    """Risk warnings for a command using the default advisory table."""
    global _default_advisor
    if _default_advisor is None:
        _default_advisor = RiskAdvisor()
    return _default_advisor.warnings(command)
