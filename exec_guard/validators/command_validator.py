"""
Command Validator
=================

Validates terminal commands proposed by an agent against the blocked
command rule table.

This validator:
- Checks the whole trimmed command against every rule, first match wins
- Re-checks each chained segment (;, &&, ||, backtick) on its own, so a
  destructive sub-command cannot hide behind a benign prefix
- Detects obfuscation: base64-decoded payloads piped into a shell and
  ANSI-C hex escape literals ($'\\x72\\x6d')

The chain splitter is deliberately simple and is not quote-aware: a
separator inside quotes still splits, which can only add checks.
"""

from __future__ import annotations

import re

from ..models import SeverityLevel, ValidationResult
from ..rule_table import RuleTable
from ..rules import (
    BASE64_DECODE_PATTERN,
    BLOCKED_COMMAND_RULES,
    HEX_ESCAPE_PATTERN,
    PIPE_TO_SHELL_PATTERN,
)

_CHAIN_SEPARATORS = re.compile(r"\s*(?:;|&&|\|\||`)\s*")
_BASE64_DECODE = re.compile(BASE64_DECODE_PATTERN)
_PIPE_TO_SHELL = re.compile(PIPE_TO_SHELL_PATTERN)
_HEX_ESCAPE = re.compile(HEX_ESCAPE_PATTERN)


def split_command_chain(command: str) -> list[str]:
    """
    Split a command on ;, &&, || and backticks.

    Args:
        command: Command string

    Returns:
        Non-empty, stripped segments in order

    Example:
        >>> split_command_chain("echo a && rm -rf /;ls")
        ['echo a', 'rm -rf /', 'ls']
    """
    return [segment.strip() for segment in _CHAIN_SEPARATORS.split(command) if segment.strip()]


class CommandValidator:
    """
    Validates shell commands against a blocked-command RuleTable.

    Pure over its table: the same command always yields an equal result.
    """

    def __init__(self, table: RuleTable | None = None) -> None:
        self.table = table or RuleTable("blocked_command", BLOCKED_COMMAND_RULES)

    def validate(self, command: object) -> ValidationResult:
        """
        Validate a terminal command.

        Args:
            command: Raw command string

        Returns:
            ValidationResult, allowed=False with reason and severity when
            a rule or obfuscation detector fires
        """
        if not isinstance(command, str) or not command.strip():
            return ValidationResult.block(
                reason="Empty or invalid command",
                severity=SeverityLevel.MEDIUM,
            )

        trimmed = command.strip()

        match = self.table.first_match(trimmed)
        if match:
            return ValidationResult.block(
                reason=f"Command blocked: {match.rule.reason}",
                severity=match.rule.severity,
                matched_pattern=match.rule.pattern,
                rule_id=match.rule.rule_id,
            )

        for segment in split_command_chain(trimmed):
            match = self.table.first_match(segment)
            if match:
                return ValidationResult.block(
                    reason=f"Command blocked (sub-command): {match.rule.reason}",
                    severity=match.rule.severity,
                    matched_pattern=match.rule.pattern,
                    rule_id=match.rule.rule_id,
                )

        if _BASE64_DECODE.search(trimmed) and _PIPE_TO_SHELL.search(trimmed):
            return ValidationResult.block(
                reason="Command blocked: execution of a base64-encoded payload",
                severity=SeverityLevel.CRITICAL,
                matched_pattern="base64 decode piped to shell",
            )

        if _HEX_ESCAPE.search(trimmed):
            return ValidationResult.block(
                reason="Command blocked: suspicious hexadecimal escape sequences",
                severity=SeverityLevel.HIGH,
                matched_pattern="hex escape sequence",
            )

        return ValidationResult.allow()


_default_validator: CommandValidator | None = None


def validate_command(command: object) -> ValidationResult:
    """Validate a command against the default blocked-command table."""
    global _default_validator
    if _default_validator is None:
        _default_validator = CommandValidator()
    return _default_validator.validate(command)
