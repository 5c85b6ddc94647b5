"""
Code Validator
==============

Validates code snippets an agent wants to execute.

Checks, in order:
1. Empty input
2. Blocked-code rules whose language scope includes the snippet's language
3. Embedded shell execution (os.system / subprocess / child_process running
   destructive shell fragments), for every language
4. Size ceiling (MAX_CODE_SIZE characters)
"""

from __future__ import annotations

from ..constants import DEFAULT_CODE_LANGUAGE, LANGUAGE_ALIASES, MAX_CODE_SIZE
from ..models import SeverityLevel, ValidationResult
from ..rule_table import RuleTable
from ..rules import BLOCKED_CODE_RULES, EMBEDDED_SHELL_RULES


def normalize_language(language: str | None) -> str:
    """Lower-case, strip and resolve aliases ("py" -> "python")."""
    normalized = (language or DEFAULT_CODE_LANGUAGE).strip().lower()
    return LANGUAGE_ALIASES.get(normalized, normalized)


class CodeValidator:
    """Validates code against language-scoped and embedded-shell rule tables."""

    def __init__(
        self,
        table: RuleTable | None = None,
        shell_table: RuleTable | None = None,
        max_code_size: int = MAX_CODE_SIZE,
    ) -> None:
        self.table = table or RuleTable("blocked_code", BLOCKED_CODE_RULES)
        self.shell_table = shell_table or RuleTable("embedded_shell", EMBEDDED_SHELL_RULES)
        self.max_code_size = max_code_size

    def validate(self, code: object, language: str | None = None) -> ValidationResult:
        """
        Validate a code snippet.

        Args:
            code: Source code
            language: Language tag (defaults to python)

        Returns:
            ValidationResult
        """
        if not isinstance(code, str) or not code.strip():
            return ValidationResult.block(
                reason="Empty or invalid code",
                severity=SeverityLevel.MEDIUM,
            )

        normalized = normalize_language(language)

        match = self.table.first_match(code, language=normalized)
        if match:
            return ValidationResult.block(
                reason=f"Code blocked: {match.rule.reason}",
                severity=match.rule.severity,
                matched_pattern=match.rule.pattern,
                rule_id=match.rule.rule_id,
            )

        match = self.shell_table.first_match(code, language=normalized)
        if match:
            return ValidationResult.block(
                reason=f"Code blocked: {match.rule.reason}",
                severity=SeverityLevel.CRITICAL,
                matched_pattern=match.rule.pattern,
                rule_id=match.rule.rule_id,
            )

        # Checked last so a pattern match wins over the size refusal
        if len(code) > self.max_code_size:
            return ValidationResult.block(
                reason=f"Code blocked: too large (maximum {self.max_code_size} characters)",
                severity=SeverityLevel.MEDIUM,
            )

        return ValidationResult.allow()


_default_validator: CodeValidator | None = None


def validate_code(code: object, language: str | None = None) -> ValidationResult:
    """Validate code against the default code tables."""
    global _default_validator
    if _default_validator is None:
        _default_validator = CodeValidator()
    return _default_validator.validate(code, language)
