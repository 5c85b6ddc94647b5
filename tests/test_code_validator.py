"""
Tests for the Code Validator
============================

Tests cover:
- Language normalization and aliases
- Language-scoped rules
- Embedded shell execution across languages
- Size ceiling
"""

import pytest

from exec_guard.constants import MAX_CODE_SIZE
from exec_guard.models import SeverityLevel
from exec_guard.validators import CodeValidator, normalize_language, validate_code


@pytest.fixture
def validator():
    return CodeValidator()


REVERSE_SHELL_PY = (
    "import socket\n"
    "s = socket.socket(); s.connect(('10.0.0.1', 4444))\n"
)


class TestNormalizeLanguage:
    """Tests for normalize_language."""

    @pytest.mark.parametrize(
        "language,expected",
        [
            (None, "python"),
            ("", "python"),
            ("Python", "python"),
            (" py ", "python"),
            ("JS", "javascript"),
            ("node.js", "node"),
            ("ruby", "ruby"),
        ],
    )
    def test_normalize(self, language, expected):
        assert normalize_language(language) == expected


class TestInputHandling:
    """Tests for empty input."""

    @pytest.mark.parametrize("code", ["", "\n\n  ", None])
    def test_empty(self, validator, code):
        result = validator.validate(code, "python")
        assert not result.allowed
        assert result.severity == SeverityLevel.MEDIUM
        assert result.reason == "Empty or invalid code"


class TestScopedRules:
    """Tests for language-scoped blocked-code rules."""

    def test_python_reverse_shell(self, validator):
        result = validator.validate(REVERSE_SHELL_PY, "python")
        assert not result.allowed
        assert result.rule_id == "code-socket-connect"
        assert result.severity == SeverityLevel.CRITICAL
        assert result.reason.startswith("Code blocked:")

    def test_alias_applies_python_rules(self, validator):
        assert not validator.validate(REVERSE_SHELL_PY, "py").allowed

    def test_python_rule_ignored_for_javascript(self, validator):
        assert validator.validate(REVERSE_SHELL_PY, "javascript").allowed

    def test_default_language_is_python(self, validator):
        assert not validator.validate(REVERSE_SHELL_PY).allowed

    def test_eval_of_input(self, validator):
        result = validator.validate("eval(input('> '))", "python")
        assert not result.allowed
        assert result.rule_id == "code-eval-input"

    def test_unbounded_loop_any_language(self, validator):
        result = validator.validate("while True:\n    pass\n", "ruby")
        assert not result.allowed
        assert result.rule_id == "code-unbounded-loop"
        assert result.severity == SeverityLevel.HIGH

    def test_credential_read(self, validator):
        result = validator.validate("data = open('/etc/passwd').read()", "python")
        assert not result.allowed
        assert result.rule_id == "code-open-credentials"


class TestEmbeddedShell:
    """Tests for code that shells out to destructive commands."""

    def test_os_system_rm(self, validator):
        result = validator.validate("import os\nos.system('rm -rf /tmp/data')", "python")
        assert not result.allowed
        assert result.rule_id == "shell-os-system-rm"
        assert result.severity == SeverityLevel.CRITICAL

    def test_checked_for_unscoped_language(self, validator):
        """Embedded shell heuristics apply to every language."""
        result = validator.validate("os.system('rm -rf /tmp/data')", "ruby")
        assert not result.allowed
        assert result.severity == SeverityLevel.CRITICAL


class TestSizeCeiling:
    """Tests for the maximum code size."""

    def test_too_large(self, validator):
        code = "x = 1\n" * (MAX_CODE_SIZE // 6 + 10)
        result = validator.validate(code, "python")
        assert not result.allowed
        assert result.severity == SeverityLevel.MEDIUM
        assert "too large" in result.reason

    def test_custom_ceiling(self):
        result = CodeValidator(max_code_size=10).validate("print('hello world')", "python")
        assert not result.allowed

    def test_pattern_match_wins_over_size(self):
        code = "import os\nos.system('rm -rf /home')"
        result = CodeValidator(max_code_size=10).validate(code, "python")
        assert result.severity == SeverityLevel.CRITICAL
        assert "too large" not in result.reason


class TestSafeCode:
    """Tests for ordinary code."""

    @pytest.mark.parametrize(
        "code,language",
        [
            ("print('hello')", "python"),
            ("console.log(1 + 1)", "javascript"),
            ("for i in range(10):\n    print(i)", "python"),
            ("import json\nprint(json.dumps({'a': 1}))", "python"),
        ],
    )
    def test_allowed(self, validator, code, language):
        assert validator.validate(code, language).allowed

    def test_module_function(self):
        assert validate_code("print('hi')").allowed
        assert not validate_code(REVERSE_SHELL_PY, "python").allowed
