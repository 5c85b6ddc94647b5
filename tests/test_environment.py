"""
Tests for the Environment Sanitizer and Spawn Helpers
=====================================================
"""

import os
import re
import tempfile
from pathlib import Path

import pytest

from exec_guard.environment import (
    EnvironmentSanitizer,
    quote_command_arg,
    sanitize_environment,
    secure_temporary_file_path,
)
from exec_guard.path_guard import UNIX_PROFILE, WINDOWS_PROFILE


# =============================================================================
# SANITIZER
# =============================================================================

class TestSanitizer:
    """Tests for EnvironmentSanitizer."""

    def test_drops_openai_key_from_process_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        env = sanitize_environment()
        assert "OPENAI_API_KEY" not in env
        for key in ("PATH", "HOME", "LANG", "TERM", "USER"):
            assert key in env

    def test_does_not_mutate_process_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        sanitize_environment()
        assert os.environ["OPENAI_API_KEY"] == "sk-test"

    @pytest.mark.parametrize(
        "name",
        [
            "AWS_SECRET_ACCESS_KEY",
            "TELEGRAM_BOT_TOKEN",
            "gmail_app_password",
            "PASSWORD",
            "token",
            "DATABASE_URL",
            "MONGODB_URI",
            "GITHUB_TOKEN",
            "PRIVATE_KEY_PATH",
        ],
    )
    def test_sensitive_names_removed(self, name):
        env = EnvironmentSanitizer().sanitize({name: "secret", "PATH": "/bin"})
        assert name not in env

    def test_exact_names_only_match_exactly(self):
        """KEY is an exact name, so KEYBOARD_LAYOUT survives."""
        env = EnvironmentSanitizer().sanitize({"KEYBOARD_LAYOUT": "us", "MY_PASSWORD": "x"})
        assert env["KEYBOARD_LAYOUT"] == "us"
        assert env["MY_PASSWORD"] == "x"

    def test_ordinary_variables_kept(self):
        env = EnvironmentSanitizer().sanitize({"EDITOR": "vim", "NODE_ENV": "test"})
        assert env["EDITOR"] == "vim"
        assert env["NODE_ENV"] == "test"

    def test_baseline_forced(self):
        env = EnvironmentSanitizer().sanitize({"LANG": "C", "TERM": "dumb", "PATH": "/opt/bin"})
        assert env["LANG"] == "en_US.UTF-8"
        assert env["TERM"] == "dumb"
        assert env["PATH"] == "/opt/bin"

    def test_baseline_defaults(self):
        env = EnvironmentSanitizer().sanitize({})
        assert env["TERM"] == "xterm-256color"
        assert env["PATH"] == "/usr/local/bin:/usr/bin:/bin"
        assert env["HOME"]
        assert env["USER"]

    def test_extra_prefixes_and_names(self):
        sanitizer = EnvironmentSanitizer(extra_prefixes=["acme_"], extra_names=["pin"])
        env = sanitizer.sanitize({"ACME_TOKEN": "x", "PIN": "1234", "EDITOR": "vim"})
        assert "ACME_TOKEN" not in env
        assert "PIN" not in env
        assert env["EDITOR"] == "vim"

    def test_is_sensitive(self):
        sanitizer = EnvironmentSanitizer()
        assert sanitizer.is_sensitive("anthropic_api_key")
        assert not sanitizer.is_sensitive("SHELL")


# =============================================================================
# SPAWN HELPERS
# =============================================================================

class TestSecureTemporaryFilePath:
    """Tests for secure_temporary_file_path."""

    def test_location_and_name(self):
        path = secure_temporary_file_path(".py")
        assert path.parent == Path(tempfile.gettempdir())
        assert re.fullmatch(r"exec_guard_[0-9a-f]{32}\.py", path.name)
        assert not path.exists()

    def test_unpredictable(self):
        assert secure_temporary_file_path() != secure_temporary_file_path()


class TestQuoteCommandArg:
    """Tests for quote_command_arg."""

    def test_posix_quoting(self):
        assert quote_command_arg("hello world", UNIX_PROFILE) == "'hello world'"
        assert quote_command_arg("it's", UNIX_PROFILE) == "'it'\\''s'"

    def test_windows_quoting(self):
        assert quote_command_arg('say "hi"', WINDOWS_PROFILE) == '"say \\"hi\\""'

    def test_nul_bytes_removed(self):
        assert quote_command_arg("a\0b", UNIX_PROFILE) == "'ab'"
