"""
Environment Sanitizer and Spawn Helpers
=======================================

Builds the environment handed to agent-spawned processes and provides
small helpers used when spawning them.

This module provides:
- EnvironmentSanitizer: Copy of the host environment minus secrets
- sanitize_environment(): Same, with the default sensitive lists
- secure_temporary_file_path(): Unpredictable temp file path for code files
- quote_command_arg(): Quote one argument for the host shell

A variable is dropped when its upper-cased name is exactly one of the
sensitive names or starts with one of the sensitive prefixes. The host
environment itself is never modified.
"""

from __future__ import annotations

import getpass
import logging
import os
import secrets
import tempfile
from pathlib import Path
from typing import Iterable, Mapping

from .constants import SAFE_DEFAULT_LANG, SAFE_DEFAULT_PATH, SAFE_DEFAULT_TERM, TEMP_FILE_PREFIX
from .path_guard import PlatformProfile, detect_platform

logger = logging.getLogger(__name__)


# =============================================================================
# SENSITIVE VARIABLES
# =============================================================================

SENSITIVE_ENV_PREFIXES = (
    # AI providers
    "OPENAI_",
    "ANTHROPIC_",
    "GROQ_",
    "GOOGLE_AI_",
    "OPENROUTER_",
    "TELEGRAM_",
    # Cloud
    "AWS_",
    "AZURE_",
    "GCP_",
    "GITHUB_TOKEN",
    "NPM_TOKEN",
    "DOCKER_",
    # Data stores
    "DATABASE_",
    "DB_",
    "MONGO",
    "REDIS_",
    # Mail and messaging
    "SMTP_",
    "MAIL_",
    # Auth and crypto
    "JWT_",
    "SESSION_SECRET",
    "ENCRYPTION_",
    # Payments and SaaS
    "STRIPE_",
    "PAYPAL_",
    "TWILIO_",
    "SENDGRID_",
    "ICLOUD_",
    "GMAIL_",
    # Generic
    "OAUTH_",
    "CLIENT_SECRET",
    "PRIVATE_KEY",
    "SECRET_KEY",
    "API_KEY",
    "ACCESS_TOKEN",
    "REFRESH_TOKEN",
    "AUTH_",
    "COOKIE_SECRET",
)

SENSITIVE_ENV_NAMES = frozenset({
    "PASSWORD",
    "PASSWD",
    "PASS",
    "SECRET",
    "TOKEN",
    "KEY",
    "CREDENTIALS",
    "CERT",
    "CERTIFICATE",
})


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "user"


# =============================================================================
# SANITIZER
# =============================================================================

class EnvironmentSanitizer:
    """
    Produces a spawn environment with secret-bearing variables removed.

    Args:
        extra_prefixes: Additional sensitive prefixes (matched upper-case)
        extra_names: Additional sensitive exact names (matched upper-case)

    Example:
        env = EnvironmentSanitizer(extra_prefixes=["ACME_"]).sanitize()
        subprocess.run(["ls"], env=env)
    """

    def __init__(
        self,
        extra_prefixes: Iterable[str] = (),
        extra_names: Iterable[str] = (),
    ) -> None:
        self.prefixes = SENSITIVE_ENV_PREFIXES + tuple(p.upper() for p in extra_prefixes)
        self.names = SENSITIVE_ENV_NAMES | {n.upper() for n in extra_names}

    def is_sensitive(self, name: str) -> bool:
        """Check whether a variable name looks like it holds a secret."""
        upper = name.upper()
        return upper in self.names or upper.startswith(self.prefixes)

    def sanitize(self, environ: Mapping[str, str] | None = None) -> dict[str, str]:
        """
        Build a sanitized copy of an environment.

        Args:
            environ: Source environment (os.environ when None)

        Returns:
            New dict without sensitive variables, with LANG forced and
            TERM, PATH, HOME and USER guaranteed to be present
        """
        source = os.environ if environ is None else environ

        safe = {}
        removed = 0
        for name, value in source.items():
            if value is None:
                continue
            if self.is_sensitive(name):
                removed += 1
                continue
            safe[name] = value

        if removed:
            logger.debug(f"Removed {removed} sensitive variable(s) from spawn environment")

        safe["LANG"] = SAFE_DEFAULT_LANG
        safe["TERM"] = source.get("TERM") or SAFE_DEFAULT_TERM
        safe["PATH"] = source.get("PATH") or SAFE_DEFAULT_PATH
        safe["HOME"] = source.get("HOME") or str(Path.home())
        safe["USER"] = source.get("USER") or _current_user()
        return safe


def sanitize_environment(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Sanitize an environment with the default sensitive lists."""
    return EnvironmentSanitizer().sanitize(environ)


# =============================================================================
# SPAWN HELPERS
# =============================================================================

def secure_temporary_file_path(extension: str = "") -> Path:
    """
    Generate an unpredictable path in the system temp directory.

    The file is not created.

    Args:
        extension: Suffix including the dot (e.g., ".py")

    Returns:
        <tempdir>/exec_guard_<32 hex chars><extension>
    """
    return Path(tempfile.gettempdir()) / f"{TEMP_FILE_PREFIX}{secrets.token_hex(16)}{extension}"


def quote_command_arg(arg: str, profile: PlatformProfile | None = None) -> str:
    """
    Quote one argument for the host shell.

    NUL bytes are removed first. POSIX shells get single quotes with
    embedded quotes written as '\\''. Windows gets double quotes with
    embedded quotes backslash-escaped.

    Args:
        arg: Raw argument
        profile: Platform whose shell will parse the argument (host when None)

    Returns:
        Quoted argument
    """
    profile = profile or detect_platform()

    cleaned = arg.replace("\0", "")
    if profile.is_windows:
        return '"' + cleaned.replace('"', '\\"') + '"'
    return "'" + cleaned.replace("'", "'\\''") + "'"
