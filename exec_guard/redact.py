"""
Secret Redaction
================

Scrubs well-known credential shapes out of free text before it is logged
or persisted.

This module provides:
- redact_sensitive(): Replace secrets in a string with [REDACTED]
- safe_error_message(): Redacted, length-capped message for an exception

Used for audit diagnostics and, when enabled in GatewayConfig, for the
command, code and block reason stored in audit entries.
"""

from __future__ import annotations

import re

REDACTION = "[REDACTED]"

MAX_ERROR_MESSAGE_LENGTH = 600

SECRET_PATTERNS = [
    re.compile(r"\bBearer\s+[A-Za-z0-9._\-+/=]{10,}\b", re.IGNORECASE),
    re.compile(r"\b(sk-(?:or-v1-|proj-)?[A-Za-z0-9_\-]{12,})\b"),
    re.compile(r"\b(sk-ant-[A-Za-z0-9_\-]{12,})\b"),
    re.compile(r"\bAIza[0-9A-Za-z\-_]{20,}\b"),
    re.compile(r"\b(gsk_[A-Za-z0-9_\-]{12,})\b"),
    re.compile(r"\b(or-[A-Za-z0-9_\-]{12,})\b"),
    re.compile(r"\b(xox[baprs]-[A-Za-z0-9\-]{12,})\b"),
    # App-specific passwords (xxxx-xxxx-xxxx-xxxx)
    re.compile(r"\b[a-z]{4}-[a-z]{4}-[a-z]{4}-[a-z]{4}\b", re.IGNORECASE),
    # Google OAuth client secrets
    re.compile(r"\bGOCSPX-[A-Za-z0-9_\-]{20,}\b"),
    # Google refresh tokens
    re.compile(r"\b1//[A-Za-z0-9_\-]{20,}\b"),
    # Basic auth headers
    re.compile(r"\bBasic\s+[A-Za-z0-9+/=]{16,}\b", re.IGNORECASE),
    # Telegram bot tokens
    re.compile(r"\b\d{8,}:[A-Za-z0-9_\-]{30,}\b"),
]

QUERY_SECRET_PATTERN = re.compile(
    r"([?&](?:api[_-]?key|apikey|access[_-]?token|token|key)=)([^&\s]+)",
    re.IGNORECASE,
)
HEADER_SECRET_PATTERN = re.compile(
    r"((?:x-api-key|authorization)\s*[:=]\s*)([^\s,;]+)",
    re.IGNORECASE,
)


def redact_sensitive(value: str | None) -> str:
    """
    Replace credential-looking substrings with [REDACTED].

    Args:
        value: Text that may contain secrets

    Returns:
        Redacted text ("" for empty input)

    Example:
        >>> redact_sensitive("GET /v1/models?api_key=abc123")
        'GET /v1/models?api_key=[REDACTED]'
    """
    if not value:
        return ""

    redacted = value
    for pattern in SECRET_PATTERNS:
        redacted = pattern.sub(REDACTION, redacted)

    redacted = QUERY_SECRET_PATTERN.sub(rf"\g<1>{REDACTION}", redacted)
    redacted = HEADER_SECRET_PATTERN.sub(rf"\g<1>{REDACTION}", redacted)
    return redacted


def safe_error_message(error: object, fallback: str = "Unknown error") -> str:
    """
    Turn an exception (or string) into a message safe to log.

    Args:
        error: Exception, string or anything else
        fallback: Used when there is no usable message

    Returns:
        Redacted message, at most 600 characters
    """
    if isinstance(error, BaseException):
        raw = str(error)
    elif isinstance(error, str):
        raw = error
    else:
        raw = fallback

    message = redact_sensitive(raw or fallback).strip()
    if not message:
        return fallback
    if len(message) > MAX_ERROR_MESSAGE_LENGTH:
        return message[: MAX_ERROR_MESSAGE_LENGTH - 3] + "..."
    return message
