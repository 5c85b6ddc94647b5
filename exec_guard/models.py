"""
Data Models for the Execution Gateway
=====================================

Defines the core data structures shared by every layer of the gateway that
sits between an agent's proposed terminal commands / code snippets and the
host operating system.

This module provides:
- Enums for severity levels, execution kinds and execution outcomes
- Rule: Declarative detection rule (pattern, reason, severity, scope)
- ValidationResult: Verdict returned by every validator
- AuditLogEntry / AuditUpdateRecord: On-disk audit records
- RateLimitConfig / GatewayConfig: Tunable settings
- PreExecutionReport: What the gateway hands back to the caller
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .constants import (
    AUDIT_LOG_DIR_ENV_VAR,
    DEFAULT_APPROVAL_TIMEOUT_SECONDS,
    DEFAULT_AUDIT_SUBDIR,
    DEFAULT_CODE_LANGUAGE,
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_MAX_EXECUTIONS_PER_HOUR,
    DEFAULT_MAX_EXECUTIONS_PER_MINUTE,
)


class SeverityLevel(str, Enum):
    """
    Severity levels for refusals.

    Severity is informational: a CRITICAL and a HIGH refusal are both simply
    refusals. It is surfaced to callers, logged and stored in the audit trail.

    Attributes:
        CRITICAL: Destroys, exfiltrates or takes over the host (rm -rf /)
        HIGH: Dangerous, security-relevant (restricted directory, SUID bits)
        MEDIUM: Malformed or throttled request (empty command, rate limit)
        LOW: Usability error (working directory does not exist)
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER = {
    SeverityLevel.LOW: 0,
    SeverityLevel.MEDIUM: 1,
    SeverityLevel.HIGH: 2,
    SeverityLevel.CRITICAL: 3,
}


class ExecutionKind(str, Enum):
    """What the agent wants to run."""

    TERMINAL = "terminal"
    CODE = "code"


class ExecutionResult(str, Enum):
    """Outcome reported by the caller after execution finished."""

    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Rule:
    """
    A single detection rule.

    Rules are static data: they are declared once in ``rules.py`` and never
    mutated at runtime. Patterns carry their own inline flags (``(?i)``).

    Attributes:
        rule_id: Unique identifier (e.g., "cmd-rm-rf-root")
        pattern: Regex source
        reason: Human-readable explanation shown when the rule fires
        severity: Severity attached to the refusal or warning
        languages: Languages the rule applies to (None = every language)
        category: Grouping used for listing and filtering
    """

    rule_id: str
    pattern: str
    reason: str
    severity: SeverityLevel = SeverityLevel.HIGH
    languages: frozenset[str] | None = None
    category: str = "general"

    def applies_to(self, language: str | None) -> bool:
        """Check whether the rule's language scope includes ``language``."""
        if self.languages is None:
            return True
        return language is not None and language in self.languages

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "rule_id": self.rule_id,
            "pattern": self.pattern,
            "reason": self.reason,
            "severity": self.severity.value,
            "languages": sorted(self.languages) if self.languages is not None else None,
            "category": self.category,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Verdict of a validation check.

    Produced fresh per call and never mutated.

    Attributes:
        allowed: Whether the request may proceed
        reason: Why the request was refused
        severity: Severity of the refusal
        matched_pattern: Pattern (or detector label) that matched
        rule_id: ID of the rule that fired, when a table rule fired
    """

    allowed: bool
    reason: str | None = None
    severity: SeverityLevel | None = None
    matched_pattern: str | None = None
    rule_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "severity": self.severity.value if self.severity else None,
            "matched_pattern": self.matched_pattern,
            "rule_id": self.rule_id,
        }

    @classmethod
    def allow(cls) -> "ValidationResult":
        """Create a result that allows the request."""
        return cls(allowed=True)

    @classmethod
    def block(
        cls,
        reason: str,
        severity: SeverityLevel,
        matched_pattern: str | None = None,
        rule_id: str | None = None,
    ) -> "ValidationResult":
        """Create a result that refuses the request."""
        return cls(
            allowed=False,
            reason=reason,
            severity=severity,
            matched_pattern=matched_pattern,
            rule_id=rule_id,
        )


@dataclass
class AuditLogEntry:
    """
    One audit record of a single validation decision.

    Written once, at validation time. Execution outcomes are appended later
    as separate ``AuditUpdateRecord`` lines referencing ``id``.

    Attributes:
        id: Unique entry id ("audit-<ms>-<hex>")
        timestamp: Epoch milliseconds (UTC)
        agent_id: Agent that proposed the action
        user_id: User the agent acts for
        kind: Terminal command or code snippet
        reason: The agent's stated reason for the action
        approved: Whether validation allowed the request
        blocked: Whether validation refused the request
        block_reason: Refusal reason (if blocked)
        severity: Refusal severity (if blocked)
        command / code / language: The proposed action
        working_directory: Requested working directory
        execution_result / duration_ms: Filled in from update records on read
    """

    id: str
    timestamp: int
    agent_id: str
    user_id: str
    kind: ExecutionKind
    reason: str = ""
    approved: bool = False
    blocked: bool = False
    block_reason: str | None = None
    severity: SeverityLevel | None = None
    command: str | None = None
    code: str | None = None
    language: str | None = None
    working_directory: str | None = None
    execution_result: ExecutionResult | None = None
    duration_ms: int | None = None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict, omitting unset optional fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "agent_id": self.agent_id,
            "user_id": self.user_id,
            "kind": self.kind.value,
            "reason": self.reason,
            "approved": self.approved,
            "blocked": self.blocked,
        }
        optional = {
            "block_reason": self.block_reason,
            "severity": self.severity.value if self.severity else None,
            "command": self.command,
            "code": self.code,
            "language": self.language,
            "working_directory": self.working_directory,
            "execution_result": (
                self.execution_result.value if self.execution_result else None
            ),
            "duration_ms": self.duration_ms,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AuditLogEntry":
        """Load from dict."""
        severity = None
        if data.get("severity"):
            try:
                severity = SeverityLevel(data["severity"])
            except ValueError:
                pass

        execution_result = None
        if data.get("execution_result"):
            try:
                execution_result = ExecutionResult(data["execution_result"])
            except ValueError:
                pass

        return cls(
            id=data["id"],
            timestamp=int(data["timestamp"]),
            agent_id=data.get("agent_id", ""),
            user_id=data.get("user_id", ""),
            kind=ExecutionKind(data["kind"]),
            reason=data.get("reason", ""),
            approved=bool(data.get("approved", False)),
            blocked=bool(data.get("blocked", False)),
            block_reason=data.get("block_reason"),
            severity=severity,
            command=data.get("command"),
            code=data.get("code"),
            language=data.get("language"),
            working_directory=data.get("working_directory"),
            execution_result=execution_result,
            duration_ms=data.get("duration_ms"),
        )


@dataclass(frozen=True)
class AuditUpdateRecord:
    """
    Execution outcome appended after the fact for an existing entry.

    Tagged ``"type": "update"`` on disk so the read path can tell it apart
    from decision entries.
    """

    audit_id: str
    execution_result: ExecutionResult
    duration_ms: int
    timestamp: int

    RECORD_TYPE = "update"

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "type": self.RECORD_TYPE,
            "audit_id": self.audit_id,
            "execution_result": self.execution_result.value,
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditUpdateRecord":
        """Load from dict."""
        return cls(
            audit_id=data["audit_id"],
            execution_result=ExecutionResult(data["execution_result"]),
            duration_ms=int(data.get("duration_ms", 0)),
            timestamp=int(data.get("timestamp", 0)),
        )


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Per-agent execution limits.

    Attributes:
        max_executions_per_minute: Executions allowed in any trailing minute
        max_executions_per_hour: Executions allowed in any trailing hour
        cooldown_after_block_seconds: Base cooldown after a limit is hit
            (the hourly limit uses five times this value)
    """

    max_executions_per_minute: int = DEFAULT_MAX_EXECUTIONS_PER_MINUTE
    max_executions_per_hour: int = DEFAULT_MAX_EXECUTIONS_PER_HOUR
    cooldown_after_block_seconds: float = DEFAULT_COOLDOWN_SECONDS

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "max_executions_per_minute": self.max_executions_per_minute,
            "max_executions_per_hour": self.max_executions_per_hour,
            "cooldown_after_block_seconds": self.cooldown_after_block_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RateLimitConfig":
        """Load from dict."""
        return cls(
            max_executions_per_minute=data.get(
                "max_executions_per_minute", DEFAULT_MAX_EXECUTIONS_PER_MINUTE
            ),
            max_executions_per_hour=data.get(
                "max_executions_per_hour", DEFAULT_MAX_EXECUTIONS_PER_HOUR
            ),
            cooldown_after_block_seconds=float(
                data.get("cooldown_after_block_seconds", DEFAULT_COOLDOWN_SECONDS)
            ),
        )


@dataclass
class GatewayConfig:
    """
    Configuration for the execution gateway.

    Loaded from exec-guard.{json,yaml,yml} by ``config.load_gateway_config``
    or constructed directly by the host process.

    Attributes:
        rate_limit: Per-agent execution limits
        audit_log_dir: Directory for daily audit files (None = env var / default)
        extra_sensitive_env_prefixes: Additional secret-bearing env prefixes
        extra_sensitive_env_names: Additional secret-bearing exact env names
        extra_restricted_paths: Additional forbidden working directories
        disabled_rules: Rule IDs removed from every rule table
        default_code_language: Language assumed when a code request has none
        approval_timeout_seconds: Seconds before a pending approval is denied
        redact_audit_secrets: Redact credentials in audit entry text
        version: Config schema version
    """

    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    audit_log_dir: str | None = None
    extra_sensitive_env_prefixes: list[str] = field(default_factory=list)
    extra_sensitive_env_names: list[str] = field(default_factory=list)
    extra_restricted_paths: list[str] = field(default_factory=list)
    disabled_rules: list[str] = field(default_factory=list)
    default_code_language: str = DEFAULT_CODE_LANGUAGE
    approval_timeout_seconds: float = DEFAULT_APPROVAL_TIMEOUT_SECONDS
    redact_audit_secrets: bool = True
    version: str = "1.0"

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "rate_limit": self.rate_limit.to_dict(),
            "audit_log_dir": self.audit_log_dir,
            "extra_sensitive_env_prefixes": self.extra_sensitive_env_prefixes,
            "extra_sensitive_env_names": self.extra_sensitive_env_names,
            "extra_restricted_paths": self.extra_restricted_paths,
            "disabled_rules": self.disabled_rules,
            "default_code_language": self.default_code_language,
            "approval_timeout_seconds": self.approval_timeout_seconds,
            "redact_audit_secrets": self.redact_audit_secrets,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GatewayConfig":
        """Load from dict."""
        return cls(
            rate_limit=RateLimitConfig.from_dict(data.get("rate_limit") or {}),
            audit_log_dir=data.get("audit_log_dir"),
            extra_sensitive_env_prefixes=data.get("extra_sensitive_env_prefixes", []),
            extra_sensitive_env_names=data.get("extra_sensitive_env_names", []),
            extra_restricted_paths=data.get("extra_restricted_paths", []),
            disabled_rules=data.get("disabled_rules", []),
            default_code_language=data.get("default_code_language", DEFAULT_CODE_LANGUAGE),
            approval_timeout_seconds=float(
                data.get("approval_timeout_seconds", DEFAULT_APPROVAL_TIMEOUT_SECONDS)
            ),
            redact_audit_secrets=data.get("redact_audit_secrets", True),
            version=data.get("version", "1.0"),
        )

    def resolve_audit_log_dir(self) -> Path:
        """
        Resolve the audit directory.

        Precedence: explicit ``audit_log_dir``, then the
        EXEC_GUARD_AUDIT_LOG_DIR environment variable, then
        ``<cwd>/data/audit``.
        """
        if self.audit_log_dir:
            return Path(self.audit_log_dir).resolve()

        from_env = os.environ.get(AUDIT_LOG_DIR_ENV_VAR, "").strip()
        if from_env:
            return Path(from_env).resolve()

        return Path.cwd().joinpath(*DEFAULT_AUDIT_SUBDIR)


@dataclass
class PreExecutionReport:
    """
    Everything the gateway returns for one proposed action.

    Attributes:
        validation: Final verdict
        risk_warnings: Advisory warnings (terminal commands only)
        audit_entry: The entry written for this decision
    """

    validation: ValidationResult
    risk_warnings: list[str]
    audit_entry: AuditLogEntry

    @property
    def allowed(self) -> bool:
        return self.validation.allowed
