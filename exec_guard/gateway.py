"""
Execution Gateway
=================

Pre-execution check for agent-proposed terminal commands and code.
This is the main entry point of the package.

The gateway:
- Applies the per-agent rate limit (a refusal short-circuits everything else)
- Routes to the kind-specific validator (command or code)
- Collects advisory risk warnings for terminal commands
- Validates the working directory for allowed terminal commands
- Writes exactly one audit entry per check, whatever the verdict

Usage:
    gateway = ExecutionGateway(load_gateway_config())

    report = gateway.pre_execution_check(
        agent_id="agent-1",
        user_id="user-1",
        kind="terminal",
        command="ls -la",
        reason="Inspect the build directory",
        working_directory="/home/me/project",
    )
    if report.allowed:
        started = time.monotonic()
        subprocess.run(..., env=gateway.sanitize_environment())
        gateway.update_audit_entry_result(
            report.audit_entry.id, "success", int((time.monotonic() - started) * 1000)
        )
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Callable

from .audit_log import AuditLog
from .environment import EnvironmentSanitizer
from .models import (
    AuditLogEntry,
    ExecutionKind,
    ExecutionResult,
    GatewayConfig,
    PreExecutionReport,
    ValidationResult,
)
from .path_guard import PathGuard, PlatformProfile
from .rate_limiter import RateLimiter
from .redact import redact_sensitive
from .rule_table import build_default_tables
from .validators import CodeValidator, CommandValidator, RiskAdvisor, normalize_language


# =============================================================================
# LOGGER
# =============================================================================

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class ExecutionGateway:
    """
    Service object composing every pre-execution check.

    Each gateway owns its own rate-limiter state and audit directory, so
    several isolated instances can live in one process.

    Args:
        config: Gateway configuration (defaults when None)
        clock: Monotonic clock in seconds, for rate limiting
        wall_clock: Epoch milliseconds, for audit ids and timestamps
        platform: Platform profile for working-directory checks
        rate_limiter: Prebuilt rate limiter (overrides config.rate_limit)
        audit_log: Prebuilt audit log (overrides the configured directory)
        environment_sanitizer: Prebuilt sanitizer (overrides config lists)
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        clock: Callable[[], float] | None = None,
        wall_clock: Callable[[], int] | None = None,
        platform: PlatformProfile | None = None,
        rate_limiter: RateLimiter | None = None,
        audit_log: AuditLog | None = None,
        environment_sanitizer: EnvironmentSanitizer | None = None,
    ):
        self.config = config or GatewayConfig()
        self._wall_clock = wall_clock or _epoch_ms

        tables = build_default_tables(self.config.disabled_rules)
        self.command_validator = CommandValidator(tables["blocked_command"])
        self.code_validator = CodeValidator(tables["blocked_code"], tables["embedded_shell"])
        self.risk_advisor = RiskAdvisor(tables["advisory_command"])

        self.rate_limiter = rate_limiter or RateLimiter(self.config.rate_limit, clock=clock)
        self.path_guard = PathGuard(platform, self.config.extra_restricted_paths)
        self.audit_log = audit_log or AuditLog(self.config.resolve_audit_log_dir())
        self.environment_sanitizer = environment_sanitizer or EnvironmentSanitizer(
            self.config.extra_sensitive_env_prefixes,
            self.config.extra_sensitive_env_names,
        )

    # -------------------------------------------------------------------------
    # Pre-execution check
    # -------------------------------------------------------------------------

    def pre_execution_check(
        self,
        agent_id: str,
        user_id: str,
        kind: ExecutionKind | str,
        command: str | None = None,
        code: str | None = None,
        language: str | None = None,
        reason: str = "",
        working_directory: str | None = None,
    ) -> PreExecutionReport:
        """
        Decide whether an agent may run a command or code snippet.

        Args:
            agent_id: Agent proposing the action
            user_id: User the agent acts for
            kind: "terminal" or "code"
            command: Command string (terminal)
            code: Source code (code)
            language: Code language (defaults to the configured language)
            reason: The agent's stated reason for the action
            working_directory: Requested working directory (terminal)

        Returns:
            PreExecutionReport with the verdict, risk warnings and the
            audit entry written for this decision

        Raises:
            ValueError: If ``kind`` is not a known execution kind
        """
        kind = ExecutionKind(kind)
        if kind == ExecutionKind.CODE:
            language = normalize_language(language or self.config.default_code_language)
        risk_warnings: list[str] = []

        validation = self.rate_limiter.check(agent_id)
        if validation.allowed:
            if kind == ExecutionKind.TERMINAL:
                validation = self.command_validator.validate(command)
                risk_warnings = self.risk_advisor.warnings(command)
                if validation.allowed and working_directory:
                    validation = self.path_guard.validate(working_directory)
            else:
                validation = self.code_validator.validate(code, language)

        entry = self._build_entry(
            agent_id=agent_id,
            user_id=user_id,
            kind=kind,
            validation=validation,
            command=command if kind == ExecutionKind.TERMINAL else None,
            code=code if kind == ExecutionKind.CODE else None,
            language=language if kind == ExecutionKind.CODE else None,
            reason=reason,
            working_directory=working_directory,
        )
        self.audit_log.write(entry)
        self._log_decision(entry, validation, risk_warnings)

        return PreExecutionReport(
            validation=validation,
            risk_warnings=risk_warnings,
            audit_entry=entry,
        )

    def _build_entry(
        self,
        agent_id: str,
        user_id: str,
        kind: ExecutionKind,
        validation: ValidationResult,
        command: str | None,
        code: str | None,
        language: str | None,
        reason: str,
        working_directory: str | None,
    ) -> AuditLogEntry:
        timestamp = self._wall_clock()
        block_reason = validation.reason if not validation.allowed else None

        if self.config.redact_audit_secrets:
            command = redact_sensitive(command) if command else command
            code = redact_sensitive(code) if code else code
            block_reason = redact_sensitive(block_reason) if block_reason else block_reason

        return AuditLogEntry(
            id=f"audit-{timestamp}-{secrets.token_hex(4)}",
            timestamp=timestamp,
            agent_id=agent_id,
            user_id=user_id,
            kind=kind,
            reason=reason,
            approved=validation.allowed,
            blocked=not validation.allowed,
            block_reason=block_reason,
            severity=validation.severity if not validation.allowed else None,
            command=command,
            code=code,
            language=language,
            working_directory=working_directory,
        )

    def _log_decision(
        self,
        entry: AuditLogEntry,
        validation: ValidationResult,
        risk_warnings: list[str],
    ) -> None:
        if not validation.allowed:
            severity = validation.severity.value if validation.severity else "unknown"
            logger.warning(
                f"Blocked {entry.kind.value} for agent {entry.agent_id} "
                f"[{severity}]: {entry.block_reason}"
            )
            return

        if risk_warnings:
            logger.info(
                f"Allowed {entry.kind.value} for agent {entry.agent_id} with warnings: "
                f"{'; '.join(risk_warnings)}"
            )
        else:
            logger.debug(f"Allowed {entry.kind.value} for agent {entry.agent_id} ({entry.id})")

    # -------------------------------------------------------------------------
    # Audit trail
    # -------------------------------------------------------------------------

    def update_audit_entry_result(
        self,
        audit_id: str,
        result: ExecutionResult | str,
        duration_ms: int,
    ) -> bool:
        """
        Record how an allowed execution ended.

        Raises:
            ValueError: If ``result`` is not success, error or timeout
        """
        return self.audit_log.update_result(audit_id, ExecutionResult(result), duration_ms)

    def read_recent_audit_logs(self, limit: int = 50) -> list[AuditLogEntry]:
        """Most recent entries of today's audit file, with results merged in."""
        return self.audit_log.read_recent(limit)

    # -------------------------------------------------------------------------
    # Spawn support
    # -------------------------------------------------------------------------

    def sanitize_environment(self) -> dict[str, str]:
        """Environment for spawned processes, with secrets removed."""
        return self.environment_sanitizer.sanitize()

    def validate_working_directory(self, path: str) -> ValidationResult:
        """Validate a working directory against the platform's restricted paths."""
        return self.path_guard.validate(path)
