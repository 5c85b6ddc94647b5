"""
Execution Guard
===============

Security gateway between an AI agent's proposed terminal commands or code
snippets and the host operating system.

This package provides:
- Rule-table based validation of commands and code (models, rules, rule_table,
  validators)
- Advisory risk warnings for allowed commands
- Per-agent rate limiting with escalating cooldowns
- Secret-free spawn environments and working-directory checks
- An append-only, date-partitioned JSONL audit trail
- A single-resolution human approval gate
- ExecutionGateway: the pre-execution check composing all of the above

Usage:
    from exec_guard import ExecutionGateway, load_gateway_config

    gateway = ExecutionGateway(load_gateway_config())
    report = gateway.pre_execution_check(
        agent_id="agent-1", user_id="user-1", kind="terminal",
        command="ls -la", reason="List files",
    )
    if not report.allowed:
        print(report.validation.reason)
"""

from .approval import ApprovalGate, ApprovalHandle, ApprovalKind, ApprovalRequest, ApprovalStatus
from .audit_log import AuditLog
from .config import GatewayConfigLoader, clear_config_cache, load_gateway_config
from .environment import (
    EnvironmentSanitizer,
    quote_command_arg,
    sanitize_environment,
    secure_temporary_file_path,
)
from .gateway import ExecutionGateway
from .models import (
    AuditLogEntry,
    AuditUpdateRecord,
    ExecutionKind,
    ExecutionResult,
    GatewayConfig,
    PreExecutionReport,
    RateLimitConfig,
    Rule,
    SeverityLevel,
    ValidationResult,
)
from .path_guard import UNIX_PROFILE, WINDOWS_PROFILE, PathGuard, PlatformProfile, detect_platform
from .rate_limiter import RateLimiter
from .redact import redact_sensitive, safe_error_message
from .rule_table import RuleMatch, RuleTable, build_default_tables
from .rules import (
    RULESET_VERSION,
    get_default_rules,
    get_rule_by_id,
    list_rule_categories,
    list_rule_ids,
)
from .validators import (
    CodeValidator,
    CommandValidator,
    RiskAdvisor,
    get_command_risk_warnings,
    validate_code,
    validate_command,
)

__version__ = "0.1.0"

__all__ = [
    # Gateway
    "ExecutionGateway",
    "PreExecutionReport",
    # Models
    "SeverityLevel",
    "ExecutionKind",
    "ExecutionResult",
    "Rule",
    "ValidationResult",
    "AuditLogEntry",
    "AuditUpdateRecord",
    "RateLimitConfig",
    "GatewayConfig",
    # Rules
    "RuleTable",
    "RuleMatch",
    "build_default_tables",
    "RULESET_VERSION",
    "get_default_rules",
    "get_rule_by_id",
    "list_rule_categories",
    "list_rule_ids",
    # Validators
    "CommandValidator",
    "CodeValidator",
    "RiskAdvisor",
    "validate_command",
    "validate_code",
    "get_command_risk_warnings",
    # Components
    "RateLimiter",
    "EnvironmentSanitizer",
    "sanitize_environment",
    "secure_temporary_file_path",
    "quote_command_arg",
    "PathGuard",
    "PlatformProfile",
    "UNIX_PROFILE",
    "WINDOWS_PROFILE",
    "detect_platform",
    "AuditLog",
    "redact_sensitive",
    "safe_error_message",
    # Approvals
    "ApprovalGate",
    "ApprovalHandle",
    "ApprovalKind",
    "ApprovalRequest",
    "ApprovalStatus",
    # Config
    "GatewayConfigLoader",
    "load_gateway_config",
    "clear_config_cache",
]
