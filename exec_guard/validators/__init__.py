"""
Kind-Specific Validators
========================

Validators for each kind of action an agent can propose:
- command_validator: terminal commands (blocked-command table + obfuscation)
- code_validator: code snippets (language-scoped table + embedded shell)
- risk_advisor: advisory warnings for allowed terminal commands

Each validator is a small class over a RuleTable, plus a module-level
function bound to the default tables for callers that need no
configuration.
"""

from .code_validator import CodeValidator, normalize_language, validate_code
from .command_validator import CommandValidator, split_command_chain, validate_command
from .risk_advisor import RiskAdvisor, get_command_risk_warnings

__all__ = [
    "CommandValidator",
    "CodeValidator",
    "RiskAdvisor",
    "validate_command",
    "validate_code",
    "get_command_risk_warnings",
    "split_command_chain",
    "normalize_language",
]
