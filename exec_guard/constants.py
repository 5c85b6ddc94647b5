"""
Execution Guard Constants
=========================

Shared constants for the execution security gateway.
"""

# Environment variable that overrides the audit log directory
AUDIT_LOG_DIR_ENV_VAR = "EXEC_GUARD_AUDIT_LOG_DIR"

# Default audit directory, relative to the host process working directory
DEFAULT_AUDIT_SUBDIR = ("data", "audit")

# Audit files are partitioned by UTC calendar day
AUDIT_FILE_PREFIX = "exec-audit-"
AUDIT_FILE_SUFFIX = ".jsonl"

# Configuration filenames, searched in order
CONFIG_FILENAMES = [
    "exec-guard.json",
    "exec-guard.yaml",
    "exec-guard.yml",
]

# =============================================================================
# RATE LIMITING
# =============================================================================

DEFAULT_MAX_EXECUTIONS_PER_MINUTE = 10
DEFAULT_MAX_EXECUTIONS_PER_HOUR = 60
DEFAULT_COOLDOWN_SECONDS = 60.0

# The hourly cooldown is this many times the base cooldown
HOURLY_COOLDOWN_MULTIPLIER = 5

MINUTE_WINDOW_SECONDS = 60.0
HOUR_WINDOW_SECONDS = 3600.0

# =============================================================================
# CODE ANALYSIS
# =============================================================================

# Code larger than this is refused outright (characters)
MAX_CODE_SIZE = 100_000

DEFAULT_CODE_LANGUAGE = "python"

LANGUAGE_ALIASES = {
    "py": "python",
    "js": "javascript",
    "node.js": "node",
}

# =============================================================================
# APPROVALS
# =============================================================================

# Pending approvals are denied after this many seconds without an answer
DEFAULT_APPROVAL_TIMEOUT_SECONDS = 120.0

# =============================================================================
# SPAWN HELPERS
# =============================================================================

TEMP_FILE_PREFIX = "exec_guard_"

SAFE_DEFAULT_LANG = "en_US.UTF-8"
SAFE_DEFAULT_TERM = "xterm-256color"
SAFE_DEFAULT_PATH = "/usr/local/bin:/usr/bin:/bin"
