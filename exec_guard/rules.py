"""
Default Detection Rules
=======================

Declarative catalogue of the patterns the gateway checks before anything an
agent proposes is allowed to run.

This module provides:
- BLOCKED_COMMAND_RULES: Shell commands that are always refused
- ADVISORY_COMMAND_RULES: Risky shell commands that only produce warnings
- BLOCKED_CODE_RULES: Source code that is always refused (language scoped)
- EMBEDDED_SHELL_RULES: Source code shelling out to destructive commands
- Obfuscation detectors (base64 piped to a shell, hex escape literals)
- get_default_rules(): Filtered access to a table

Order matters: validators use first-match semantics, so earlier rules win.
New detections are added here as data; validator code does not change.
"""

from .models import SEVERITY_ORDER, Rule, SeverityLevel

RULESET_VERSION = "1.0"

PYTHON = frozenset({"python", "python3"})
NODE = frozenset({"node", "nodejs", "javascript"})

_CRIT = SeverityLevel.CRITICAL
_HIGH = SeverityLevel.HIGH

# ============================================================================
# BLOCKED COMMAND RULES
# ============================================================================

BLOCKED_COMMAND_RULES: list[Rule] = [
    # --------------------------------------------------------------------
    # Destructive filesystem operations
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-rm-root-fr",
        pattern=r"(?i)\brm\s+(-[a-zA-Z]*f[a-zA-Z]*\s+)?(-[a-zA-Z]*r[a-zA-Z]*\s+)?\s*/\s*$",
        reason="Recursive deletion of the root filesystem",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-rm-root-rf",
        pattern=r"(?i)\brm\s+(-[a-zA-Z]*r[a-zA-Z]*\s+)?(-[a-zA-Z]*f[a-zA-Z]*\s+)?\s*/\s*$",
        reason="Recursive deletion of the root filesystem",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-rm-rf-root",
        pattern=r"(?i)\brm\s+-[a-zA-Z]*r[a-zA-Z]*f[a-zA-Z]*\s+/($|\s)",
        reason="Forced recursive deletion of /",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-rm-fr-root",
        pattern=r"(?i)\brm\s+-[a-zA-Z]*f[a-zA-Z]*r[a-zA-Z]*\s+/($|\s)",
        reason="Forced recursive deletion of /",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-rm-no-preserve-root",
        pattern=r"(?i)\brm\b.*--no-preserve-root",
        reason="Attempt to delete the system root",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-mkfs",
        pattern=r"(?i)\bmkfs\b",
        reason="Filesystem formatting",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-format-windows",
        pattern=r"(?i)\bformat\s+[a-zA-Z]:",
        reason="Disk formatting (Windows)",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-dd-disk",
        pattern=r"(?i)\bdd\s+.*\bof=/dev/[sh]d[a-z]",
        reason="Raw write to a disk device",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-dd-nvme",
        pattern=r"(?i)\bdd\s+.*\bof=/dev/nvme",
        reason="Raw write to an NVMe device",
        severity=_CRIT,
        category="filesystem",
    ),
    Rule(
        rule_id="cmd-redirect-disk",
        pattern=r"(?i)>\s*/dev/[sh]d[a-z]",
        reason="Output redirected onto a disk device",
        severity=_CRIT,
        category="filesystem",
    ),
    # --------------------------------------------------------------------
    # Reverse shells
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-revshell-bash",
        pattern=r"(?i)\bbash\s+-i\s+>&?\s*/dev/tcp/",
        reason="Reverse shell via bash",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-netcat",
        pattern=r"(?i)\bnc\s+(-[a-zA-Z]*e[a-zA-Z]*\s+|.*-e\s+).*\b(ba)?sh\b",
        reason="Reverse shell via netcat",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-ncat",
        pattern=r"(?i)\bncat\s+.*(-[a-zA-Z]*e[a-zA-Z]*\s+|--exec).*\b(ba)?sh\b",
        reason="Reverse shell via ncat",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-socat",
        pattern=r"(?i)\bsocat\b.*\bexec\b.*\bsh\b",
        reason="Reverse shell via socat",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-python",
        pattern=r"(?i)\bpython[23]?\s+-c\s+.*\bsocket\b.*\bconnect\b",
        reason="Reverse shell via Python",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-perl",
        pattern=r"(?i)\bperl\s+-e\s+.*\bsocket\b.*\bINET\b",
        reason="Reverse shell via Perl",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-ruby",
        pattern=r"(?i)\bruby\s+-r\s*socket\b",
        reason="Reverse shell via Ruby",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-revshell-php",
        pattern=r"(?i)\bphp\s+-r\s+.*\bfsockopen\b",
        reason="Reverse shell via PHP",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-dev-tcp",
        pattern=r"(?i)/dev/tcp/[\d.]+/\d+",
        reason="Suspicious raw TCP connection",
        severity=_CRIT,
        category="reverse_shell",
    ),
    Rule(
        rule_id="cmd-mkfifo-netcat",
        pattern=r"(?i)\bmkfifo\b.*\bnc\b",
        reason="Named pipe with netcat (reverse shell technique)",
        severity=_CRIT,
        category="reverse_shell",
    ),
    # --------------------------------------------------------------------
    # Remote code execution
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-curl-pipe-shell",
        pattern=r"(?i)\bcurl\b.*\|\s*(ba)?sh\b",
        reason="Remote code execution: curl piped to a shell",
        severity=_CRIT,
        category="remote_execution",
    ),
    Rule(
        rule_id="cmd-wget-pipe-shell",
        pattern=r"(?i)\bwget\b.*\|\s*(ba)?sh\b",
        reason="Remote code execution: wget piped to a shell",
        severity=_CRIT,
        category="remote_execution",
    ),
    Rule(
        rule_id="cmd-curl-pipe-python",
        pattern=r"(?i)\bcurl\b.*\|\s*python",
        reason="Remote code execution: curl piped to python",
        severity=_CRIT,
        category="remote_execution",
    ),
    Rule(
        rule_id="cmd-wget-stdout-shell",
        pattern=r"(?i)\bwget\b.*-O\s*-\s*\|\s*(ba)?sh\b",
        reason="Remote code execution: wget piped to a shell",
        severity=_CRIT,
        category="remote_execution",
    ),
    # --------------------------------------------------------------------
    # Credential reads and exfiltration
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-read-credentials",
        pattern=r"(?i)\bcat\b.*/(etc/shadow|etc/passwd|\.ssh/|\.gnupg/|\.aws/credentials)",
        reason="Reads system credential files",
        severity=_CRIT,
        category="credentials",
    ),
    Rule(
        rule_id="cmd-exfil-dotenv",
        pattern=r"(?i)\bcat\b.*\.env\b.*\|\s*(curl|wget|nc|ncat)",
        reason="Exfiltration of environment variables",
        severity=_CRIT,
        category="credentials",
    ),
    Rule(
        rule_id="cmd-exfil-env",
        pattern=r"(?i)\benv\b\s*\|\s*(curl|wget|nc|ncat)",
        reason="Exfiltration of environment variables",
        severity=_CRIT,
        category="credentials",
    ),
    Rule(
        rule_id="cmd-exfil-file",
        pattern=r"(?i)\b(curl|wget|nc)\b.*\$\(cat\b",
        reason="File exfiltration over the network",
        severity=_HIGH,
        category="credentials",
    ),
    # --------------------------------------------------------------------
    # Privilege escalation
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-suid",
        pattern=r"(?i)\bchmod\s+[0-7]*[4-7][0-7]{2}\s+/usr/bin/|chmod\s+u\+s\b",
        reason="Attempt to set the SUID bit",
        severity=_CRIT,
        category="privilege_escalation",
    ),
    Rule(
        rule_id="cmd-chown-root",
        pattern=r"(?i)\bchown\s+root\b",
        reason="Attempt to change ownership to root",
        severity=_HIGH,
        category="privilege_escalation",
    ),
    Rule(
        rule_id="cmd-visudo",
        pattern=r"(?i)\bvisudo\b",
        reason="Modification of sudoers",
        severity=_CRIT,
        category="privilege_escalation",
    ),
    Rule(
        rule_id="cmd-append-sudoers",
        pattern=r"(?i)echo\s+.*>>\s*/etc/sudoers",
        reason="Direct modification of sudoers",
        severity=_CRIT,
        category="privilege_escalation",
    ),
    # --------------------------------------------------------------------
    # Security controls
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-stop-security-service",
        pattern=r"(?i)\b(systemctl|service)\s+(stop|disable)\s+(firewalld|iptables|ufw|apparmor|selinux)",
        reason="Disables the firewall or a security system",
        severity=_CRIT,
        category="security_controls",
    ),
    Rule(
        rule_id="cmd-iptables-flush",
        pattern=r"(?i)\biptables\s+-F\b",
        reason="Flushes every firewall rule",
        severity=_CRIT,
        category="security_controls",
    ),
    Rule(
        rule_id="cmd-ufw-disable",
        pattern=r"(?i)\bufw\s+disable\b",
        reason="Disables UFW",
        severity=_CRIT,
        category="security_controls",
    ),
    Rule(
        rule_id="cmd-selinux-permissive",
        pattern=r"(?i)\bsetenforce\s+0\b",
        reason="Disables SELinux",
        severity=_CRIT,
        category="security_controls",
    ),
    # --------------------------------------------------------------------
    # Crypto miners
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-miner-binary",
        pattern=r"(?i)\b(xmrig|minerd|cpuminer|cgminer|bfgminer)\b",
        reason="Cryptocurrency mining tool",
        severity=_CRIT,
        category="crypto_mining",
    ),
    Rule(
        rule_id="cmd-mining-pool",
        pattern=r"(?i)stratum\+tcp://",
        reason="Connection to a cryptocurrency mining pool",
        severity=_CRIT,
        category="crypto_mining",
    ),
    # --------------------------------------------------------------------
    # Fork bombs
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-fork-bomb",
        pattern=r"(?i):\(\)\{.*:\|:.*\}",
        reason="Fork bomb",
        severity=_CRIT,
        category="resource_exhaustion",
    ),
    Rule(
        rule_id="cmd-fork-loop",
        pattern=r"(?i)\bfork\b.*\bwhile\b.*\btrue\b",
        reason="Potential fork bomb",
        severity=_CRIT,
        category="resource_exhaustion",
    ),
    # --------------------------------------------------------------------
    # Executables dropped into temp directories
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-chmod-exec-tmp",
        pattern=r"(?i)\bchmod\s+\+x\b.*/(tmp|var/tmp)/",
        reason="Makes a file in a temporary directory executable",
        severity=_HIGH,
        category="suspicious_binary",
    ),
    # --------------------------------------------------------------------
    # Kernel modules
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-insmod",
        pattern=r"(?i)\binsmod\b",
        reason="Kernel module insertion",
        severity=_CRIT,
        category="kernel",
    ),
    Rule(
        rule_id="cmd-rmmod",
        pattern=r"(?i)\brmmod\b",
        reason="Kernel module removal",
        severity=_HIGH,
        category="kernel",
    ),
    Rule(
        rule_id="cmd-modprobe",
        pattern=r"(?i)\bmodprobe\b",
        reason="Kernel module manipulation",
        severity=_HIGH,
        category="kernel",
    ),
    # --------------------------------------------------------------------
    # Network capture
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-tcpdump-write",
        pattern=r"(?i)\btcpdump\b.*-w\b",
        reason="Network traffic captured to a file",
        severity=_HIGH,
        category="network_capture",
    ),
    Rule(
        rule_id="cmd-tshark-write",
        pattern=r"(?i)\btshark\b.*-w\b",
        reason="Network traffic captured to a file",
        severity=_HIGH,
        category="network_capture",
    ),
    # --------------------------------------------------------------------
    # Log and history destruction
    # --------------------------------------------------------------------
    Rule(
        rule_id="cmd-hide-and-clear-history",
        pattern=r"(?i)>\s*/dev/null\s*2>&1\s*;\s*history\s+-c",
        reason="Attempt to hide activity and clear history",
        severity=_CRIT,
        category="log_destruction",
    ),
    Rule(
        rule_id="cmd-clear-history",
        pattern=r"(?i)\bhistory\s+-c\b",
        reason="Clears the shell history",
        severity=_HIGH,
        category="log_destruction",
    ),
    Rule(
        rule_id="cmd-shred-logs",
        pattern=r"(?i)\bshred\b.*/(var/log|\.bash_history)",
        reason="Destroys system logs",
        severity=_CRIT,
        category="log_destruction",
    ),
    Rule(
        rule_id="cmd-truncate-logs",
        pattern=r"(?i)\btruncate\b.*/(var/log)",
        reason="Truncates system logs",
        severity=_CRIT,
        category="log_destruction",
    ),
]

# ============================================================================
# OBFUSCATION DETECTORS
# ============================================================================

# Applied to the whole command after the table found nothing
BASE64_DECODE_PATTERN = r"(?i)\bbase64\s+-d\b|\bbase64\s+--decode\b"
PIPE_TO_SHELL_PATTERN = r"(?i)\|\s*(ba)?sh\b"
HEX_ESCAPE_PATTERN = r"(?i)\$'\\x[0-9a-fA-F]{2}"

# ============================================================================
# ADVISORY COMMAND RULES
# ============================================================================

ADVISORY_COMMAND_RULES: list[Rule] = [
    Rule(
        rule_id="risk-sudo",
        pattern=r"(?i)\bsudo\b",
        reason="Command runs with elevated privileges (sudo)",
        severity=SeverityLevel.MEDIUM,
        category="privileges",
    ),
    Rule(
        rule_id="risk-su-root",
        pattern=r"(?i)\bsu\s+-?\s*$",
        reason="Switches to the root user",
        severity=SeverityLevel.MEDIUM,
        category="privileges",
    ),
    Rule(
        rule_id="risk-rm-recursive",
        pattern=r"(?i)\brm\s+-[a-zA-Z]*r",
        reason="Recursive file deletion",
        severity=SeverityLevel.MEDIUM,
        category="filesystem",
    ),
    Rule(
        rule_id="risk-kill-9",
        pattern=r"(?i)\bkill\s+-9",
        reason="Force-kills a process",
        severity=SeverityLevel.LOW,
        category="process",
    ),
    Rule(
        rule_id="risk-killall",
        pattern=r"(?i)\bkillall\b",
        reason="Terminates multiple processes",
        severity=SeverityLevel.LOW,
        category="process",
    ),
    Rule(
        rule_id="risk-shutdown",
        pattern=r"(?i)\bshutdown\b",
        reason="Shuts the system down",
        severity=SeverityLevel.MEDIUM,
        category="system",
    ),
    Rule(
        rule_id="risk-reboot",
        pattern=r"(?i)\breboot\b",
        reason="Reboots the system",
        severity=SeverityLevel.MEDIUM,
        category="system",
    ),
    Rule(
        rule_id="risk-service-restart",
        pattern=r"(?i)\bsystemctl\s+restart\b|\bservice\s+\S+\s+restart\b",
        reason="Restarts a system service",
        severity=SeverityLevel.LOW,
        category="system",
    ),
    Rule(
        rule_id="risk-crontab-edit",
        pattern=r"(?i)\bcrontab\s+-e",
        reason="Edits scheduled system tasks",
        severity=SeverityLevel.LOW,
        category="system",
    ),
    Rule(
        rule_id="risk-write-etc",
        pattern=r"(?i)echo\b.*>>?\s*/etc/",
        reason="Modifies system configuration files",
        severity=SeverityLevel.MEDIUM,
        category="system",
    ),
    Rule(
        rule_id="risk-apt-remove",
        pattern=r"(?i)\bapt\s+(remove|purge)\b",
        reason="Removes system packages",
        severity=SeverityLevel.LOW,
        category="packages",
    ),
    Rule(
        rule_id="risk-brew-uninstall",
        pattern=r"(?i)\bbrew\s+uninstall\b",
        reason="Removes packages (Homebrew)",
        severity=SeverityLevel.LOW,
        category="packages",
    ),
    Rule(
        rule_id="risk-npm-uninstall",
        pattern=r"(?i)\bnpm\s+(-g\s+)?uninstall\b",
        reason="Removes npm packages",
        severity=SeverityLevel.LOW,
        category="packages",
    ),
    Rule(
        rule_id="risk-pip-uninstall",
        pattern=r"(?i)\bpip\s+uninstall\b",
        reason="Removes Python packages",
        severity=SeverityLevel.LOW,
        category="packages",
    ),
]

# ============================================================================
# BLOCKED CODE RULES
# ============================================================================

BLOCKED_CODE_RULES: list[Rule] = [
    # --------------------------------------------------------------------
    # Network attacks
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-socket-connect",
        pattern=r"(?i)\bsocket\b.*\bconnect\b",
        reason="Outbound socket connection (possible reverse shell)",
        severity=_CRIT,
        languages=PYTHON,
        category="network",
    ),
    Rule(
        rule_id="code-subprocess-shell",
        pattern=r"(?i)\bsubprocess\b.*\b(Popen|call|run)\b.*\b(nc|ncat|bash|sh)\b",
        reason="subprocess running a suspicious shell",
        severity=_CRIT,
        languages=PYTHON,
        category="network",
    ),
    Rule(
        rule_id="code-os-system-remote",
        pattern=r"(?i)\bos\.system\b.*\b(nc|ncat|curl.*\|.*sh|wget.*\|.*sh)\b",
        reason="os.system with suspicious remote execution",
        severity=_CRIT,
        languages=PYTHON,
        category="network",
    ),
    Rule(
        rule_id="code-child-process-revshell",
        pattern=r"(?i)\bchild_process\b.*\bexec(Sync)?\b.*\b(nc|ncat|bash -i)\b",
        reason="child_process reverse shell",
        severity=_CRIT,
        languages=NODE,
        category="network",
    ),
    Rule(
        rule_id="code-child-process-shell",
        pattern=r"""(?i)require\s*\(\s*['"]child_process['"]\s*\).*exec.*\bsh\b""",
        reason="child_process shell execution",
        severity=_CRIT,
        languages=NODE,
        category="network",
    ),
    # --------------------------------------------------------------------
    # Filesystem destruction
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-os-remove",
        pattern=r"(?i)\bos\.remove\b.*/",
        reason="Deletes system files",
        severity=_HIGH,
        languages=PYTHON,
        category="filesystem",
    ),
    Rule(
        rule_id="code-rmtree-root",
        pattern=r"""(?i)\bshutil\.rmtree\b.*['"]/['"]|shutil\.rmtree\s*\(\s*['"]/['"]""",
        reason="Recursive deletion of the root directory",
        severity=_CRIT,
        languages=PYTHON,
        category="filesystem",
    ),
    Rule(
        rule_id="code-fs-unlink-system",
        pattern=r"""(?i)\bfs\.(rm|unlink)Sync\b.*['"]/""",
        reason="Deletes system files",
        severity=_HIGH,
        languages=NODE,
        category="filesystem",
    ),
    # --------------------------------------------------------------------
    # Dynamic execution of user input
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-eval-input",
        pattern=r"(?i)\beval\s*\(\s*(input|raw_input)\s*\(",
        reason="eval() fed from user input (code injection)",
        severity=_CRIT,
        languages=PYTHON,
        category="code_injection",
    ),
    Rule(
        rule_id="code-exec-input",
        pattern=r"(?i)\bexec\s*\(\s*(input|raw_input)\s*\(",
        reason="exec() fed from user input (code injection)",
        severity=_CRIT,
        languages=PYTHON,
        category="code_injection",
    ),
    Rule(
        rule_id="code-import-ctypes",
        pattern=r"""(?i)\b__import__\s*\(\s*['"]ctypes['"]\s*\)""",
        reason="Imports ctypes (direct memory access)",
        severity=_HIGH,
        languages=PYTHON,
        category="code_injection",
    ),
    # --------------------------------------------------------------------
    # Credential theft
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-open-credentials",
        pattern=r"""(?i)open\s*\(.*/(etc/shadow|etc/passwd|\.ssh/|\.aws/credentials|\.env)['"].*\)""",
        reason="Reads credential files",
        severity=_CRIT,
        category="credentials",
    ),
    Rule(
        rule_id="code-readfile-credentials",
        pattern=r"""(?i)readFileSync\s*\(.*/(etc/shadow|\.ssh/|\.aws/credentials)['"].*\)""",
        reason="Reads credential files",
        severity=_CRIT,
        languages=NODE,
        category="credentials",
    ),
    # --------------------------------------------------------------------
    # Keylogging and screen capture
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-keylogger",
        pattern=r"(?i)\bpynput\b.*\bKeyboard\b|\bkeyboard\b.*\bhook\b",
        reason="Possible keylogger",
        severity=_CRIT,
        languages=PYTHON,
        category="surveillance",
    ),
    Rule(
        rule_id="code-screen-capture",
        pattern=r"(?i)\bImageGrab\b.*\bgrab\b",
        reason="Possible screen capture",
        severity=_HIGH,
        languages=PYTHON,
        category="surveillance",
    ),
    # --------------------------------------------------------------------
    # HTTP exfiltration
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-requests-exfil",
        pattern=r"(?i)\brequests\.(post|put)\b.*\b(environ|open|read)\b",
        reason="Possible data exfiltration over HTTP",
        severity=_CRIT,
        languages=PYTHON,
        category="exfiltration",
    ),
    Rule(
        rule_id="code-fetch-exfil",
        pattern=r"(?i)\bfetch\b.*\b(process\.env|readFileSync)\b",
        reason="Possible data exfiltration via fetch",
        severity=_CRIT,
        languages=NODE,
        category="exfiltration",
    ),
    # --------------------------------------------------------------------
    # Resource exhaustion
    # --------------------------------------------------------------------
    Rule(
        rule_id="code-unbounded-loop",
        pattern=r"(?m)\bwhile\s+(True|true|1)\s*:?\s*$",
        reason="Infinite loop without a visible exit condition",
        severity=_HIGH,
        category="resource_exhaustion",
    ),
    Rule(
        rule_id="code-fork",
        pattern=r"(?i)\bfork\s*\(\s*\)",
        reason="Process fork (possible fork bomb)",
        severity=_CRIT,
        category="resource_exhaustion",
    ),
]

# ============================================================================
# EMBEDDED SHELL EXECUTION
# ============================================================================

# Checked for every language, after the scoped code rules
EMBEDDED_SHELL_RULES: list[Rule] = [
    Rule(
        rule_id="shell-os-system-rm",
        pattern=r"""(?i)os\.system\s*\(\s*['"].*\brm\s+-rf\b""",
        reason="Runs dangerous shell commands from code",
        severity=_CRIT,
        category="embedded_shell",
    ),
    Rule(
        rule_id="shell-os-system-download",
        pattern=r"""(?i)os\.system\s*\(\s*['"].*\b(curl|wget)\b.*\|\s*(ba)?sh""",
        reason="Runs dangerous shell commands from code",
        severity=_CRIT,
        category="embedded_shell",
    ),
    Rule(
        rule_id="shell-subprocess",
        pattern=r"""(?i)subprocess\.(call|run|Popen)\s*\(\s*\[?\s*['"].*\b(rm\s+-rf|curl.*\|\s*sh)\b""",
        reason="Runs dangerous shell commands from code",
        severity=_CRIT,
        category="embedded_shell",
    ),
    Rule(
        rule_id="shell-child-process",
        pattern=r"(?i)child_process.*exec.*\b(rm\s+-rf|curl.*\|\s*sh)\b",
        reason="Runs dangerous shell commands from code",
        severity=_CRIT,
        category="embedded_shell",
    ),
]

# ============================================================================
# TABLE REGISTRY
# ============================================================================

DEFAULT_TABLES: dict[str, list[Rule]] = {
    "blocked_command": BLOCKED_COMMAND_RULES,
    "advisory_command": ADVISORY_COMMAND_RULES,
    "blocked_code": BLOCKED_CODE_RULES,
    "embedded_shell": EMBEDDED_SHELL_RULES,
}


def get_default_rules(
    table: str,
    category: str | None = None,
    min_severity: SeverityLevel | None = None,
) -> list[Rule]:
    """
    Get the rules of one default table with optional filtering.

    Args:
        table: Table name ("blocked_command", "advisory_command",
            "blocked_code", "embedded_shell")
        category: Optional category filter (e.g., "reverse_shell")
        min_severity: Optional minimum severity filter

    Returns:
        Rules in table order

    Raises:
        KeyError: If the table name is unknown
    """
    rules = list(DEFAULT_TABLES[table])

    if category:
        rules = [r for r in rules if r.category == category]

    if min_severity:
        min_level = SEVERITY_ORDER[min_severity]
        rules = [r for r in rules if SEVERITY_ORDER[r.severity] >= min_level]

    return rules


def get_rule_by_id(rule_id: str) -> Rule | None:
    """Look up a default rule by ID across every table."""
    for rules in DEFAULT_TABLES.values():
        for rule in rules:
            if rule.rule_id == rule_id:
                return rule
    return None


def list_rule_categories(table: str | None = None) -> list[str]:
    """Sorted unique categories, for one table or all of them."""
    tables = [DEFAULT_TABLES[table]] if table else DEFAULT_TABLES.values()
    return sorted({r.category for rules in tables for r in rules})


def list_rule_ids(table: str | None = None) -> list[str]:
    """Rule IDs in evaluation order, for one table or all of them."""
    tables = [DEFAULT_TABLES[table]] if table else DEFAULT_TABLES.values()
    return [r.rule_id for rules in tables for r in rules]
