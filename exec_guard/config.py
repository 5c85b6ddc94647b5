"""
Gateway Configuration Loader
============================

Loads GatewayConfig from a config directory. Supports JSON and YAML with
schema validation.

Configuration files searched in order:
1. exec-guard.json
2. exec-guard.yaml
3. exec-guard.yml

File settings are merged over the defaults. A missing file means defaults.
A malformed file raises ValueError listing every problem found.

Usage:
    from exec_guard.config import load_gateway_config

    config = load_gateway_config(config_dir=Path("/etc/my-agent"))
    print(config.rate_limit.max_executions_per_minute)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .constants import CONFIG_FILENAMES
from .models import GatewayConfig
from .rules import list_rule_ids

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG SCHEMA DEFINITION
# =============================================================================

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "rate_limit": {
            "type": "object",
            "properties": {
                "max_executions_per_minute": {"type": "integer", "minimum": 1},
                "max_executions_per_hour": {"type": "integer", "minimum": 1},
                "cooldown_after_block_seconds": {"type": "number", "minimum": 0},
            },
            "additionalProperties": False,
        },
        "audit_log_dir": {"type": ["string", "null"]},
        "extra_sensitive_env_prefixes": {"type": "array", "items": {"type": "string"}},
        "extra_sensitive_env_names": {"type": "array", "items": {"type": "string"}},
        "extra_restricted_paths": {"type": "array", "items": {"type": "string"}},
        "disabled_rules": {"type": "array", "items": {"type": "string"}},
        "default_code_language": {"type": "string"},
        "approval_timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
        "redact_audit_secrets": {"type": "boolean"},
        "version": {"type": "string"},
    },
    "additionalProperties": False,
}

STRING_LIST_KEYS = (
    "extra_sensitive_env_prefixes",
    "extra_sensitive_env_names",
    "extra_restricted_paths",
    "disabled_rules",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# =============================================================================
# CONFIG LOADER
# =============================================================================

class GatewayConfigLoader:
    """
    Loads gateway configuration from a directory.

    Attributes:
        config_dir: Directory searched for config files
        config_file: Path to the config file (if found)
        config: Loaded configuration
    """

    def __init__(self, config_dir: Path | str):
        self.config_dir = Path(config_dir).resolve()
        self.config_file: Path | None = None
        self.config: GatewayConfig | None = None

    def load(self) -> GatewayConfig:
        """
        Load configuration, falling back to defaults when no file exists.

        Returns:
            GatewayConfig

        Raises:
            ValueError: If the file cannot be parsed or fails validation
        """
        self.config_file = self.find_config_file()

        if self.config_file is None:
            logger.debug(f"No gateway config in {self.config_dir}, using defaults")
            self.config = GatewayConfig()
            return self.config

        config_data = self._read_config_file(self.config_file)

        validation_errors = self._validate_config(config_data)
        if validation_errors:
            error_msg = f"Config validation errors in {self.config_file.name}:\n"
            error_msg += "\n".join(f"  - {err}" for err in validation_errors)
            raise ValueError(error_msg)

        self.config = GatewayConfig.from_dict(config_data)
        logger.info(f"Loaded gateway config from {self.config_file}")
        return self.config

    def find_config_file(self) -> Path | None:
        """Find the first existing config file."""
        if not self.config_dir.is_dir():
            return None

        for filename in CONFIG_FILENAMES:
            config_path = self.config_dir / filename
            if config_path.exists():
                return config_path

        return None

    def _read_config_file(self, config_path: Path) -> dict:
        suffix = config_path.suffix.lower()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                elif suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {suffix}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Invalid {suffix.lstrip('.').upper()} in {config_path.name}: {e}")
        except OSError as e:
            raise ValueError(f"Failed to read {config_path.name}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config in {config_path.name} must be an object")
        return data

    def _validate_config(self, config_data: dict) -> list[str]:
        """
        Validate config data against the schema.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        valid_keys = set(CONFIG_SCHEMA["properties"].keys())
        unknown_keys = set(config_data.keys()) - valid_keys
        if unknown_keys:
            errors.append(f"Unknown keys: {', '.join(sorted(unknown_keys))}")

        if "rate_limit" in config_data:
            errors.extend(self._validate_rate_limit(config_data["rate_limit"]))

        if "audit_log_dir" in config_data and not isinstance(
            config_data["audit_log_dir"], (str, type(None))
        ):
            errors.append("'audit_log_dir' must be a string")

        for key in STRING_LIST_KEYS:
            if key not in config_data:
                continue
            if not isinstance(config_data[key], list):
                errors.append(f"'{key}' must be a list")
                continue
            for i, item in enumerate(config_data[key]):
                if not isinstance(item, str):
                    errors.append(f"'{key}[{i}]' must be a string")

        if "disabled_rules" in config_data and isinstance(config_data["disabled_rules"], list):
            known = set(list_rule_ids())
            unknown = [r for r in config_data["disabled_rules"] if isinstance(r, str) and r not in known]
            if unknown:
                logger.warning(f"Ignoring unknown rule IDs in disabled_rules: {', '.join(unknown)}")

        if "default_code_language" in config_data:
            language = config_data["default_code_language"]
            if not isinstance(language, str) or not language.strip():
                errors.append("'default_code_language' must be a non-empty string")

        if "approval_timeout_seconds" in config_data:
            timeout = config_data["approval_timeout_seconds"]
            if not _is_number(timeout) or timeout <= 0:
                errors.append("'approval_timeout_seconds' must be a positive number")

        if "redact_audit_secrets" in config_data and not isinstance(
            config_data["redact_audit_secrets"], bool
        ):
            errors.append("'redact_audit_secrets' must be a boolean")

        if "version" in config_data and not isinstance(config_data["version"], str):
            errors.append("'version' must be a string")

        return errors

    def _validate_rate_limit(self, rate_limit: Any) -> list[str]:
        if not isinstance(rate_limit, dict):
            return ["'rate_limit' must be an object"]

        errors = []
        schema = CONFIG_SCHEMA["properties"]["rate_limit"]["properties"]
        unknown_keys = set(rate_limit.keys()) - set(schema.keys())
        if unknown_keys:
            errors.append(f"Unknown keys in 'rate_limit': {', '.join(sorted(unknown_keys))}")

        for key in ("max_executions_per_minute", "max_executions_per_hour"):
            if key in rate_limit:
                value = rate_limit[key]
                if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                    errors.append(f"'rate_limit.{key}' must be a positive integer")

        if "cooldown_after_block_seconds" in rate_limit:
            value = rate_limit["cooldown_after_block_seconds"]
            if not _is_number(value) or value < 0:
                errors.append("'rate_limit.cooldown_after_block_seconds' must be a non-negative number")

        return errors

    def has_config_file(self) -> bool:
        """Check if a config file was found by the last load()."""
        return self.config_file is not None


# =============================================================================
# CONFIG CACHE
# =============================================================================

_config_cache: dict[str, GatewayConfig] = {}


def load_gateway_config(config_dir: Path | str | None = None) -> GatewayConfig:
    """
    Load gateway configuration from a directory (cwd when None).

    Results are cached by resolved directory.

    Raises:
        ValueError: If the config file has validation errors
    """
    config_dir = Path(config_dir or Path.cwd()).resolve()
    cache_key = str(config_dir)

    if cache_key in _config_cache:
        return _config_cache[cache_key]

    config = GatewayConfigLoader(config_dir).load()
    _config_cache[cache_key] = config
    return config


def clear_config_cache(config_dir: Path | str | None = None) -> None:
    """Clear the cache for one directory, or entirely when None."""
    if config_dir is None:
        _config_cache.clear()
    else:
        _config_cache.pop(str(Path(config_dir).resolve()), None)
