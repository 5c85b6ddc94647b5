"""
Tests for the Gateway Configuration Loader
==========================================

Tests cover:
- Defaults when no file exists
- JSON and YAML loading and precedence
- Schema validation errors
- Audit directory resolution
- Caching
"""

import json
from pathlib import Path

import pytest
import yaml

from exec_guard.config import (
    GatewayConfigLoader,
    clear_config_cache,
    load_gateway_config,
)
from exec_guard.constants import AUDIT_LOG_DIR_ENV_VAR
from exec_guard.models import GatewayConfig, RateLimitConfig


@pytest.fixture(autouse=True)
def _clear_cache():
    clear_config_cache()
    yield
    clear_config_cache()


def write_json(directory: Path, data: dict, name: str = "exec-guard.json") -> Path:
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestGatewayConfigLoader:
    """Tests for GatewayConfigLoader."""

    def test_defaults_without_file(self, tmp_path):
        loader = GatewayConfigLoader(tmp_path)
        config = loader.load()
        assert config == GatewayConfig()
        assert not loader.has_config_file()

    def test_missing_directory(self, tmp_path):
        assert GatewayConfigLoader(tmp_path / "nope").load() == GatewayConfig()

    def test_json(self, tmp_path):
        write_json(
            tmp_path,
            {
                "rate_limit": {"max_executions_per_minute": 3},
                "disabled_rules": ["risk-sudo"],
                "approval_timeout_seconds": 30,
            },
        )
        loader = GatewayConfigLoader(tmp_path)
        config = loader.load()

        assert loader.has_config_file()
        assert config.rate_limit.max_executions_per_minute == 3
        assert config.rate_limit.max_executions_per_hour == 60
        assert config.disabled_rules == ["risk-sudo"]
        assert config.approval_timeout_seconds == 30.0

    def test_yaml(self, tmp_path):
        (tmp_path / "exec-guard.yaml").write_text(
            yaml.safe_dump(
                {
                    "extra_restricted_paths": ["/srv/secrets"],
                    "extra_sensitive_env_prefixes": ["ACME_"],
                    "redact_audit_secrets": False,
                }
            ),
            encoding="utf-8",
        )
        config = GatewayConfigLoader(tmp_path).load()
        assert config.extra_restricted_paths == ["/srv/secrets"]
        assert config.extra_sensitive_env_prefixes == ["ACME_"]
        assert config.redact_audit_secrets is False

    def test_empty_yaml_is_defaults(self, tmp_path):
        (tmp_path / "exec-guard.yml").write_text("", encoding="utf-8")
        assert GatewayConfigLoader(tmp_path).load() == GatewayConfig()

    def test_json_takes_precedence(self, tmp_path):
        write_json(tmp_path, {"default_code_language": "javascript"})
        (tmp_path / "exec-guard.yaml").write_text("default_code_language: ruby\n", encoding="utf-8")
        assert GatewayConfigLoader(tmp_path).load().default_code_language == "javascript"

    def test_invalid_json(self, tmp_path):
        (tmp_path / "exec-guard.json").write_text("{broken", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            GatewayConfigLoader(tmp_path).load()

    def test_non_object(self, tmp_path):
        (tmp_path / "exec-guard.yaml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must be an object"):
            GatewayConfigLoader(tmp_path).load()

    def test_validation_errors_listed(self, tmp_path):
        write_json(
            tmp_path,
            {
                "unknown_key": 1,
                "rate_limit": {"max_executions_per_minute": 0, "burst": 5},
                "disabled_rules": "risk-sudo",
                "approval_timeout_seconds": -1,
                "redact_audit_secrets": "yes",
            },
        )
        with pytest.raises(ValueError) as exc_info:
            GatewayConfigLoader(tmp_path).load()

        message = str(exc_info.value)
        assert "Unknown keys: unknown_key" in message
        assert "Unknown keys in 'rate_limit': burst" in message
        assert "'rate_limit.max_executions_per_minute' must be a positive integer" in message
        assert "'disabled_rules' must be a list" in message
        assert "'approval_timeout_seconds' must be a positive number" in message
        assert "'redact_audit_secrets' must be a boolean" in message

    def test_boolean_is_not_an_integer(self, tmp_path):
        write_json(tmp_path, {"rate_limit": {"max_executions_per_hour": True}})
        with pytest.raises(ValueError, match="max_executions_per_hour"):
            GatewayConfigLoader(tmp_path).load()


class TestModuleFunctions:
    """Tests for load_gateway_config and the cache."""

    def test_cached(self, tmp_path):
        write_json(tmp_path, {"default_code_language": "node"})
        first = load_gateway_config(tmp_path)
        write_json(tmp_path, {"default_code_language": "ruby"})
        assert load_gateway_config(tmp_path) is first

    def test_clear_cache(self, tmp_path):
        write_json(tmp_path, {"default_code_language": "node"})
        load_gateway_config(tmp_path)
        write_json(tmp_path, {"default_code_language": "ruby"})
        clear_config_cache(tmp_path)
        assert load_gateway_config(tmp_path).default_code_language == "ruby"


class TestGatewayConfig:
    """Tests for GatewayConfig itself."""

    def test_dict_round_trip(self):
        config = GatewayConfig(
            rate_limit=RateLimitConfig(5, 20, 30.0),
            audit_log_dir="/var/lib/agent/audit",
            disabled_rules=["cmd-mkfs"],
        )
        assert GatewayConfig.from_dict(config.to_dict()) == config

    def test_audit_dir_explicit(self, tmp_path, monkeypatch):
        monkeypatch.setenv(AUDIT_LOG_DIR_ENV_VAR, str(tmp_path / "from-env"))
        config = GatewayConfig(audit_log_dir=str(tmp_path / "explicit"))
        assert config.resolve_audit_log_dir() == (tmp_path / "explicit").resolve()

    def test_audit_dir_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(AUDIT_LOG_DIR_ENV_VAR, str(tmp_path / "from-env"))
        assert GatewayConfig().resolve_audit_log_dir() == (tmp_path / "from-env").resolve()

    def test_audit_dir_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv(AUDIT_LOG_DIR_ENV_VAR, "   ")
        monkeypatch.chdir(tmp_path)
        assert GatewayConfig().resolve_audit_log_dir() == tmp_path / "data" / "audit"
