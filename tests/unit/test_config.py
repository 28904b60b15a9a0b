"""Tests for configuration loading."""

import json

import pytest

from leadflow.config import LeadflowConfig, load_config
from leadflow.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in (
        "LEADFLOW_CONFIG",
        "MCP_SERVER_URL",
        "HMAC_SECRET",
        "ZAPIER_CONFIG",
        "ZAPIER_WEBHOOK_URL",
        "ZAPIER_HMAC_SECRET",
        "LEADFLOW_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_file():
    config = load_config()
    assert config.agent.tool_server_url == "http://localhost:3000"
    assert config.agent.hmac_secret is None
    assert config.tool_server.webhook is None
    assert config.tool_server.replay_cache_enabled is False


def test_load_config_from_env_path(tmp_path, monkeypatch):
    config_path = tmp_path / "leadflow.yaml"
    config_path.write_text(
        """
agent:
  tool_server_url: http://tools:3000
  hmac_secret: from-yaml
  llm:
    model: test
    timeout_seconds: 5
tool_server:
  port: 4000
  replay_cache_enabled: true
"""
    )
    monkeypatch.setenv("LEADFLOW_CONFIG", str(config_path))

    config = load_config()
    assert config.agent.tool_server_url == "http://tools:3000"
    assert config.require_agent_secret() == "from-yaml"
    assert config.agent.llm.model == "test"
    assert config.agent.llm.timeout_seconds == 5
    assert config.tool_server.port == 4000
    assert config.tool_server.replay_cache_enabled is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MCP_SERVER_URL", "http://mcp:9000")
    monkeypatch.setenv("HMAC_SECRET", "shared")
    monkeypatch.setenv("LEADFLOW_MODEL", "test")

    config = load_config()
    assert config.agent.tool_server_url == "http://mcp:9000"
    assert config.require_agent_secret() == "shared"
    assert config.require_tool_server_secret() == "shared"
    assert config.agent.llm.model == "test"


def test_zapier_config_json(monkeypatch):
    monkeypatch.setenv(
        "ZAPIER_CONFIG",
        json.dumps({"webhookUrl": "https://hooks.example/1", "hmacSecret": "zap"}),
    )
    config = load_config()
    webhook = config.require_webhook()
    assert webhook.webhook_url == "https://hooks.example/1"
    assert webhook.hmac_secret.get_secret_value() == "zap"
    # Inbound verification falls back to the webhook secret.
    assert config.require_tool_server_secret() == "zap"


def test_invalid_zapier_config_falls_back_to_split_variables(monkeypatch):
    monkeypatch.setenv("ZAPIER_CONFIG", "{not json")
    monkeypatch.setenv("ZAPIER_WEBHOOK_URL", "https://hooks.example/2")
    monkeypatch.setenv("ZAPIER_HMAC_SECRET", "split")

    config = load_config()
    assert config.require_webhook().webhook_url == "https://hooks.example/2"


def test_missing_values_raise_config_error():
    config = LeadflowConfig()
    with pytest.raises(ConfigError):
        config.require_agent_secret()
    with pytest.raises(ConfigError):
        config.require_tool_server_secret()
    with pytest.raises(ConfigError, match="Zapier configuration not available"):
        config.require_webhook()


def test_secrets_are_not_rendered(monkeypatch):
    monkeypatch.setenv("HMAC_SECRET", "super-secret-value")
    config = load_config()
    assert "super-secret-value" not in repr(config)
    assert "super-secret-value" not in config.model_dump_json()


def test_load_config_does_not_leak_between_calls(monkeypatch):
    monkeypatch.setenv("MCP_SERVER_URL", "http://mcp:9000")
    load_config()
    monkeypatch.delenv("MCP_SERVER_URL")
    assert load_config().agent.tool_server_url == "http://localhost:3000"
