from __future__ import annotations

import json
import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field, SecretStr

from .constants import (
    DEFAULT_AGENT_SERVER_PORT,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    DEFAULT_MODEL,
    DEFAULT_TOOL_SERVER_PORT,
    DEFAULT_TOOL_SERVER_URL,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


class LLMConfig(BaseModel):
    """Language model used by the planner and executor agents."""

    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_LLM_TIMEOUT_SECONDS


class AgentServiceConfig(BaseModel):
    """Settings for the workflow (agent) service."""

    tool_server_url: str = DEFAULT_TOOL_SERVER_URL
    hmac_secret: Optional[SecretStr] = None
    port: int = DEFAULT_AGENT_SERVER_PORT
    llm: LLMConfig = Field(default_factory=LLMConfig)


class WebhookConfig(BaseModel):
    """CRM webhook the tool service relays leads to."""

    webhook_url: str
    hmac_secret: SecretStr


class ToolServerConfig(BaseModel):
    """Settings for the tool service."""

    hmac_secret: Optional[SecretStr] = None
    webhook: Optional[WebhookConfig] = None
    port: int = DEFAULT_TOOL_SERVER_PORT
    replay_cache_enabled: bool = False


class LeadflowConfig(BaseModel):
    """Top-level configuration model."""

    agent: AgentServiceConfig = Field(default_factory=AgentServiceConfig)
    tool_server: ToolServerConfig = Field(default_factory=ToolServerConfig)

    def require_agent_secret(self) -> str:
        """Return the secret used to sign outbound tool calls."""
        return _require_secret(self.agent.hmac_secret, "HMAC secret for tool calls")

    def require_tool_server_secret(self) -> str:
        """Return the secret used to verify inbound tool calls.

        Falls back to the webhook secret when no dedicated secret is set.
        """
        secret = self.tool_server.hmac_secret
        if secret is None and self.tool_server.webhook is not None:
            secret = self.tool_server.webhook.hmac_secret
        return _require_secret(secret, "HMAC configuration")

    def require_webhook(self) -> WebhookConfig:
        """Return the webhook settings, raising if either part is missing."""
        webhook = self.tool_server.webhook
        if (
            webhook is None
            or not webhook.webhook_url
            or not webhook.hmac_secret.get_secret_value()
        ):
            raise ConfigError("Zapier configuration not available")
        return webhook


def _require_secret(secret: Optional[SecretStr], label: str) -> str:
    value = secret.get_secret_value() if secret is not None else ""
    if not value:
        raise ConfigError(f"{label} not available")
    return value


def _webhook_from_env() -> Optional[WebhookConfig]:
    """Resolve webhook settings from ``ZAPIER_CONFIG`` or the split variables."""

    raw = os.getenv("ZAPIER_CONFIG")
    if raw:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse ZAPIER_CONFIG: {e}")
        else:
            if isinstance(data, dict) and data.get("webhookUrl") and data.get("hmacSecret"):
                return WebhookConfig(
                    webhook_url=data["webhookUrl"], hmac_secret=data["hmacSecret"]
                )
            logger.warning("ZAPIER_CONFIG is missing webhookUrl or hmacSecret")

    webhook_url = os.getenv("ZAPIER_WEBHOOK_URL")
    hmac_secret = os.getenv("ZAPIER_HMAC_SECRET")
    if webhook_url and hmac_secret:
        return WebhookConfig(webhook_url=webhook_url, hmac_secret=hmac_secret)
    return None


def load_config(path: Optional[str] = None) -> LeadflowConfig:
    """Load configuration from YAML file and environment.

    Args:
        path: Optional path to config file. Falls back to LEADFLOW_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("LEADFLOW_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = LeadflowConfig(**data)
    else:
        config = LeadflowConfig()

    server_url = os.getenv("MCP_SERVER_URL")
    if server_url:
        config.agent.tool_server_url = server_url

    hmac_secret = os.getenv("HMAC_SECRET")
    if hmac_secret:
        config.agent.hmac_secret = SecretStr(hmac_secret)
        config.tool_server.hmac_secret = SecretStr(hmac_secret)

    model = os.getenv("LEADFLOW_MODEL")
    if model:
        config.agent.llm.model = model

    webhook = _webhook_from_env()
    if webhook is not None:
        config.tool_server.webhook = webhook
    return config
