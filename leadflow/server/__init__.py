"""FastAPI applications for the agent and tool services."""

from .agent_app import create_app as create_agent_app
from .tool_app import create_app as create_tool_app

__all__ = ["create_agent_app", "create_tool_app"]
