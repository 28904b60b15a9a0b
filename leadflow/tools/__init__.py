from .invoker import ToolInvoker
from .registry import TOOL_REGISTRY, CreateZohoLead, ToolSpec, describe_tools

__all__ = [
    "ToolInvoker",
    "ToolSpec",
    "CreateZohoLead",
    "TOOL_REGISTRY",
    "describe_tools",
]
