"""leadflow: plan-then-execute automation with signed tool calls."""

from .agents import Executor, Planner
from .config import LeadflowConfig, load_config
from .contracts import (
    Plan,
    StepFailure,
    StepResult,
    StepSuccess,
    WorkflowRun,
    WorkflowState,
)
from .errors import ConfigError, ToolInvocationError, Unauthorized
from .security import Authenticator, idempotency_key, sign, verify
from .tools import TOOL_REGISTRY, ToolInvoker
from .workflow import WorkflowOrchestrator

__version__ = "0.1.0"
__all__ = [
    "Authenticator",
    "ConfigError",
    "Executor",
    "LeadflowConfig",
    "Plan",
    "Planner",
    "StepFailure",
    "StepResult",
    "StepSuccess",
    "TOOL_REGISTRY",
    "ToolInvocationError",
    "ToolInvoker",
    "Unauthorized",
    "WorkflowOrchestrator",
    "WorkflowRun",
    "WorkflowState",
    "idempotency_key",
    "load_config",
    "sign",
    "verify",
]
