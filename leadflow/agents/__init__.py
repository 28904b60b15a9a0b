"""Language-model backed planner and executor."""

from .executor import Executor, ExecutorDeps, create_agent_tool
from .planner import Planner, fallback_step, parse_plan

__all__ = [
    "Executor",
    "ExecutorDeps",
    "Planner",
    "create_agent_tool",
    "fallback_step",
    "parse_plan",
]
