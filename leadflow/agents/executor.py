"""Executor agent carrying out a single planned step."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic_ai import Agent, RunContext, Tool
from pydantic_ai.models import Model

from ..constants import DEFAULT_LLM_TIMEOUT_SECONDS
from ..contracts import StepFailure, StepSuccess
from ..tools.invoker import ToolInvoker
from ..tools.registry import TOOL_REGISTRY, ToolSpec

logger = logging.getLogger(__name__)

EXECUTOR_PROMPT = (
    "You are an execution agent that carries out specific tasks using available tools.\n"
    "You should execute tasks precisely and report the results clearly.\n\n"
    "Always use the appropriate tool when available rather than trying to "
    "simulate the action."
)


@dataclass
class ExecutorDeps:
    """Per-step dependencies handed to tools through ``RunContext``."""

    invoker: ToolInvoker
    tool_outcomes: List[Union[StepSuccess, StepFailure]] = field(default_factory=list)


def create_agent_tool(spec: ToolSpec) -> Tool[ExecutorDeps]:
    """Return a pydantic-ai ``Tool`` whose argument schema is ``spec.request_model``."""

    async def _run_tool(ctx: RunContext[ExecutorDeps], request: Any) -> str:
        outcome = await spec.invoke(ctx.deps.invoker, request)
        ctx.deps.tool_outcomes.append(outcome)
        if outcome.ok:
            logger.info(f"Tool {spec.name} succeeded")
        else:
            logger.error(f"Tool {spec.name} failed: {outcome.text}")
        return outcome.text

    _run_tool.__annotations__["request"] = spec.request_model
    return Tool(_run_tool, name=spec.name, description=spec.description)


class Executor:
    """Runs one step with the registered tool set.

    ``execute`` always returns a result. Model errors and timeouts become a
    ``StepFailure``, as does a step whose last tool call failed.
    """

    def __init__(
        self,
        model: Union[Model, str],
        invoker: ToolInvoker,
        tools: Optional[Dict[str, ToolSpec]] = None,
        timeout: float = DEFAULT_LLM_TIMEOUT_SECONDS,
    ) -> None:
        self.invoker = invoker
        self.tools = tools if tools is not None else TOOL_REGISTRY
        self.timeout = timeout
        self.agent: Agent[ExecutorDeps, str] = Agent(
            model,
            deps_type=ExecutorDeps,
            output_type=str,
            system_prompt=EXECUTOR_PROMPT,
            tools=[create_agent_tool(spec) for spec in self.tools.values()],
            name="executor",
        )

    async def execute(self, step: str) -> Union[StepSuccess, StepFailure]:
        deps = ExecutorDeps(invoker=self.invoker)
        try:
            result = await asyncio.wait_for(
                self.agent.run(step, deps=deps), timeout=self.timeout
            )
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"Failed to execute step {step!r}: {message}")
            return StepFailure(reason=f"Failed to execute task: {message}")

        # A retried tool call supersedes earlier attempts within the step.
        if deps.tool_outcomes and not deps.tool_outcomes[-1].ok:
            return StepFailure(reason=deps.tool_outcomes[-1].text)
        return StepSuccess(output=str(result.output))
