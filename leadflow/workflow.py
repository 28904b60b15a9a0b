"""Plan-then-execute workflow orchestration."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Union

from .agents.executor import Executor
from .agents.planner import Planner, fallback_step
from .config import LeadflowConfig
from .contracts import Plan, StepFailure, StepSuccess, WorkflowRun
from .tools.invoker import ToolInvoker

logger = logging.getLogger(__name__)


class PlannerLike(Protocol):
    async def plan(self, objective: str) -> Union[Plan, Sequence[str]]:
        """Return ordered steps for ``objective``."""


class ExecutorLike(Protocol):
    async def execute(self, step: str) -> Union[StepSuccess, StepFailure]:
        """Carry out ``step`` and describe the outcome."""


class WorkflowOrchestrator:
    """Runs one objective through planning and sequential step execution.

    An instance handles exactly one run. Steps execute strictly in plan order
    and a failing step never stops the loop, so every run ends completed with
    one result per planned step.
    """

    def __init__(self, planner: PlannerLike, executor: ExecutorLike) -> None:
        self.planner = planner
        self.executor = executor
        self.run_state: Optional[WorkflowRun] = None

    @classmethod
    def from_config(
        cls,
        config: LeadflowConfig,
        invoker: Optional[ToolInvoker] = None,
    ) -> "WorkflowOrchestrator":
        """Build the production planner, executor and tool client.

        Raises:
            ConfigError: The shared secret for tool calls is not configured.
        """
        agent_config = config.agent
        invoker = invoker or ToolInvoker(
            agent_config.tool_server_url, config.require_agent_secret()
        )
        llm = agent_config.llm
        planner = Planner(llm.model, timeout=llm.timeout_seconds)
        executor = Executor(llm.model, invoker, timeout=llm.timeout_seconds)
        return cls(planner, executor)

    async def run(self, objective: str) -> WorkflowRun:
        if self.run_state is not None:
            raise RuntimeError("WorkflowOrchestrator instances execute a single run")

        run = WorkflowRun(objective=objective)
        self.run_state = run
        logger.info(f"Starting workflow for objective: {objective}")

        run.start_planning()
        try:
            plan = Plan.coerce(await self.planner.plan(objective))
        except Exception as e:
            logger.error(f"Planner raised for objective {objective!r}: {e!r}")
            plan = Plan(steps=(fallback_step(objective),), degraded=True)
        if plan.degraded:
            logger.warning("Continuing with degraded fallback plan")
        run.start_executing(plan)
        logger.info(f"Generated plan with {len(plan)} steps: {list(plan.steps)}")

        while not run.completed:
            index = run.cursor
            step = run.current_step()
            logger.info(f"Executing step {index + 1}: {step}")
            try:
                result = await self.executor.execute(step)
            except Exception as e:
                message = str(e) or type(e).__name__
                result = StepFailure(reason=f"Error: {message}")
            run.record(result)

            if result.ok:
                logger.info(f"Step {index + 1} completed: {result.text}")
            else:
                logger.error(f"Step {index + 1} failed: {result.text}")

        logger.info("Workflow completed")
        return run
