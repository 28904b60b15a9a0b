"""Planner agent turning an objective into ordered steps."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Dict, List, Optional, Union

from pydantic_ai import Agent
from pydantic_ai.models import Model

from ..constants import DEFAULT_LLM_TIMEOUT_SECONDS, FALLBACK_STEP_TEMPLATE
from ..contracts import Plan
from ..errors import PlanParseError
from ..tools.registry import TOOL_REGISTRY, ToolSpec, describe_tools

logger = logging.getLogger(__name__)

_LIST_LITERAL_RE = re.compile(r"\[[\s\S]*?\]")
_ENUMERATION_RE = re.compile(r"^\s*\d+\s*[.)]\s*")

PLANNER_PROMPT = """
You are a planning agent for business automation tasks.
Given an objective, break it down into actionable steps.

Available tools:
{tools}

Objective: {objective}

Please provide a step-by-step plan as a JSON array of strings.
Each step should be clear and actionable.
"""


def fallback_step(objective: str) -> str:
    return FALLBACK_STEP_TEMPLATE.format(objective=objective)


def _parse_list_literal(text: str) -> Optional[List[str]]:
    if not _LIST_LITERAL_RE.search(text):
        return None

    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            steps, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            steps = None
        if isinstance(steps, list) and all(isinstance(s, str) for s in steps):
            return [step.strip() for step in steps]
        start = text.find("[", start + 1)
    raise PlanParseError("No bracketed literal decodes to a list of strings")


def parse_plan(text: str) -> List[str]:
    """Extract ordered steps from generated planner text.

    A bracketed JSON list of strings wins. Without one, every non-empty line
    becomes a step with leading enumeration markers like ``1.`` or ``2)``
    removed.

    Raises:
        PlanParseError: Brackets are present but none opens a JSON list of
            strings.
    """
    steps = _parse_list_literal(text)
    if steps is not None:
        return steps

    lines = (_ENUMERATION_RE.sub("", line).strip() for line in text.splitlines())
    return [line for line in lines if line]


class Planner:
    """Produces a ``Plan`` for an objective using a language model.

    Errors from the model or from parsing are never raised; the planner falls
    back to a single step restating the objective and marks the plan degraded.
    """

    def __init__(
        self,
        model: Union[Model, str],
        tools: Optional[Dict[str, ToolSpec]] = None,
        timeout: float = DEFAULT_LLM_TIMEOUT_SECONDS,
    ) -> None:
        self.tools = tools if tools is not None else TOOL_REGISTRY
        self.timeout = timeout
        self.agent: Agent[None, str] = Agent(model, output_type=str, name="planner")

    def build_prompt(self, objective: str) -> str:
        return PLANNER_PROMPT.format(
            tools=describe_tools(self.tools), objective=objective
        )

    async def plan(self, objective: str) -> Plan:
        try:
            result = await asyncio.wait_for(
                self.agent.run(self.build_prompt(objective)), timeout=self.timeout
            )
            steps = parse_plan(result.output)
        except Exception as e:
            logger.warning(
                f"Planning degraded for objective {objective!r}: {e!r}; "
                "falling back to a single step"
            )
            return Plan(steps=(fallback_step(objective),), degraded=True)

        logger.info(f"Planned {len(steps)} steps for objective {objective!r}")
        return Plan(steps=tuple(steps))
