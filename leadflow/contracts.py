"""Core data contracts for leadflow workflows and tool calls."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Annotated, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class StepSuccess(BaseModel):
    """Outcome of a step that completed normally."""

    kind: Literal["success"] = "success"
    output: str
    data: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return True

    @property
    def text(self) -> str:
        return self.output


class StepFailure(BaseModel):
    """Outcome of a step that failed; the run still continues."""

    kind: Literal["failure"] = "failure"
    reason: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def text(self) -> str:
        return self.reason


StepResult = Annotated[Union[StepSuccess, StepFailure], Field(discriminator="kind")]


class Plan(BaseModel):
    """Ordered, immutable list of textual steps produced for one objective."""

    model_config = ConfigDict(frozen=True)

    steps: tuple[str, ...] = ()
    degraded: bool = False

    @classmethod
    def coerce(cls, value: Union["Plan", Sequence[str]]) -> "Plan":
        """Accept either a ``Plan`` or a bare sequence of step strings."""
        if isinstance(value, Plan):
            return value
        return cls(steps=tuple(value))

    def __len__(self) -> int:
        return len(self.steps)


class WorkflowState(str, Enum):
    CREATED = "created"
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"


class WorkflowRun(BaseModel):
    """Mutable aggregate tracking one execution of an objective.

    ``len(step_results) == cursor`` holds after every transition and
    ``completed`` is true exactly when the cursor reaches the end of the plan.
    """

    objective: str
    state: WorkflowState = WorkflowState.CREATED
    plan: Plan = Field(default_factory=Plan)
    cursor: int = 0
    step_results: List[StepResult] = Field(default_factory=list)
    completed: bool = False

    @field_validator("objective")
    @classmethod
    def _objective_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("objective must be a non-empty string")
        return value

    def start_planning(self) -> None:
        self._expect(WorkflowState.CREATED)
        self.state = WorkflowState.PLANNING

    def start_executing(self, plan: Plan) -> None:
        """Accept the plan and reset execution tracking."""
        self._expect(WorkflowState.PLANNING)
        self.plan = plan
        self.cursor = 0
        self.step_results = []
        self.state = WorkflowState.EXECUTING
        if not plan.steps:
            self._complete()

    def current_step(self) -> Optional[str]:
        if self.cursor < len(self.plan.steps):
            return self.plan.steps[self.cursor]
        return None

    def record(self, result: Union[StepSuccess, StepFailure]) -> None:
        """Append the outcome of the current step and advance the cursor."""
        self._expect(WorkflowState.EXECUTING)
        self.step_results.append(result)
        self.cursor += 1
        if self.cursor == len(self.plan.steps):
            self._complete()

    def _complete(self) -> None:
        self.completed = True
        self.state = WorkflowState.COMPLETED

    def _expect(self, state: WorkflowState) -> None:
        if self.state is not state:
            raise RuntimeError(
                f"Invalid transition from {self.state.value}; expected {state.value}"
            )

    def report(self) -> dict[str, Any]:
        """Summarize the run for callers and HTTP responses."""
        return {
            "objective": self.objective,
            "plan": list(self.plan.steps),
            "results": [result.text for result in self.step_results],
            "outcomes": [
                {"kind": result.kind, "text": result.text}
                for result in self.step_results
            ],
            "completed": self.completed,
            "degraded": self.plan.degraded,
        }


class LeadRequest(BaseModel):
    """Arguments for the ``create_zoho_lead`` tool."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(min_length=1, description="First name of the lead")
    last_name: str = Field(min_length=1, description="Last name of the lead")
    email: str = Field(min_length=1, description="Email address of the lead")
    company: str = Field(min_length=1, description="Company name")
    phone: Optional[str] = Field(default=None, description="Phone number (optional)")
    lead_source: Optional[str] = Field(
        default=None, description="Source of the lead (optional)"
    )
    description: Optional[str] = Field(
        default=None, description="Additional description (optional)"
    )

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        if not _EMAIL_RE.fullmatch(value):
            raise ValueError("Valid email is required")
        return value


class SignedRequest(BaseModel):
    """Serialized payload with the timestamp and signature sent alongside it."""

    payload: bytes
    timestamp: str
    signature: str
    idempotency_key: str
