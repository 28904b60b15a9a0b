"""Workflow orchestrator tests."""

import pytest

from leadflow.config import LeadflowConfig
from leadflow.contracts import Plan, StepFailure, StepSuccess, WorkflowState
from leadflow.errors import ConfigError
from leadflow.workflow import WorkflowOrchestrator


class StubPlanner:
    def __init__(self, steps):
        self.steps = steps
        self.objectives = []

    async def plan(self, objective):
        self.objectives.append(objective)
        return self.steps


class StubExecutor:
    def __init__(self, outcomes=None, fail_on=()):
        self.outcomes = outcomes or {}
        self.fail_on = set(fail_on)
        self.calls = []

    async def execute(self, step):
        self.calls.append(step)
        if step in self.fail_on:
            raise RuntimeError(f"{step} exploded")
        return StepSuccess(output=self.outcomes.get(step, f"did {step}"))


@pytest.mark.asyncio
async def test_onboarding_scenario_report():
    orchestrator = WorkflowOrchestrator(
        StubPlanner(["create_zoho_lead"]),
        StubExecutor({"create_zoho_lead": "Successfully created Zoho lead: {...}"}),
    )
    run = await orchestrator.run("onboard new customer")

    report = run.report()
    assert report["plan"] == ["create_zoho_lead"]
    assert report["results"] == ["Successfully created Zoho lead: {...}"]
    assert report["completed"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [0, 1, 5])
async def test_one_result_per_step(size):
    steps = [f"step {i}" for i in range(size)]
    executor = StubExecutor()
    run = await WorkflowOrchestrator(StubPlanner(steps), executor).run("goal")

    assert len(run.step_results) == size
    assert run.cursor == size
    assert run.completed
    assert run.state is WorkflowState.COMPLETED
    assert executor.calls == steps


@pytest.mark.asyncio
async def test_failing_middle_step_does_not_stop_run():
    executor = StubExecutor(fail_on={"two"})
    run = await WorkflowOrchestrator(
        StubPlanner(["one", "two", "three"]), executor
    ).run("goal")

    assert executor.calls == ["one", "two", "three"]
    assert [r.ok for r in run.step_results] == [True, False, True]
    assert run.step_results[1] == StepFailure(reason="Error: two exploded")
    assert run.step_results[2].text == "did three"
    assert run.completed


@pytest.mark.asyncio
async def test_failure_results_are_kept_in_order():
    class MixedExecutor:
        async def execute(self, step):
            if step == "bad":
                return StepFailure(reason="Failed to execute task: nope")
            return StepSuccess(output=step.upper())

    run = await WorkflowOrchestrator(
        StubPlanner(["a", "bad", "c"]), MixedExecutor()
    ).run("goal")
    assert run.report()["results"] == ["A", "Failed to execute task: nope", "C"]
    assert [o["kind"] for o in run.report()["outcomes"]] == [
        "success",
        "failure",
        "success",
    ]


@pytest.mark.asyncio
async def test_degraded_plan_still_executes():
    planner = StubPlanner(Plan(steps=("Execute objective: goal",), degraded=True))
    run = await WorkflowOrchestrator(planner, StubExecutor()).run("goal")
    assert run.report()["degraded"] is True
    assert run.completed


@pytest.mark.asyncio
async def test_raising_planner_falls_back_to_objective_step():
    class BrokenPlanner:
        async def plan(self, objective):
            raise RuntimeError("planner down")

    executor = StubExecutor()
    run = await WorkflowOrchestrator(BrokenPlanner(), executor).run("goal")
    assert executor.calls == ["Execute objective: goal"]
    assert run.plan.degraded
    assert run.completed


@pytest.mark.asyncio
async def test_orchestrator_runs_once():
    orchestrator = WorkflowOrchestrator(StubPlanner(["a"]), StubExecutor())
    await orchestrator.run("goal")
    with pytest.raises(RuntimeError):
        await orchestrator.run("again")


def test_from_config_requires_secret():
    with pytest.raises(ConfigError):
        WorkflowOrchestrator.from_config(LeadflowConfig())


def test_from_config_builds_agents():
    config = LeadflowConfig.model_validate(
        {"agent": {"hmac_secret": "s", "llm": {"model": "test", "timeout_seconds": 3}}}
    )
    orchestrator = WorkflowOrchestrator.from_config(config)
    assert orchestrator.planner.timeout == 3
    assert orchestrator.executor.invoker.base_url == "http://localhost:3000"
