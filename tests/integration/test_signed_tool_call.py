"""End-to-end tests: agent-side tool calls against the tool service app."""

import json

import httpx
import pytest
from pydantic_ai.messages import (
    ModelMessage,
    ModelResponse,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from leadflow.agents.executor import Executor
from leadflow.config import LeadflowConfig
from leadflow.contracts import LeadRequest, StepFailure, StepSuccess
from leadflow.server.tool_app import create_app
from leadflow.tools.invoker import ToolInvoker
from leadflow.tools.registry import CreateZohoLead
from leadflow.workflow import WorkflowOrchestrator

SECRET = "shared-secret"


class StubPlanner:
    async def plan(self, objective):
        return ["Create a lead for the new customer", "Create a second lead"]


@pytest.fixture
def webhook_calls():
    return []


@pytest.fixture
def webhook_statuses():
    return []


@pytest.fixture
def tool_app(webhook_calls, webhook_statuses):
    def handler(request: httpx.Request) -> httpx.Response:
        webhook_calls.append(json.loads(request.content))
        status = webhook_statuses.pop(0) if webhook_statuses else 200
        return httpx.Response(status, json={"status": "done"})

    config = LeadflowConfig.model_validate(
        {
            "tool_server": {
                "hmac_secret": SECRET,
                "webhook": {
                    "webhook_url": "https://hooks.example/catch",
                    "hmac_secret": "zap",
                },
            }
        }
    )
    return create_app(
        config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


def _invoker(app, secret=SECRET) -> ToolInvoker:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
    return ToolInvoker("http://tools.internal", secret, client=client)


@pytest.mark.asyncio
async def test_signed_lead_creation_round_trip(tool_app, webhook_calls):
    lead = LeadRequest(
        first_name="Ada", last_name="Lovelace", email="ada@example.com", company="ACME"
    )
    result = await CreateZohoLead().invoke(_invoker(tool_app), lead)

    assert isinstance(result, StepSuccess)
    assert result.output.startswith("Successfully created Zoho lead: ")
    assert result.data["success"] is True
    assert webhook_calls[0]["email"] == "ada@example.com"
    assert webhook_calls[0]["idempotencyKey"] == result.data["leadId"]


@pytest.mark.asyncio
async def test_mismatched_secret_is_reported_as_failed_step(tool_app, webhook_calls):
    lead = LeadRequest(
        first_name="Ada", last_name="Lovelace", email="ada@example.com", company="ACME"
    )
    result = await CreateZohoLead().invoke(_invoker(tool_app, secret="other"), lead)

    assert isinstance(result, StepFailure)
    assert "401" in result.reason
    assert "Invalid signature" in result.reason
    assert webhook_calls == []


def _lead_model() -> FunctionModel:
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        returned = [
            part
            for message in messages
            for part in message.parts
            if isinstance(part, ToolReturnPart)
        ]
        if returned:
            return ModelResponse(parts=[TextPart(returned[-1].model_response_str())])
        args = {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "company": "ACME",
        }
        return ModelResponse(
            parts=[ToolCallPart(tool_name="create_zoho_lead", args=args)]
        )

    return FunctionModel(respond)


@pytest.mark.asyncio
async def test_workflow_reports_per_step_outcomes(
    tool_app, webhook_calls, webhook_statuses
):
    # The second relay fails upstream; the run still completes both steps.
    webhook_statuses.extend([200, 500])
    executor = Executor(_lead_model(), _invoker(tool_app))
    run = await WorkflowOrchestrator(StubPlanner(), executor).run("onboard new customer")

    assert run.completed
    assert len(webhook_calls) == 2
    first, second = run.step_results
    assert isinstance(first, StepSuccess)
    assert first.output.startswith("Successfully created Zoho lead:")
    assert isinstance(second, StepFailure)
    assert second.reason.startswith("Failed to create Zoho lead:")
    assert "502" in second.reason
