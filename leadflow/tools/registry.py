"""Registry of tools the executor may call, keyed by capability name."""

from __future__ import annotations

import abc
import json
from typing import ClassVar, Dict, Generic, Type, TypeVar, Union

from pydantic import BaseModel

from ..contracts import LeadRequest, StepFailure, StepSuccess
from .invoker import ToolInvoker

RequestT = TypeVar("RequestT", bound=BaseModel)


class ToolSpec(Generic[RequestT], metaclass=abc.ABCMeta):
    """A remote capability with a typed request schema."""

    name: ClassVar[str]
    description: ClassVar[str]
    endpoint_path: ClassVar[str]
    request_model: ClassVar[Type[BaseModel]]

    def build_payload(self, request: RequestT) -> dict:
        return request.model_dump(by_alias=True, exclude_none=True)

    @abc.abstractmethod
    async def invoke(
        self, invoker: ToolInvoker, request: RequestT
    ) -> Union[StepSuccess, StepFailure]:
        """Call the tool and describe the outcome."""
        raise NotImplementedError


class CreateZohoLead(ToolSpec[LeadRequest]):
    name = "create_zoho_lead"
    description = "Create a new lead in Zoho CRM via Zapier integration"
    endpoint_path = "/tools/create-zoho-lead"
    request_model = LeadRequest

    async def invoke(
        self, invoker: ToolInvoker, request: LeadRequest
    ) -> Union[StepSuccess, StepFailure]:
        outcome = await invoker.invoke(self.endpoint_path, self.build_payload(request))
        if isinstance(outcome, StepFailure):
            return StepFailure(reason=f"Failed to create Zoho lead: {outcome.reason}")
        return StepSuccess(
            output=f"Successfully created Zoho lead: {json.dumps(outcome.data)}",
            data=outcome.data,
        )


TOOL_REGISTRY: Dict[str, ToolSpec] = {
    tool.name: tool for tool in (CreateZohoLead(),)
}


def describe_tools(registry: Dict[str, ToolSpec] = TOOL_REGISTRY) -> str:
    """Render ``- name: description`` lines for prompts."""
    return "\n".join(f"- {tool.name}: {tool.description}" for tool in registry.values())
