"""Workflow service exposing ``/execute``."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import LeadflowConfig, load_config
from ..workflow import WorkflowOrchestrator
from .common import health_payload, utc_now_iso

logger = logging.getLogger(__name__)

OrchestratorFactory = Callable[[], WorkflowOrchestrator]


class ExecuteRequest(BaseModel):
    objective: Optional[str] = None


def create_app(
    config: Optional[LeadflowConfig] = None,
    orchestrator_factory: Optional[OrchestratorFactory] = None,
) -> FastAPI:
    """Build the workflow service.

    A fresh orchestrator is created for every request since each instance
    executes exactly one run.
    """

    config = config or load_config()
    if orchestrator_factory is None:

        def orchestrator_factory() -> WorkflowOrchestrator:
            return WorkflowOrchestrator.from_config(config)

    app = FastAPI(title="leadflow agent service")
    app.state.config = config

    @app.exception_handler(RequestValidationError)
    async def _invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/health")
    async def health() -> dict:
        return health_payload()

    @app.post("/execute")
    async def execute(body: ExecuteRequest) -> JSONResponse:
        if not body.objective or not body.objective.strip():
            return JSONResponse(
                status_code=400, content={"error": "Objective is required"}
            )

        try:
            orchestrator = orchestrator_factory()
            run = await orchestrator.run(body.objective)
        except Exception as e:
            logger.exception(f"Workflow execution error: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Workflow execution failed",
                    "message": str(e) or type(e).__name__,
                },
            )

        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                **run.report(),
                "timestamp": utc_now_iso(),
            },
        )

    return app
