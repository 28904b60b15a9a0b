"""Tool service exposing signed side-effecting endpoints."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ConfigDict, Field

from ..config import LeadflowConfig, load_config
from ..constants import (
    IDEMPOTENCY_HEADER,
    LEAD_SOURCE,
    SIGNATURE_HEADER,
    TOOL_TIMEOUT_SECONDS,
)
from ..contracts import LeadRequest
from ..errors import ConfigError, Unauthorized
from ..security.auth import Authenticator, SignatureReplayCache
from ..security.signing import canonical_json, hmac_sha256_hex, idempotency_key
from .common import health_payload, utc_now_iso

logger = logging.getLogger(__name__)


class LeadData(LeadRequest):
    """Validated lead as accepted by the tool service."""

    model_config = ConfigDict(extra="ignore")

    lead_source: Optional[str] = Field(default="API")


def create_app(
    config: Optional[LeadflowConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the tool service.

    Args:
        config: Loaded configuration; read from disk and environment if omitted.
        http_client: Client used for the webhook relay. A short-lived client is
            created per request when omitted.
    """

    config = config or load_config()
    replay_cache = (
        SignatureReplayCache() if config.tool_server.replay_cache_enabled else None
    )
    authenticator = Authenticator(
        config.require_tool_server_secret, replay_cache=replay_cache
    )

    app = FastAPI(title="leadflow tool service")
    app.state.config = config
    app.state.authenticator = authenticator

    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": exc.reason})

    @app.exception_handler(ConfigError)
    async def _config_error(request: Request, exc: ConfigError) -> JSONResponse:
        logger.error(f"Configuration error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def _invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid request data",
                "details": _jsonable_errors(exc),
            },
        )

    @app.get("/health")
    async def health() -> dict:
        return health_payload()

    tools = APIRouter(prefix="/tools", dependencies=[Depends(authenticator)])

    @tools.post("/create-zoho-lead")
    async def create_zoho_lead(lead: LeadData) -> JSONResponse:
        webhook = config.require_webhook()

        lead_fields = lead.model_dump(by_alias=True, exclude_none=True)
        key = idempotency_key(canonical_json(lead_fields))
        webhook_payload = {
            **lead_fields,
            "timestamp": utc_now_iso(),
            "idempotencyKey": key,
            "source": LEAD_SOURCE,
        }
        body = canonical_json(webhook_payload)
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: hmac_sha256_hex(
                body, webhook.hmac_secret.get_secret_value()
            ),
            IDEMPOTENCY_HEADER: key,
        }

        try:
            response = await _post_webhook(
                http_client, webhook.webhook_url, body, headers
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            status = (
                e.response.status_code
                if isinstance(e, httpx.HTTPStatusError)
                else None
            )
            logger.error(f"Error creating Zoho lead: {e!r}")
            return JSONResponse(
                status_code=502,
                content={
                    "error": "Failed to send to Zapier",
                    "details": str(e),
                    "status": status,
                },
            )

        logger.info(f"Relayed lead {key} to webhook with status {response.status_code}")
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "leadId": key,
                "message": "Zoho lead created successfully",
                "zapierStatus": response.status_code,
                "timestamp": utc_now_iso(),
            },
        )

    app.include_router(tools)
    return app


async def _post_webhook(
    client: Optional[httpx.AsyncClient],
    url: str,
    body: bytes,
    headers: dict[str, str],
) -> httpx.Response:
    if client is not None:
        return await client.post(
            url, content=body, headers=headers, timeout=TOOL_TIMEOUT_SECONDS
        )
    async with httpx.AsyncClient(timeout=TOOL_TIMEOUT_SECONDS) as client:
        return await client.post(url, content=body, headers=headers)


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
