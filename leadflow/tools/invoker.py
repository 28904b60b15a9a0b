"""Authenticated HTTP client for side-effecting tool calls."""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import httpx

from ..constants import (
    IDEMPOTENCY_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    TOOL_TIMEOUT_SECONDS,
)
from ..contracts import StepFailure, StepSuccess
from ..errors import ConfigError, ToolInvocationError
from ..security.signing import sign_request

logger = logging.getLogger(__name__)


class ToolInvoker:
    """Signs and POSTs payloads to ``<base_url>/tools/<name>`` endpoints.

    ``invoke`` never raises for transport or HTTP failures; callers get a
    ``StepFailure`` instead. A missing signing secret is rejected up front
    with ``ConfigError``.
    """

    def __init__(
        self,
        base_url: str,
        secret: str,
        timeout: float = TOOL_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not secret:
            raise ConfigError("HMAC secret for tool calls not available")
        self.base_url = base_url.rstrip("/")
        self._secret = secret
        self.timeout = timeout
        self._client = client

    def url_for(self, endpoint_path: str) -> str:
        return f"{self.base_url}/{endpoint_path.lstrip('/')}"

    async def invoke(
        self,
        endpoint_path: str,
        payload: Any,
        secret: Optional[str] = None,
    ) -> Union[StepSuccess, StepFailure]:
        """Send one signed request and return its decoded outcome."""
        signed = sign_request(payload, secret or self._secret)
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: signed.signature,
            TIMESTAMP_HEADER: signed.timestamp,
            IDEMPOTENCY_HEADER: signed.idempotency_key,
        }
        url = self.url_for(endpoint_path)

        try:
            response = await self._post(url, signed.payload, headers)
            if not response.is_success:
                raise ToolInvocationError(
                    f"Request failed with status code {response.status_code}: "
                    f"{response.text}",
                    status_code=response.status_code,
                )
        except httpx.HTTPError as e:
            logger.error(f"Tool call to {url} failed: {e!r}")
            return StepFailure(reason=str(e) or type(e).__name__)
        except ToolInvocationError as e:
            logger.error(f"Tool call to {url} failed: {e}")
            return StepFailure(reason=str(e))

        data = _decode(response)
        logger.info(
            f"Tool call to {url} succeeded with status {response.status_code}"
        )
        return StepSuccess(output=response.text, data=data)

    async def _post(
        self, url: str, content: bytes, headers: dict[str, str]
    ) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                url, content=content, headers=headers, timeout=self.timeout
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, content=content, headers=headers)


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
