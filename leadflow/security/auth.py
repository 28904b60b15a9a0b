"""Admission gate for signed tool requests."""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Optional

from fastapi import Request

from ..constants import REPLAY_WINDOW_MS, SIGNATURE_HEADER, TIMESTAMP_HEADER
from ..errors import Unauthorized
from .signing import now_ms, verify

logger = logging.getLogger(__name__)

_TIMESTAMP_RE = re.compile(r"-?\d+")


class SignatureReplayCache:
    """Remembers signatures seen inside the replay window.

    The authentication contract only bounds replays by time; this cache is an
    opt-in addition that rejects a signature presented twice while it is still
    within the window. State is per process.
    """

    def __init__(
        self,
        window_ms: int = REPLAY_WINDOW_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.window_ms = window_ms
        self._clock = clock
        self._seen: Dict[str, int] = {}

    def check_and_add(self, signature: str) -> bool:
        """Return ``False`` if ``signature`` was already seen, else record it."""
        now = self._clock()
        self._evict(now)
        if signature in self._seen:
            return False
        self._seen[signature] = now
        return True

    def _evict(self, now: int) -> None:
        # Entries older than twice the window can no longer pass the timestamp check.
        horizon = now - 2 * self.window_ms
        for signature in [s for s, seen in self._seen.items() if seen < horizon]:
            del self._seen[signature]

    def __len__(self) -> int:
        return len(self._seen)


class Authenticator:
    """Verifies signature and timestamp headers before a handler runs.

    Args:
        secret_provider: Returns the shared secret; raises ``ConfigError`` when
            it is not configured.
        window_ms: Accepted distance between request timestamp and now.
        clock: Returns the current time in epoch milliseconds.
        replay_cache: Optional cache rejecting repeated signatures.
    """

    def __init__(
        self,
        secret_provider: Callable[[], str],
        window_ms: int = REPLAY_WINDOW_MS,
        clock: Callable[[], int] = now_ms,
        replay_cache: Optional[SignatureReplayCache] = None,
    ) -> None:
        self._secret_provider = secret_provider
        self.window_ms = window_ms
        self._clock = clock
        self.replay_cache = replay_cache

    def authenticate(
        self,
        signature: Optional[str],
        timestamp: Optional[str],
        body: bytes,
    ) -> None:
        """Raise ``Unauthorized`` unless the request is correctly signed and fresh."""
        if not signature or not timestamp:
            raise Unauthorized("Missing authentication headers")

        if not _TIMESTAMP_RE.fullmatch(timestamp):
            raise Unauthorized("Invalid request timestamp")
        try:
            request_time = int(timestamp)
        except ValueError:
            # int() refuses digit strings past the interpreter's conversion limit
            raise Unauthorized("Invalid request timestamp") from None

        skew = self._clock() - request_time
        if skew > self.window_ms:
            raise Unauthorized("Request timestamp too old")
        if -skew > self.window_ms:
            raise Unauthorized("Request timestamp too far in the future")

        secret = self._secret_provider()

        if not verify(signature, body, timestamp, secret):
            raise Unauthorized("Invalid signature")

        if self.replay_cache is not None and not self.replay_cache.check_and_add(
            signature
        ):
            raise Unauthorized("Replayed request")

    async def __call__(self, request: Request) -> None:
        """FastAPI dependency guarding a router."""
        body = await request.body()
        try:
            self.authenticate(
                request.headers.get(SIGNATURE_HEADER),
                request.headers.get(TIMESTAMP_HEADER),
                body,
            )
        except Unauthorized as e:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: {e.reason}"
            )
            raise
        request.state.authenticated = True
