"""HMAC request signing and idempotency fingerprints."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any, Optional

from ..contracts import SignedRequest
from ..errors import ConfigError


def canonical_json(data: Any) -> bytes:
    """Serialize ``data`` to the compact, key-sorted JSON bytes that get signed."""
    return json.dumps(
        data, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def now_ms() -> int:
    return int(time.time() * 1000)


def hmac_sha256_hex(data: bytes, secret: str) -> str:
    if not secret:
        raise ConfigError("HMAC secret is empty")
    return hmac.new(secret.encode("utf-8"), data, hashlib.sha256).hexdigest()


def sign(payload: bytes, secret: str, timestamp: str) -> str:
    """Return the hex HMAC-SHA-256 of ``payload`` followed by ``timestamp``."""
    return hmac_sha256_hex(payload + timestamp.encode("utf-8"), secret)


def verify(signature: str, payload: bytes, timestamp: str, secret: str) -> bool:
    """Check ``signature`` against the expected one in constant time.

    Both values are hashed before comparison so that a length mismatch takes
    the same path as a content mismatch.
    """
    expected = sign(payload, secret, timestamp)
    provided_digest = hashlib.sha256(signature.encode("utf-8")).digest()
    expected_digest = hashlib.sha256(expected.encode("utf-8")).digest()
    return hmac.compare_digest(provided_digest, expected_digest)


def idempotency_key(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def sign_request(
    data: Any, secret: str, timestamp: Optional[str] = None
) -> SignedRequest:
    """Serialize ``data`` once and derive both signature and idempotency key."""
    payload = canonical_json(data)
    timestamp = timestamp or str(now_ms())
    return SignedRequest(
        payload=payload,
        timestamp=timestamp,
        signature=sign(payload, secret, timestamp),
        idempotency_key=idempotency_key(payload),
    )
