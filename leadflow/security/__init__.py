"""Request signing and verification."""

from .auth import Authenticator, SignatureReplayCache
from .signing import canonical_json, idempotency_key, sign, sign_request, verify

__all__ = [
    "Authenticator",
    "SignatureReplayCache",
    "canonical_json",
    "idempotency_key",
    "sign",
    "sign_request",
    "verify",
]
