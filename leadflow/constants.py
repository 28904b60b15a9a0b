"""Shared constants for leadflow services."""

SIGNATURE_HEADER = "X-Signature"
TIMESTAMP_HEADER = "X-Timestamp"
IDEMPOTENCY_HEADER = "X-Idempotency-Key"

# Signed requests are accepted within +/- this many milliseconds of receipt.
REPLAY_WINDOW_MS = 300_000

TOOL_TIMEOUT_SECONDS = 10.0
DEFAULT_LLM_TIMEOUT_SECONDS = 60.0
DEFAULT_MODEL = "openai:gpt-4o-mini"

DEFAULT_TOOL_SERVER_URL = "http://localhost:3000"
DEFAULT_TOOL_SERVER_PORT = 3000
DEFAULT_AGENT_SERVER_PORT = 3001

LEAD_SOURCE = "multi-agent-automation"
FALLBACK_STEP_TEMPLATE = "Execute objective: {objective}"
