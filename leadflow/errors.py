"""Exception types raised across leadflow."""

from __future__ import annotations

from typing import Optional


class LeadflowError(Exception):
    """Base class for leadflow errors."""


class ConfigError(LeadflowError):
    """A required secret or endpoint is missing from configuration."""


class Unauthorized(LeadflowError):
    """An inbound request failed signature or timestamp verification."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ToolInvocationError(LeadflowError):
    """Transport failure or non-2xx response from a tool service."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PlanParseError(LeadflowError):
    """Generated planner text could not be turned into a list of steps."""
