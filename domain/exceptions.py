"""Gateway error taxonomy."""
from __future__ import annotations

from typing import Any, Iterable, Optional

from .enums import AuthStep


class GatewayError(Exception):
    """Base class for every error raised by the gateway."""


class ConfigurationError(GatewayError):
    """Required static settings are missing. Fatal at startup."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing configuration: {', '.join(self.missing)}")


class AuthChainError(GatewayError):
    """One of the four token exchanges failed; the chain stops there."""

    def __init__(self, step: AuthStep, message: str, status_code: Optional[int] = None):
        self.step = step
        self.status_code = status_code
        super().__init__(f"{step.value} exchange failed: {message}")


class InvalidCursor(GatewayError):
    """A pagination cursor that this gateway did not produce."""

    def __init__(self, cursor: Any):
        self.cursor = cursor
        super().__init__(f"Invalid cursor: {cursor!r}")


class InvalidPaginationArgument(GatewayError):
    """Negative ``first``/``last`` values."""


class UpstreamError(GatewayError):
    """Non-2xx, transport failure or undecodable body from the stats service."""

    def __init__(self, resource: str, message: str, status_code: Optional[int] = None):
        self.resource = resource
        self.status_code = status_code
        super().__init__(f"{resource}: {message}")


class NotFound(GatewayError):
    """A batched lookup key has no value; surfaced as a null field."""

    def __init__(self, key: Any, reason: str = "not found"):
        self.key = key
        self.reason = reason
        super().__init__(f"{key}: {reason}")
