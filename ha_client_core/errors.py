"""Client error types for hub session interactions."""

from __future__ import annotations


class HAClientError(Exception):
    """Base error for hub client failures."""


class AuthenticationFailed(HAClientError):
    """The hub rejected the supplied access token."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Authentication failed: {reason}")
        self.reason = reason


class AuthenticationRequired(HAClientError):
    """A gated command was issued before authentication completed."""


class ResponseError(HAClientError):
    """A reply was received but did not match the expected result."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class RequestTimeout(HAClientError):
    """Timed out waiting for the hub."""


class HAConnectionError(HAClientError):
    """Network connection to the hub failed."""


class HAHandshakeError(HAClientError):
    """WebSocket handshake failed."""


class ConfigError(HAClientError):
    """Client configuration could not be loaded."""
