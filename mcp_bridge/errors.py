"""Exception hierarchy for the bridge."""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for bridge failures."""


class ConfigurationError(BridgeError):
    """Raised when required startup configuration is missing or invalid."""


class BridgeConnectionError(BridgeError):
    """Raised when the connection to the remote peer cannot be used."""


class ToolNotFoundError(LookupError):
    """Raised when the requested tool is not registered."""


class ToolExecutionError(RuntimeError):
    """Raised when a tool fails to produce a result."""
