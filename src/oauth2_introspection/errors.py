"""Error taxonomy for the introspection layer.

Only local faults are raised as exceptions. Failures of the remote
introspection exchange are reported as ``IntrospectionOutcome`` values
and never escape the client.
"""

from __future__ import annotations

from typing import Any


class IntrospectionLayerError(Exception):
    """Base exception for all errors raised by this package.

    Attributes:
        code: Error code following the oauth2_introspection:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(IntrospectionLayerError):
    """Raised when ``IntrospectionOptions`` are incomplete or inconsistent.

    Attributes:
        option: Name of the offending option
    """

    def __init__(self, option: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="oauth2_introspection:config/invalid_option",
            message=message,
            details={"option": option, **(details or {})},
        )
        self.option = option


class DiscoveryError(IntrospectionLayerError):
    """Raised when the introspection endpoint cannot be discovered from the authority.

    Attributes:
        authority: The authority whose discovery document was requested
        reason: Why discovery failed
    """

    def __init__(self, authority: str, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="oauth2_introspection:discovery/failed",
            message=f"Endpoint discovery failed for {authority}: {reason}",
            details={"authority": authority, "reason": reason, **(details or {})},
        )
        self.authority = authority
        self.reason = reason


class CacheCorruptionError(IntrospectionLayerError):
    """Raised when bytes read from the claims cache are not a serialized ClaimSet."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="oauth2_introspection:cache/corrupt_entry",
            message=f"Cached claims could not be deserialized: {reason}",
            details=details or {},
        )
        self.reason = reason
