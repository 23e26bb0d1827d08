"""Result of authenticating one request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from oauth2_introspection.models.enums import ResultKind

if TYPE_CHECKING:
    from oauth2_introspection.identity import Principal

BEARER_CHALLENGE = "Bearer"
EXPIRED_TOKEN_ERROR = "expired_token"
EXPIRED_TOKEN_DESCRIPTION = "The access token is expired"


def error_challenge(error: str, description: str | None) -> str:
    """Build a WWW-Authenticate value for an introspection error (RFC 6750 section 3).

    Example:
        >>> error_challenge("expired_token", None)
        'Bearer error="expired_token", error_description="The access token is expired"'
    """
    if not description and error == EXPIRED_TOKEN_ERROR:
        description = EXPIRED_TOKEN_DESCRIPTION
    return f'Bearer error="{error}", error_description="{description or ""}"'


@dataclass(frozen=True)
class AuthenticateResult:
    """Skip, Success(principal) or Fail(reason, challenge).

    Attributes:
        kind: Terminal state of the authentication attempt.
        principal: Authenticated identity on success.
        properties: Extra values carried with a success (e.g. the saved access token).
        failure: Reason string on failure.
        challenge: WWW-Authenticate header value to send with a failure.
    """

    kind: ResultKind
    principal: Principal | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    failure: str | None = None
    challenge: str | None = None

    @classmethod
    def skip(cls) -> AuthenticateResult:
        return cls(kind=ResultKind.SKIP)

    @classmethod
    def success(
        cls, principal: Principal, properties: dict[str, Any] | None = None
    ) -> AuthenticateResult:
        return cls(kind=ResultKind.SUCCESS, principal=principal, properties=properties or {})

    @classmethod
    def fail(cls, reason: str, challenge: str | None = BEARER_CHALLENGE) -> AuthenticateResult:
        return cls(kind=ResultKind.FAIL, failure=reason, challenge=challenge)

    @property
    def skipped(self) -> bool:
        return self.kind is ResultKind.SKIP

    @property
    def succeeded(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @property
    def failed(self) -> bool:
        return self.kind is ResultKind.FAIL
