"""Outcome of one call to the introspection endpoint.

An outcome is created once per flight and shared by every request
coalesced onto that flight, so it is immutable.
"""

from __future__ import annotations

from pydantic import Field

from oauth2_introspection.models.base import IntrospectionModel
from oauth2_introspection.models.claims import ClaimSet
from oauth2_introspection.models.enums import OutcomeKind

ERROR_CLAIM = "error"
ERROR_DESCRIPTION_CLAIM = "error_description"


class IntrospectionOutcome(IntrospectionModel):
    """Active(claims), Inactive, or Error(code, description).

    Attributes:
        kind: Which of the three outcomes this is.
        claims: Claims of an active token; empty otherwise.
        error: Error code for ERROR outcomes (e.g. "invalid_client").
        error_description: Optional human-readable description of the error.
        http_status: HTTP status of the endpoint response when it was not 2xx.
    """

    kind: OutcomeKind
    claims: ClaimSet = Field(default_factory=ClaimSet)
    error: str | None = None
    error_description: str | None = None
    http_status: int | None = None

    @classmethod
    def active(cls, claims: ClaimSet) -> IntrospectionOutcome:
        return cls(kind=OutcomeKind.ACTIVE, claims=claims)

    @classmethod
    def inactive(cls) -> IntrospectionOutcome:
        return cls(kind=OutcomeKind.INACTIVE)

    @classmethod
    def failure(
        cls,
        error: str,
        description: str | None = None,
        *,
        http_status: int | None = None,
    ) -> IntrospectionOutcome:
        return cls(
            kind=OutcomeKind.ERROR,
            error=error,
            error_description=description,
            http_status=http_status,
        )

    @property
    def is_active(self) -> bool:
        return self.kind is OutcomeKind.ACTIVE

    @property
    def is_error(self) -> bool:
        return self.kind is OutcomeKind.ERROR


def normalize_outcome(outcome: IntrospectionOutcome) -> IntrospectionOutcome:
    """Turn an active outcome carrying an ``error`` claim into an ERROR outcome.

    Some legacy endpoints report failures as ordinary members of a 2xx body
    instead of an HTTP error. The ``error_description`` claim, when present,
    becomes the description.

    Example:
        >>> legacy = IntrospectionOutcome.active(ClaimSet.of(("error", "expired_token")))
        >>> normalize_outcome(legacy).error
        'expired_token'
    """
    if outcome.kind is not OutcomeKind.ACTIVE:
        return outcome
    code = outcome.claims.first(ERROR_CLAIM)
    if code is None:
        return outcome
    return IntrospectionOutcome.failure(
        code,
        outcome.claims.first(ERROR_DESCRIPTION_CLAIM),
        http_status=outcome.http_status,
    )
