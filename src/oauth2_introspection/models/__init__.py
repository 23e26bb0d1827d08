"""Value objects shared by the cache, coordinator and handler."""

from oauth2_introspection.models.base import IntrospectionModel
from oauth2_introspection.models.claims import (
    EXPIRATION_CLAIM,
    Claim,
    ClaimSet,
    claims_from_introspection_response,
    deserialize_claims,
    serialize_claims,
)
from oauth2_introspection.models.enums import ClaimValueType, OutcomeKind, ResultKind
from oauth2_introspection.models.outcome import IntrospectionOutcome, normalize_outcome
from oauth2_introspection.models.results import (
    BEARER_CHALLENGE,
    EXPIRED_TOKEN_DESCRIPTION,
    AuthenticateResult,
    error_challenge,
)

__all__ = [
    "AuthenticateResult",
    "BEARER_CHALLENGE",
    "Claim",
    "ClaimSet",
    "ClaimValueType",
    "EXPIRATION_CLAIM",
    "EXPIRED_TOKEN_DESCRIPTION",
    "IntrospectionModel",
    "IntrospectionOutcome",
    "OutcomeKind",
    "ResultKind",
    "claims_from_introspection_response",
    "deserialize_claims",
    "error_challenge",
    "normalize_outcome",
    "serialize_claims",
]
