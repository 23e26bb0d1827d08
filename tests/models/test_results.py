"""Tests for AuthenticateResult and WWW-Authenticate challenges."""

from oauth2_introspection.identity import Principal
from oauth2_introspection.models.claims import ClaimSet
from oauth2_introspection.models.enums import ResultKind
from oauth2_introspection.models.results import (
    BEARER_CHALLENGE,
    AuthenticateResult,
    error_challenge,
)


def test_error_challenge_format() -> None:
    """Verify the challenge carries error and description attributes."""
    assert (
        error_challenge("invalid_token", "revoked")
        == 'Bearer error="invalid_token", error_description="revoked"'
    )


def test_expired_token_gets_default_description() -> None:
    """Verify expired_token without description uses the standard text."""
    assert (
        error_challenge("expired_token", None)
        == 'Bearer error="expired_token", error_description="The access token is expired"'
    )


def test_expired_token_keeps_explicit_description() -> None:
    """Verify an explicit description wins over the expired default."""
    assert error_challenge("expired_token", "custom").endswith('error_description="custom"')


def test_missing_description_is_empty() -> None:
    """Verify other errors without description render an empty attribute."""
    assert error_challenge("server_error", None) == (
        'Bearer error="server_error", error_description=""'
    )


def test_result_constructors() -> None:
    """Verify Skip, Success and Fail constructors."""
    principal = Principal(claims=ClaimSet.of(("sub", "alice")), authentication_type="Bearer")

    skip = AuthenticateResult.skip()
    success = AuthenticateResult.success(principal, {"access_token": "t"})
    fail = AuthenticateResult.fail("Token is not active.")

    assert skip.kind is ResultKind.SKIP and skip.skipped
    assert success.succeeded and success.principal is principal
    assert success.properties == {"access_token": "t"}
    assert fail.failed and fail.failure == "Token is not active."
    assert fail.challenge == BEARER_CHALLENGE


def test_success_without_properties() -> None:
    """Verify success properties default to an empty dict."""
    principal = Principal(claims=ClaimSet(), authentication_type="Bearer")

    assert AuthenticateResult.success(principal).properties == {}
