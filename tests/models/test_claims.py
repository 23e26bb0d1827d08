"""Tests for ClaimSet, claim serialization and response flattening."""

import json

import pytest

from oauth2_introspection.errors import CacheCorruptionError
from oauth2_introspection.models.claims import (
    Claim,
    ClaimSet,
    claims_from_introspection_response,
    deserialize_claims,
    serialize_claims,
)
from oauth2_introspection.models.enums import ClaimValueType


class TestClaimSet:
    """Tests for ClaimSet lookups."""

    def test_first_and_values(self) -> None:
        """Test lookup of first and all values of a claim type."""
        claims = ClaimSet.of(("role", "admin"), ("sub", "alice"), ("role", "ops"))

        assert claims.first("role") == "admin"
        assert claims.values("role") == ["admin", "ops"]
        assert claims.first("missing") is None
        assert claims.has("sub")
        assert not claims.has("missing")
        assert len(claims) == 3

    def test_find_returns_claim(self) -> None:
        """Test that find returns the Claim object."""
        claims = ClaimSet.of(("sub", "alice"))

        assert claims.find("sub") == Claim(type="sub", value="alice")
        assert claims.find("nope") is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("1700000000", 1700000000), ("1700000000.7", 1700000000), ("soon", None)],
    )
    def test_expiration_parsing(self, raw: str, expected: int | None) -> None:
        """Test exp parsing from integer, double and garbage strings."""
        assert ClaimSet.of(("exp", raw)).expiration == expected

    def test_expiration_absent(self) -> None:
        """Test that a set without exp has no expiration."""
        assert ClaimSet.of(("sub", "alice")).expiration is None

    def test_empty_claim_type_rejected(self) -> None:
        """Test that claims require a non-empty type."""
        with pytest.raises(ValueError):
            Claim(type="", value="x")


class TestSerialization:
    """Tests for the cache wire format."""

    def test_format_is_json_array_of_objects(self) -> None:
        """Test that strings omit value_type and other kinds keep it."""
        claims = ClaimSet(
            claims=(
                Claim(type="sub", value="alice"),
                Claim(type="exp", value="1700000000", value_type=ClaimValueType.INTEGER),
            )
        )

        decoded = json.loads(serialize_claims(claims))

        assert decoded == [
            {"type": "sub", "value": "alice"},
            {"type": "exp", "value": "1700000000", "value_type": "integer"},
        ]

    def test_round_trip_keeps_order_and_types(self) -> None:
        """Test that every claim, including its value type, survives a round trip."""
        claims = claims_from_introspection_response(
            {"sub": "alice", "exp": 1700000000, "admin": False, "ratio": 0.5, "aud": ["a", "b"]}
        )

        restored = deserialize_claims(serialize_claims(claims))

        assert restored == claims
        assert restored.expiration == 1700000000

    @pytest.mark.parametrize(
        "data",
        [b"", b"not json", b"{}", b'[{"value": "x"}]', b'[{"type": "a", "value": 1}]'],
    )
    def test_malformed_input_raises_corruption(self, data: bytes) -> None:
        """Test that anything but a claim list raises CacheCorruptionError."""
        with pytest.raises(CacheCorruptionError) as exc_info:
            deserialize_claims(data)

        assert exc_info.value.code == "oauth2_introspection:cache/corrupt_entry"


class TestClaimsFromResponse:
    """Tests for flattening RFC 7662 bodies into claims."""

    def test_active_member_dropped(self) -> None:
        """Test that the active flag is not a claim."""
        claims = claims_from_introspection_response({"active": True, "sub": "alice"})

        assert not claims.has("active")
        assert claims.first("sub") == "alice"

    def test_empty_member_name_dropped(self) -> None:
        """Test that a member with an empty name is skipped rather than rejected."""
        claims = claims_from_introspection_response({"active": True, "": "x", "sub": "alice"})

        assert [claim.type for claim in claims.claims] == ["sub"]

    def test_scope_string_split(self) -> None:
        """Test that a space-separated scope yields one claim per scope."""
        claims = claims_from_introspection_response({"scope": "read  write admin"})

        assert claims.values("scope") == ["read", "write", "admin"]

    def test_scalar_rendering(self) -> None:
        """Test JSON scalars are rendered to their JSON text with a value type."""
        claims = claims_from_introspection_response(
            {"exp": 1700000000, "email_verified": True, "score": 1.5, "nothing": None}
        )

        assert claims.find("exp") == Claim(
            type="exp", value="1700000000", value_type=ClaimValueType.INTEGER
        )
        assert claims.find("email_verified") == Claim(
            type="email_verified", value="true", value_type=ClaimValueType.BOOLEAN
        )
        assert claims.first("score") == "1.5"
        assert not claims.has("nothing")

    def test_arrays_and_objects(self) -> None:
        """Test arrays fan out and objects are kept as compact JSON."""
        claims = claims_from_introspection_response(
            {"role": ["admin", "ops"], "address": {"country": "NL"}}
        )

        assert claims.values("role") == ["admin", "ops"]
        assert claims.find("address") == Claim(
            type="address", value='{"country":"NL"}', value_type=ClaimValueType.JSON
        )
