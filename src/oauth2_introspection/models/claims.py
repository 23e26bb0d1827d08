"""Claims returned by an introspection endpoint and their cache serialization.

A ClaimSet is an ordered sequence of (type, value) pairs. Values are kept
as strings; ``value_type`` records the JSON type each value was rendered
from so the set round-trips through the cache without loss.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import Field, TypeAdapter, ValidationError

from oauth2_introspection.errors import CacheCorruptionError
from oauth2_introspection.models.base import IntrospectionModel
from oauth2_introspection.models.enums import ClaimValueType

EXPIRATION_CLAIM = "exp"
SCOPE_CLAIM = "scope"
ACTIVE_MEMBER = "active"


class Claim(IntrospectionModel):
    """A single typed attribute of a token's subject.

    Attributes:
        type: Claim name (e.g. "sub", "exp", "scope").
        value: Claim value rendered as a string.
        value_type: JSON type the value was rendered from.
    """

    type: str = Field(..., min_length=1, description="Claim name")
    value: str = Field(..., description="Claim value as a string")
    value_type: ClaimValueType = Field(
        default=ClaimValueType.STRING, description="Original JSON type of the value"
    )


_CLAIM_LIST = TypeAdapter(list[Claim])


class ClaimSet(IntrospectionModel):
    """Ordered, immutable collection of claims.

    Example:
        >>> claims = ClaimSet.of(("sub", "alice"), ("exp", "1900000000"))
        >>> claims.first("sub")
        'alice'
        >>> claims.expiration
        1900000000
    """

    claims: tuple[Claim, ...] = Field(default_factory=tuple)

    @classmethod
    def of(cls, *pairs: tuple[str, str]) -> ClaimSet:
        """Build a ClaimSet of string claims from (type, value) pairs."""
        return cls(claims=tuple(Claim(type=t, value=v) for t, v in pairs))

    def __len__(self) -> int:
        return len(self.claims)

    def find(self, claim_type: str) -> Claim | None:
        """Return the first claim of ``claim_type``, or None."""
        for claim in self.claims:
            if claim.type == claim_type:
                return claim
        return None

    def first(self, claim_type: str) -> str | None:
        """Return the value of the first claim of ``claim_type``, or None."""
        claim = self.find(claim_type)
        return claim.value if claim is not None else None

    def values(self, claim_type: str) -> list[str]:
        """Return the values of all claims of ``claim_type`` in order."""
        return [c.value for c in self.claims if c.type == claim_type]

    def has(self, claim_type: str) -> bool:
        return self.find(claim_type) is not None

    @property
    def expiration(self) -> int | None:
        """Unix-seconds value of the ``exp`` claim, or None if absent or unparseable."""
        raw = self.first(EXPIRATION_CLAIM)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            pass
        try:
            return int(float(raw))
        except (ValueError, OverflowError):
            return None


def serialize_claims(claims: ClaimSet) -> bytes:
    """Serialize a ClaimSet to UTF-8 JSON for cache storage.

    The format is a JSON array of ``{"type", "value"[, "value_type"]}``
    objects; ``value_type`` is omitted for plain strings.
    """
    return _CLAIM_LIST.dump_json(list(claims.claims), exclude_defaults=True)


def deserialize_claims(data: bytes) -> ClaimSet:
    """Deserialize bytes written by ``serialize_claims``.

    Raises:
        CacheCorruptionError: If ``data`` is not a serialized claim list.
    """
    try:
        claims = _CLAIM_LIST.validate_json(data)
    except ValidationError as exc:
        raise CacheCorruptionError(
            "invalid claim list", details={"errors": exc.error_count()}
        ) from exc
    return ClaimSet(claims=tuple(claims))


def _render(claim_type: str, value: Any) -> list[Claim]:
    """Render one JSON member into zero or more claims."""
    if value is None:
        return []
    if isinstance(value, bool):
        return [
            Claim(
                type=claim_type,
                value="true" if value else "false",
                value_type=ClaimValueType.BOOLEAN,
            )
        ]
    if isinstance(value, int):
        return [Claim(type=claim_type, value=str(value), value_type=ClaimValueType.INTEGER)]
    if isinstance(value, float):
        return [Claim(type=claim_type, value=json.dumps(value), value_type=ClaimValueType.DOUBLE)]
    if isinstance(value, str):
        return [Claim(type=claim_type, value=value)]
    if isinstance(value, list):
        rendered: list[Claim] = []
        for item in value:
            rendered.extend(_render(claim_type, item))
        return rendered
    return [
        Claim(
            type=claim_type,
            value=json.dumps(value, separators=(",", ":")),
            value_type=ClaimValueType.JSON,
        )
    ]


def claims_from_introspection_response(body: dict[str, Any]) -> ClaimSet:
    """Flatten an RFC 7662 response body into a ClaimSet.

    The ``active`` member is protocol metadata and is dropped, as are
    members with an empty name. A space-separated ``scope`` string yields
    one ``scope`` claim per scope; arrays yield one claim per element;
    objects are kept as JSON text.

    Example:
        >>> claims = claims_from_introspection_response(
        ...     {"active": True, "sub": "alice", "scope": "read write"}
        ... )
        >>> claims.values("scope")
        ['read', 'write']
    """
    claims: list[Claim] = []
    for name, value in body.items():
        if not name or name == ACTIVE_MEMBER:
            continue
        if name == SCOPE_CLAIM and isinstance(value, str):
            claims.extend(Claim(type=SCOPE_CLAIM, value=s) for s in value.split() if s)
            continue
        claims.extend(_render(name, value))
    return ClaimSet(claims=tuple(claims))
