"""Caller-facing identity built from validated claims."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from oauth2_introspection.models.claims import ClaimSet

if TYPE_CHECKING:
    from oauth2_introspection.options import IntrospectionOptions

DEFAULT_NAME_CLAIM_TYPE = "name"
DEFAULT_ROLE_CLAIM_TYPE = "role"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity of the caller.

    Attributes:
        claims: Claims the identity was built from.
        authentication_type: Scheme that authenticated the caller (e.g. "Bearer").
        name_claim_type: Claim type read by ``name``.
        role_claim_type: Claim type read by ``roles``.
    """

    claims: ClaimSet
    authentication_type: str
    name_claim_type: str = DEFAULT_NAME_CLAIM_TYPE
    role_claim_type: str = DEFAULT_ROLE_CLAIM_TYPE
    roles: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", tuple(self.claims.values(self.role_claim_type)))

    @property
    def name(self) -> str | None:
        return self.claims.first(self.name_claim_type)

    @property
    def subject(self) -> str | None:
        return self.claims.first("sub")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authentication_type)

    def is_in_role(self, role: str) -> bool:
        return role in self.roles

    def find_first(self, claim_type: str) -> str | None:
        return self.claims.first(claim_type)

    def has_claim(self, claim_type: str, value: str | None = None) -> bool:
        """Return True if a claim of ``claim_type`` (optionally with ``value``) exists."""
        if value is None:
            return self.claims.has(claim_type)
        return value in self.claims.values(claim_type)


IdentityBuilder = Callable[[ClaimSet, "IntrospectionOptions"], Principal]


def build_principal(claims: ClaimSet, options: IntrospectionOptions) -> Principal:
    """Default IdentityBuilder using the options' scheme and claim-type mapping."""
    return Principal(
        claims=claims,
        authentication_type=options.authentication_scheme,
        name_claim_type=options.name_claim_type,
        role_claim_type=options.role_claim_type,
    )
