"""Configuration for the introspection authentication scheme."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable, Iterable

from oauth2_introspection.cache.keys import CacheKeyGenerator, cache_key_from_token
from oauth2_introspection.errors import ConfigurationError
from oauth2_introspection.identity import DEFAULT_NAME_CLAIM_TYPE, DEFAULT_ROLE_CLAIM_TYPE
from oauth2_introspection.retrieval import TokenRetriever, from_authorization_header_or_query_string

if TYPE_CHECKING:
    from oauth2_introspection.models.claims import Claim

ExtraClaimsParser = Callable[[dict[str, Any]], Iterable["Claim"]]

DEFAULT_CACHE_DURATION = timedelta(minutes=5)
DEFAULT_HTTP_TIMEOUT = 10.0
ACCESS_TOKEN_TYPE_HINT = "access_token"

ENV_PREFIX = "OAUTH2_INTROSPECTION_"
ENV_AUTHORITY = f"{ENV_PREFIX}AUTHORITY"
ENV_ENDPOINT = f"{ENV_PREFIX}ENDPOINT"
ENV_CLIENT_ID = f"{ENV_PREFIX}CLIENT_ID"
ENV_CLIENT_SECRET = f"{ENV_PREFIX}CLIENT_SECRET"
ENV_CACHE_KEY_PREFIX = f"{ENV_PREFIX}CACHE_KEY_PREFIX"
ENV_ENABLE_CACHING = f"{ENV_PREFIX}ENABLE_CACHING"
ENV_CACHE_DURATION_SECONDS = f"{ENV_PREFIX}CACHE_DURATION_SECONDS"
ENV_SKIP_TOKENS_WITH_DOTS = f"{ENV_PREFIX}SKIP_TOKENS_WITH_DOTS"

_TRUTHY = ("true", "1", "yes", "on")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class IntrospectionOptions:
    """Options for validating bearer tokens via an introspection endpoint.

    Either ``authority`` (the endpoint is then discovered from its OpenID
    configuration) or ``introspection_endpoint`` must be set.

    Attributes:
        authority: Issuer URL used for endpoint discovery.
        introspection_endpoint: Explicit RFC 7662 endpoint; wins over discovery.
        client_id: Client id used to authenticate to the endpoint.
        client_secret: Client secret used to authenticate to the endpoint.
        token_type_hint: ``token_type_hint`` sent with every request.
        cache_key_prefix: Prefix prepended to every derived cache key.
        enable_caching: Cache active claim sets in the distributed store.
        cache_duration: Upper bound on how long claims stay cached.
        skip_tokens_with_dots: Decline tokens containing "." (leave JWTs to another scheme).
        name_claim_type: Claim type used as the principal's name.
        role_claim_type: Claim type used for the principal's roles.
        save_token: Carry the raw access token in the success properties.
        authentication_scheme: Scheme name stamped on the principal.
        token_retriever: Extracts the raw token from a request.
        cache_key_generator: Maps (options, token) to a cache key.
        http_timeout: Timeout in seconds for discovery and introspection calls.
        allow_insecure_http: Permit a plain-HTTP authority during discovery.
        parse_extra_claims: Receives the parsed JSON body of an active
            response and returns claims to append to the claim set.
    """

    authority: str | None = None
    introspection_endpoint: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    token_type_hint: str = ACCESS_TOKEN_TYPE_HINT
    cache_key_prefix: str = ""
    enable_caching: bool = False
    cache_duration: timedelta = DEFAULT_CACHE_DURATION
    skip_tokens_with_dots: bool = False
    name_claim_type: str = DEFAULT_NAME_CLAIM_TYPE
    role_claim_type: str = DEFAULT_ROLE_CLAIM_TYPE
    save_token: bool = True
    authentication_scheme: str = "Bearer"
    token_retriever: TokenRetriever = field(
        default_factory=from_authorization_header_or_query_string
    )
    cache_key_generator: CacheKeyGenerator = field(default_factory=cache_key_from_token)
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    allow_insecure_http: bool = False
    parse_extra_claims: ExtraClaimsParser | None = None

    def validate(self) -> None:
        """Check the options are usable.

        Raises:
            ConfigurationError: If no endpoint source, no client id, or a
                non-positive cache duration with caching enabled.
        """
        if not self.authority and not self.introspection_endpoint:
            raise ConfigurationError(
                "authority",
                "Either authority or introspection_endpoint must be set",
            )
        if not self.client_id:
            raise ConfigurationError("client_id", "client_id must be set")
        if self.enable_caching and self.cache_duration <= timedelta(0):
            raise ConfigurationError(
                "cache_duration",
                "cache_duration must be positive when caching is enabled",
                details={"cache_duration_seconds": self.cache_duration.total_seconds()},
            )

    @classmethod
    def from_env(cls) -> IntrospectionOptions:
        """Build options from OAUTH2_INTROSPECTION_* environment variables.

        Raises:
            ConfigurationError: If the cache duration is not a number.
        """
        duration = DEFAULT_CACHE_DURATION
        raw_duration = os.environ.get(ENV_CACHE_DURATION_SECONDS, "").strip()
        if raw_duration:
            try:
                duration = timedelta(seconds=float(raw_duration))
            except ValueError as exc:
                raise ConfigurationError(
                    "cache_duration",
                    f"{ENV_CACHE_DURATION_SECONDS} must be a number of seconds",
                    details={"value": raw_duration},
                ) from exc
        return cls(
            authority=os.environ.get(ENV_AUTHORITY) or None,
            introspection_endpoint=os.environ.get(ENV_ENDPOINT) or None,
            client_id=os.environ.get(ENV_CLIENT_ID) or None,
            client_secret=os.environ.get(ENV_CLIENT_SECRET) or None,
            cache_key_prefix=os.environ.get(ENV_CACHE_KEY_PREFIX, ""),
            enable_caching=_env_flag(ENV_ENABLE_CACHING),
            cache_duration=duration,
            skip_tokens_with_dots=_env_flag(ENV_SKIP_TOKENS_WITH_DOTS),
        )
