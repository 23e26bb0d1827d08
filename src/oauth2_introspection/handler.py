"""Bearer token authentication via OAuth2 introspection.

``IntrospectionHandler.authenticate`` runs, per request:

    extract token -> (skip) -> cache lookup -> single-flight introspection
    -> interpret outcome -> cache write -> Skip | Success | Fail

Concurrent requests presenting the same token share one introspection
call. Only active claim sets are cached; errors and inactive results are
never persisted, and there is no fallback to stale entries.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from starlette.requests import Request

from oauth2_introspection.cache import ClaimsCache, DistributedStore, create_distributed_store
from oauth2_introspection.coordination import SingleFlight
from oauth2_introspection.errors import ConfigurationError
from oauth2_introspection.identity import IdentityBuilder, build_principal
from oauth2_introspection.introspection.client import IntrospectionClient, IntrospectionSender
from oauth2_introspection.models.claims import ClaimSet
from oauth2_introspection.models.outcome import IntrospectionOutcome, normalize_outcome
from oauth2_introspection.models.results import AuthenticateResult, error_challenge
from oauth2_introspection.observability import get_logger
from oauth2_introspection.options import IntrospectionOptions

logger = get_logger(__name__)

TOKEN_NOT_ACTIVE = "Token is not active."
ENDPOINT_ERROR_PREFIX = "Error returned from introspection endpoint: "
UNEXPECTED_FAILURE = "unexpected_failure"
ACCESS_TOKEN_PROPERTY = "access_token"


class IntrospectionHandler:
    """Authenticates requests by introspecting their bearer token.

    One handler (and its SingleFlight table) is created at service start and
    shared by all request handlers; ``aclose`` releases the cache backend.

    Example:
        >>> options = IntrospectionOptions(
        ...     authority="https://auth.example.com",
        ...     client_id="api1",
        ...     client_secret="secret",
        ...     enable_caching=True,
        ... )
        >>> handler = IntrospectionHandler.create(options)
        >>> result = await handler.authenticate(request)
        >>> if result.succeeded:
        ...     print(result.principal.name)
    """

    def __init__(
        self,
        options: IntrospectionOptions,
        client: IntrospectionSender,
        *,
        claims_cache: Optional[ClaimsCache] = None,
        single_flight: Optional[SingleFlight[IntrospectionOutcome]] = None,
        identity_builder: IdentityBuilder = build_principal,
    ) -> None:
        """Initialize the handler.

        Args:
            options: Scheme options.
            client: Performs the introspection exchange.
            claims_cache: Required when ``options.enable_caching`` is set.
            single_flight: Shared coalescing table; a private one is created if omitted.
            identity_builder: Builds the principal from active claims.

        Raises:
            ConfigurationError: If caching is enabled without a claims cache.
        """
        if options.enable_caching and claims_cache is None:
            raise ConfigurationError(
                "enable_caching", "enable_caching requires a claims cache"
            )
        self._options = options
        self._client = client
        self._claims_cache = claims_cache
        self._single_flight: SingleFlight[IntrospectionOutcome] = (
            single_flight if single_flight is not None else SingleFlight()
        )
        self._identity_builder = identity_builder

    @classmethod
    def create(
        cls,
        options: IntrospectionOptions,
        *,
        store: Optional[DistributedStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        identity_builder: IdentityBuilder = build_principal,
    ) -> IntrospectionHandler:
        """Validate ``options`` and wire the default collaborators.

        Args:
            options: Scheme options.
            store: Cache backend; defaults to ``create_distributed_store()``
                when caching is enabled.
            transport: Optional httpx transport for testing.
            identity_builder: Builds the principal from active claims.

        Raises:
            ConfigurationError: If the options are invalid.
        """
        options.validate()
        claims_cache = None
        if options.enable_caching:
            claims_cache = ClaimsCache(
                store if store is not None else create_distributed_store(), options
            )
        return cls(
            options,
            IntrospectionClient.from_options(options, transport=transport),
            claims_cache=claims_cache,
            single_flight=SingleFlight(),
            identity_builder=identity_builder,
        )

    @property
    def options(self) -> IntrospectionOptions:
        return self._options

    @property
    def single_flight(self) -> SingleFlight[IntrospectionOutcome]:
        return self._single_flight

    @property
    def claims_cache(self) -> Optional[ClaimsCache]:
        return self._claims_cache

    async def authenticate(self, request: Request) -> AuthenticateResult:
        """Authenticate ``request`` using the configured token retriever."""
        return await self.authenticate_token(self._options.token_retriever(request))

    async def authenticate_token(self, token: Optional[str]) -> AuthenticateResult:
        """Authenticate a raw token already extracted from a request."""
        if token is None or not token.strip():
            return AuthenticateResult.skip()

        if self._options.skip_tokens_with_dots and "." in token:
            logger.debug("oauth2_introspection.skipped_token_with_dots")
            return AuthenticateResult.skip()

        if self._claims_cache is not None:
            cached = await self._claims_cache.get_claims(token)
            if cached is not None:
                logger.debug("oauth2_introspection.cache.hit")
                return self._success(token, cached)
            logger.debug("oauth2_introspection.cache.miss")

        try:
            outcome = await self._single_flight.coordinate(token, lambda: self._introspect(token))
        except Exception as exc:
            logger.exception("oauth2_introspection.introspection_raised", error=str(exc))
            outcome = IntrospectionOutcome.failure(UNEXPECTED_FAILURE, str(exc) or None)

        return await self._interpret(token, outcome)

    async def _introspect(self, token: str) -> IntrospectionOutcome:
        outcome = await self._client.send(
            token,
            self._options.client_id,
            self._options.client_secret,
            self._options.token_type_hint,
        )
        return normalize_outcome(outcome)

    async def _interpret(self, token: str, outcome: IntrospectionOutcome) -> AuthenticateResult:
        if outcome.is_error:
            error = outcome.error or UNEXPECTED_FAILURE
            logger.error(
                "oauth2_introspection.endpoint_returned_error",
                error=error,
                http_status=outcome.http_status,
            )
            return AuthenticateResult.fail(
                ENDPOINT_ERROR_PREFIX + error,
                error_challenge(error, outcome.error_description),
            )

        if not outcome.is_active:
            return AuthenticateResult.fail(TOKEN_NOT_ACTIVE)

        result = self._success(token, outcome.claims)
        if self._claims_cache is not None:
            try:
                await self._claims_cache.set_claims(
                    token, outcome.claims, self._options.cache_duration
                )
            except Exception as exc:
                logger.warning("oauth2_introspection.cache.write_failed", error=str(exc))
        return result

    def _success(self, token: str, claims: ClaimSet) -> AuthenticateResult:
        principal = self._identity_builder(claims, self._options)
        properties: dict[str, Any] = {}
        if self._options.save_token:
            properties[ACCESS_TOKEN_PROPERTY] = token
        return AuthenticateResult.success(principal, properties)

    async def aclose(self) -> None:
        """Release the cache backend, if it holds connections."""
        if self._claims_cache is None:
            return
        closer = getattr(self._claims_cache.store, "aclose", None)
        if closer is not None:
            await closer()
