"""OAuth2 token introspection client (RFC 7662).

Posts the token to the provider's introspection endpoint, authenticating
with client credentials (HTTP Basic). Every failure of the exchange is
returned as an ERROR outcome; ``send`` never raises for remote faults.
No retries are attempted.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from oauth2_introspection.errors import ConfigurationError, DiscoveryError
from oauth2_introspection.introspection.discovery import EndpointDiscovery
from oauth2_introspection.models.claims import ClaimSet, claims_from_introspection_response
from oauth2_introspection.models.outcome import IntrospectionOutcome
from oauth2_introspection.observability import get_logger
from oauth2_introspection.options import (
    ACCESS_TOKEN_TYPE_HINT,
    DEFAULT_HTTP_TIMEOUT,
    ExtraClaimsParser,
    IntrospectionOptions,
)

logger = get_logger(__name__)

NETWORK_ERROR = "network_error"
INVALID_RESPONSE = "invalid_response"
DISCOVERY_FAILED = "discovery_failed"


@runtime_checkable
class IntrospectionSender(Protocol):
    """Anything that can run one introspection exchange for a token."""

    async def send(
        self,
        token: str,
        client_id: Optional[str],
        client_secret: Optional[str],
        token_type_hint: Optional[str] = ACCESS_TOKEN_TYPE_HINT,
    ) -> IntrospectionOutcome:
        ...


def _http_error_outcome(resp: httpx.Response) -> IntrospectionOutcome:
    """Map a non-2xx response to an ERROR outcome.

    A JSON ``error`` member wins as the code. The reason phrase wins as the
    description; the body's ``error_description`` is used only when the
    response has no reason phrase.
    """
    reason = resp.reason_phrase or None
    code: Optional[str] = None
    description: Optional[str] = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        if isinstance(body.get("error"), str) and body["error"]:
            code = body["error"]
        if isinstance(body.get("error_description"), str) and body["error_description"]:
            description = body["error_description"]
    return IntrospectionOutcome.failure(
        code or reason or f"http_{resp.status_code}",
        reason or description,
        http_status=resp.status_code,
    )


class IntrospectionClient:
    """RFC 7662 introspection client with optional endpoint discovery.

    Example:
        >>> client = IntrospectionClient(endpoint="https://auth.example.com/connect/introspect")
        >>> outcome = await client.send("opaque-token", "api1", "secret")
        >>> outcome.is_active
        True
    """

    def __init__(
        self,
        *,
        endpoint: Optional[str] = None,
        discovery: Optional[EndpointDiscovery] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        parse_extra_claims: Optional[ExtraClaimsParser] = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Introspection endpoint URL; takes precedence over discovery.
            discovery: Resolves the endpoint lazily when ``endpoint`` is not set.
            transport: Optional httpx transport for testing.
            timeout: Request timeout in seconds.
            parse_extra_claims: Maps the JSON body of an active response to
                additional claims.

        Raises:
            ConfigurationError: If neither endpoint nor discovery is given.
        """
        if not endpoint and discovery is None:
            raise ConfigurationError(
                "introspection_endpoint",
                "An introspection endpoint or a discovery client is required",
            )
        self._endpoint = endpoint
        self._discovery = discovery
        self._transport = transport
        self._timeout = timeout
        self._parse_extra_claims = parse_extra_claims
        self._endpoint_lock = asyncio.Lock()

    @classmethod
    def from_options(
        cls,
        options: IntrospectionOptions,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> IntrospectionClient:
        """Build a client from options, discovering the endpoint from the authority if needed."""
        discovery = None
        if not options.introspection_endpoint and options.authority:
            discovery = EndpointDiscovery(
                options.authority,
                transport=transport,
                timeout=options.http_timeout,
                allow_insecure_http=options.allow_insecure_http,
            )
        return cls(
            endpoint=options.introspection_endpoint,
            discovery=discovery,
            transport=transport,
            timeout=options.http_timeout,
            parse_extra_claims=options.parse_extra_claims,
        )

    async def resolve_endpoint(self) -> str:
        """Return the introspection endpoint, running discovery once if needed.

        Raises:
            DiscoveryError: If discovery fails.
        """
        if self._endpoint:
            return self._endpoint
        async with self._endpoint_lock:
            if self._endpoint:
                return self._endpoint
            if self._discovery is None:
                raise ConfigurationError(
                    "introspection_endpoint", "No introspection endpoint configured"
                )
            document = await self._discovery.discover()
            self._endpoint = document.introspection_endpoint
            return self._endpoint

    async def send(
        self,
        token: str,
        client_id: Optional[str],
        client_secret: Optional[str],
        token_type_hint: Optional[str] = ACCESS_TOKEN_TYPE_HINT,
    ) -> IntrospectionOutcome:
        """Introspect ``token`` and return its outcome.

        Returns:
            ACTIVE with the response claims when ``active`` is JSON true,
            INACTIVE for any other well-formed response, ERROR otherwise.
        """
        try:
            endpoint = await self.resolve_endpoint()
        except DiscoveryError as exc:
            logger.error(
                "oauth2_introspection.discovery.failed",
                authority=exc.authority,
                error=exc.reason,
            )
            return IntrospectionOutcome.failure(DISCOVERY_FAILED, exc.message)

        data: dict[str, str] = {"token": token}
        if token_type_hint:
            data["token_type_hint"] = token_type_hint

        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        auth: Optional[tuple[str, str]] = None
        if client_id and client_secret is not None:
            auth = (client_id, client_secret)
        elif client_id:
            data["client_id"] = client_id

        try:
            async with httpx.AsyncClient(**kwargs) as client:
                resp = await client.post(
                    endpoint,
                    auth=auth,
                    data=data,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "oauth2_introspection.request_failed",
                endpoint=endpoint,
                error=str(exc) or type(exc).__name__,
            )
            return IntrospectionOutcome.failure(NETWORK_ERROR, str(exc) or type(exc).__name__)

        if not resp.is_success:
            outcome = _http_error_outcome(resp)
            logger.warning(
                "oauth2_introspection.endpoint_error",
                endpoint=endpoint,
                status_code=resp.status_code,
                error=outcome.error,
            )
            return outcome

        try:
            body = resp.json()
        except ValueError:
            return IntrospectionOutcome.failure(INVALID_RESPONSE, "Response body is not JSON")
        if not isinstance(body, dict):
            return IntrospectionOutcome.failure(
                INVALID_RESPONSE, "Response body is not a JSON object"
            )

        if body.get("active") is not True:
            return IntrospectionOutcome.inactive()

        claims = claims_from_introspection_response(body)
        if self._parse_extra_claims is not None:
            extra = tuple(self._parse_extra_claims(body))
            if extra:
                claims = ClaimSet(claims=claims.claims + extra)
        return IntrospectionOutcome.active(claims)
