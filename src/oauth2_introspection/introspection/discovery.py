"""Introspection endpoint discovery from an OpenID Connect authority.

Fetches ``{authority}/.well-known/openid-configuration`` and reads its
``introspection_endpoint`` member. The document is cached for an hour.
"""

from __future__ import annotations

import time
from threading import Lock
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from authlib.oidc.discovery import get_well_known_url
from pydantic import Field

from oauth2_introspection.errors import DiscoveryError
from oauth2_introspection.models.base import IntrospectionModel
from oauth2_introspection.observability import get_logger

logger = get_logger(__name__)

DISCOVERY_CACHE_TTL_SECONDS = 3600.0
DEFAULT_HTTP_TIMEOUT = 10.0


class DiscoveryDocument(IntrospectionModel):
    """Subset of OpenID Provider Metadata needed to introspect tokens."""

    issuer: str = Field(..., description="Provider issuer identifier")
    introspection_endpoint: str = Field(..., description="RFC 7662 endpoint URL")


class _DiscoveryCacheEntry:
    """Cached discovery document with TTL."""

    def __init__(self, document: DiscoveryDocument, ttl: float) -> None:
        self.document = document
        self.expires_at = time.time() + ttl

    def is_expired(self) -> bool:
        return time.time() >= self.expires_at


class EndpointDiscovery:
    """Resolves the introspection endpoint of an authority.

    Example:
        >>> discovery = EndpointDiscovery("https://auth.example.com")
        >>> document = await discovery.discover()
        >>> document.introspection_endpoint
        'https://auth.example.com/connect/introspect'
    """

    def __init__(
        self,
        authority: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        allow_insecure_http: bool = False,
    ) -> None:
        """Initialize the discovery client.

        Args:
            authority: Issuer URL (e.g. https://auth.example.com).
            transport: Optional httpx transport for testing.
            timeout: Request timeout in seconds.
            allow_insecure_http: Permit an http:// authority (development only).
        """
        self._authority = authority.rstrip("/")
        self._transport = transport
        self._timeout = timeout
        self._allow_insecure_http = allow_insecure_http
        self._cache_entry: Optional[_DiscoveryCacheEntry] = None
        self._lock = Lock()

    @property
    def authority(self) -> str:
        return self._authority

    async def discover(self) -> DiscoveryDocument:
        """Return the authority's discovery document, from cache when fresh.

        Raises:
            DiscoveryError: On network errors, non-2xx responses, non-HTTPS
                authorities, or documents without an introspection endpoint.
        """
        with self._lock:
            if self._cache_entry is not None and not self._cache_entry.is_expired():
                return self._cache_entry.document

        document = await self._fetch()

        with self._lock:
            self._cache_entry = _DiscoveryCacheEntry(document, DISCOVERY_CACHE_TTL_SECONDS)
        return document

    def invalidate(self) -> None:
        with self._lock:
            self._cache_entry = None

    async def _fetch(self) -> DiscoveryDocument:
        """Fetch and parse the discovery document (no cache)."""
        scheme = urlparse(self._authority).scheme
        if scheme != "https" and not (scheme == "http" and self._allow_insecure_http):
            raise DiscoveryError(self._authority, "authority must use HTTPS")

        url = get_well_known_url(self._authority, external=True)

        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        try:
            async with httpx.AsyncClient(**kwargs) as client:
                resp = await client.get(url, headers={"Accept": "application/json"})
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise DiscoveryError(
                self._authority,
                f"discovery endpoint returned {exc.response.status_code}",
                details={"status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise DiscoveryError(self._authority, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise DiscoveryError(self._authority, "discovery document is not JSON") from exc

        if not isinstance(data, dict):
            raise DiscoveryError(self._authority, "discovery document is not a JSON object")

        issuer = data.get("issuer")
        endpoint = data.get("introspection_endpoint")
        if not issuer or not isinstance(issuer, str):
            raise DiscoveryError(self._authority, "discovery document missing 'issuer'")
        if not endpoint or not isinstance(endpoint, str):
            raise DiscoveryError(
                self._authority, "discovery document missing 'introspection_endpoint'"
            )

        document = DiscoveryDocument(issuer=issuer, introspection_endpoint=endpoint)
        logger.info(
            "oauth2_introspection.discovery.resolved",
            issuer=document.issuer,
            introspection_endpoint=document.introspection_endpoint,
        )
        return document
