"""Bearer token retrieval from incoming requests.

Each factory returns a ``TokenRetriever``: a callable taking a Starlette
request and returning the raw token, or None when the request carries none.
"""

from __future__ import annotations

from typing import Callable

from starlette.requests import Request

TokenRetriever = Callable[[Request], "str | None"]

AUTHORIZATION_HEADER = "authorization"
DEFAULT_SCHEME = "Bearer"
DEFAULT_QUERY_PARAMETER = "access_token"


def from_authorization_header(scheme: str = DEFAULT_SCHEME) -> TokenRetriever:
    """Read the token from the first ``Authorization`` header value.

    Only the first value is inspected; a request whose first value uses a
    different scheme yields None even if a later value is a bearer token.
    Whitespace around the token is trimmed.
    """
    prefix = f"{scheme} "

    def retrieve(request: Request) -> str | None:
        values = request.headers.getlist(AUTHORIZATION_HEADER)
        if not values:
            return None
        first = values[0]
        if first.startswith(prefix):
            return first[len(prefix) :].strip()
        return None

    return retrieve


def from_query_string(name: str = DEFAULT_QUERY_PARAMETER) -> TokenRetriever:
    """Read the token from the first ``name`` query parameter (may be empty)."""

    def retrieve(request: Request) -> str | None:
        values = request.query_params.getlist(name)
        if not values:
            return None
        return values[0]

    return retrieve


def from_authorization_header_or_query_string(
    scheme: str = DEFAULT_SCHEME,
    name: str = DEFAULT_QUERY_PARAMETER,
) -> TokenRetriever:
    """Try the Authorization header first, then the query string."""
    header = from_authorization_header(scheme)
    query = from_query_string(name)

    def retrieve(request: Request) -> str | None:
        token = header(request)
        if token:
            return token
        return query(request)

    return retrieve
