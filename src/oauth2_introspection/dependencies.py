"""FastAPI dependencies reading the principal set by IntrospectionMiddleware."""

from __future__ import annotations

from typing import Callable

from fastapi import HTTPException, Request

from oauth2_introspection.identity import Principal
from oauth2_introspection.models.claims import SCOPE_CLAIM
from oauth2_introspection.models.results import BEARER_CHALLENGE

HTTP_FORBIDDEN = 403
HTTP_UNAUTHORIZED = 401
ERROR_AUTH_REQUIRED = "Authentication required"
ERROR_INSUFFICIENT_SCOPE = "Insufficient scope"
ERROR_MISSING_ROLE = "Missing required role"


def _principal_or_401(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None or not isinstance(principal, Principal):
        raise HTTPException(
            status_code=HTTP_UNAUTHORIZED,
            detail=ERROR_AUTH_REQUIRED,
            headers={"WWW-Authenticate": BEARER_CHALLENGE},
        )
    return principal


def current_principal(request: Request) -> Principal:
    """Dependency returning the authenticated principal, or raising 401."""
    return _principal_or_401(request)


def require_scope(scope: str) -> Callable[[Request], Principal]:
    """Dependency factory: require ``scope`` among the token's scope claims.

    Example:
        >>> @app.get("/orders", dependencies=[Depends(require_scope("orders:read"))])
        ... async def list_orders() -> list[dict]: ...
    """

    def _dependency(request: Request) -> Principal:
        principal = _principal_or_401(request)
        if not principal.has_claim(SCOPE_CLAIM, scope):
            raise HTTPException(status_code=HTTP_FORBIDDEN, detail=ERROR_INSUFFICIENT_SCOPE)
        return principal

    return _dependency


def require_role(role: str) -> Callable[[Request], Principal]:
    """Dependency factory: require ``role`` among the principal's roles."""

    def _dependency(request: Request) -> Principal:
        principal = _principal_or_401(request)
        if not principal.is_in_role(role):
            raise HTTPException(status_code=HTTP_FORBIDDEN, detail=ERROR_MISSING_ROLE)
        return principal

    return _dependency
