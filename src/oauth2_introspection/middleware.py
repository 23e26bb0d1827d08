"""Starlette middleware protecting routes with introspection authentication.

Requests under ``path_prefix`` are authenticated with an
``IntrospectionHandler``. Failures return 401 with the handler's
WWW-Authenticate challenge; successes expose the principal as
``request.state.principal``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from oauth2_introspection.handler import IntrospectionHandler
from oauth2_introspection.models.results import BEARER_CHALLENGE
from oauth2_introspection.observability import get_logger

logger = get_logger(__name__)

HTTP_UNAUTHORIZED = 401
ERROR_AUTH_REQUIRED = "Authentication required"


class IntrospectionMiddleware(BaseHTTPMiddleware):
    """Authenticates bearer tokens via introspection before calling the app.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(
        ...     IntrospectionMiddleware,
        ...     handler=IntrospectionHandler.create(options),
        ...     path_prefix="/api",
        ... )
    """

    def __init__(
        self,
        app: Any,
        handler: IntrospectionHandler,
        *,
        path_prefix: str | None = None,
        require_authentication: bool = True,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: ASGI application.
            handler: Shared introspection handler.
            path_prefix: If set, only requests under this path are authenticated.
            require_authentication: Reject requests that carry no token with 401;
                when False they pass through unauthenticated.
        """
        super().__init__(app)
        self._handler = handler
        self._path_prefix = path_prefix
        self._require_authentication = require_authentication

    def _should_authenticate(self, path: str) -> bool:
        if self._path_prefix is None:
            return True
        return path.startswith(self._path_prefix)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Authenticate and return 401, or pass the request on."""
        if not self._should_authenticate(request.url.path):
            return await call_next(request)

        result = await self._handler.authenticate(request)

        if result.skipped:
            if self._require_authentication:
                logger.warning("oauth2_introspection.missing_token", path=request.url.path)
                return JSONResponse(
                    status_code=HTTP_UNAUTHORIZED,
                    content={"detail": ERROR_AUTH_REQUIRED},
                    headers={"WWW-Authenticate": BEARER_CHALLENGE},
                )
            return await call_next(request)

        if result.failed:
            logger.warning(
                "oauth2_introspection.authentication_failed",
                path=request.url.path,
                reason=result.failure,
            )
            return JSONResponse(
                status_code=HTTP_UNAUTHORIZED,
                content={"detail": result.failure},
                headers={"WWW-Authenticate": result.challenge or BEARER_CHALLENGE},
            )

        request.state.principal = result.principal
        request.state.auth_properties = result.properties
        return await call_next(request)
