"""Observability helpers for the introspection layer.

Structured logging via structlog, with JSON output for production and
colored console output for development.

Example:
    >>> from oauth2_introspection.observability import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("oauth2_introspection.cache.miss")
"""

from oauth2_introspection.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_debug_mode,
    sanitize_for_logging,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "sanitize_for_logging",
]
