"""Structured logging configuration for the introspection layer.

Configures structlog with a console renderer for development and a JSON
renderer for production. Values under sensitive keys (raw tokens, client
secrets, Authorization headers) are redacted from every event unless debug
mode is enabled.

Environment Variables:
    OAUTH2_INTROSPECTION_LOG_FORMAT: "json" or "console"
    OAUTH2_INTROSPECTION_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
    OAUTH2_INTROSPECTION_SERVICE_NAME: Service name bound to every event
    OAUTH2_INTROSPECTION_DEBUG: "true" or "1" disables redaction

Example:
    >>> from oauth2_introspection.observability.logging import configure_logging, get_logger
    >>> configure_logging(log_format="json", log_level="INFO")
    >>> logger = get_logger("oauth2_introspection.handler")
    >>> logger.info("oauth2_introspection.cache.hit", scheme="Bearer")
"""

import logging
import os
import sys
from typing import Any, MutableMapping

import structlog
from structlog.typing import Processor

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "oauth2-introspection"

ENV_LOG_FORMAT = "OAUTH2_INTROSPECTION_LOG_FORMAT"
ENV_LOG_LEVEL = "OAUTH2_INTROSPECTION_LOG_LEVEL"
ENV_SERVICE_NAME = "OAUTH2_INTROSPECTION_SERVICE_NAME"
ENV_DEBUG = "OAUTH2_INTROSPECTION_DEBUG"

REDACTED_PLACEHOLDER = "***REDACTED***"

# Substrings (case-insensitive) that mark a key as sensitive
_SENSITIVE_KEY_PATTERNS = frozenset({"password", "secret", "authorization"})

# Exact key names, or suffixes after "_", that hold bearer credentials
_SENSITIVE_TOKEN_KEYS = frozenset({"token", "access_token", "refresh_token", "id_token"})

_logging_configured = False


def _is_sensitive_key(key: str) -> bool:
    """Return True if the key name indicates data that must not reach the logs."""
    lower = key.lower()
    if lower in _SENSITIVE_TOKEN_KEYS or lower.endswith("_token"):
        return True
    return any(pattern in lower for pattern in _SENSITIVE_KEY_PATTERNS)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive values replaced.

    Nested dicts and lists of dicts are sanitized recursively.

    Example:
        >>> sanitize_for_logging({"client_id": "api", "client_secret": "s3cr3t"})
        {'client_id': 'api', 'client_secret': '***REDACTED***'}
    """
    if not data:
        return {}
    result: dict[str, Any] = {}
    for k, v in data.items():
        if _is_sensitive_key(k):
            result[k] = REDACTED_PLACEHOLDER
        elif isinstance(v, dict):
            result[k] = sanitize_for_logging(v)
        elif isinstance(v, list):
            result[k] = [
                sanitize_for_logging(item) if isinstance(item, dict) else item for item in v
            ]
        else:
            result[k] = v
    return result


def is_debug_mode() -> bool:
    """Return True if OAUTH2_INTROSPECTION_DEBUG is set to a truthy value."""
    value = os.environ.get(ENV_DEBUG, "").strip().lower()
    return value in ("true", "1", "yes", "on")


def _redact_sensitive(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor applying ``sanitize_for_logging`` outside debug mode."""
    if is_debug_mode():
        return event_dict
    return sanitize_for_logging(dict(event_dict))


def _get_log_level() -> str:
    return os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()


def _get_log_format() -> str:
    return os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT).lower()


def _get_service_name() -> str:
    return os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)


def _get_shared_processors() -> list[Processor]:
    """Get shared processors for all log formats."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_sensitive,
    ]


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_format: "json" or "console". Defaults to env var or "console"
        log_level: Minimum log level. Defaults to env var or "INFO"
        service_name: Service name for log context. Defaults to env var or
            "oauth2-introspection"
        force: If True, reconfigure even if already configured
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    log_format = log_format or _get_log_format()
    log_level = log_level or _get_log_level()
    service_name = service_name or _get_service_name()

    shared_processors = _get_shared_processors()

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level))

    structlog.contextvars.bind_contextvars(service=service_name)

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring logging with defaults on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("oauth2_introspection.flight.started", flights=1)
    """
    if not _logging_configured:
        configure_logging()

    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent logs of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
