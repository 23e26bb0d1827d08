"""Tests for structured logging configuration.

This module tests the logging module that provides structured logging
and credential redaction for the introspection layer.
"""

import logging
from unittest.mock import patch

import structlog

from oauth2_introspection.observability.logging import (
    REDACTED_PLACEHOLDER,
    _redact_sensitive,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_debug_mode,
    sanitize_for_logging,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_sets_up_structlog(self) -> None:
        """Test that configure_logging sets up structlog correctly."""
        configure_logging(log_format="console", log_level="DEBUG", force=True)

        logger = get_logger("test")
        assert logger is not None

    def test_configure_logging_respects_log_level(self) -> None:
        """Test that configure_logging sets the correct log level."""
        configure_logging(log_format="console", log_level="WARNING", force=True)

        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_with_json_format(self) -> None:
        """Test that configure_logging works with JSON format."""
        configure_logging(log_format="json", log_level="INFO", force=True)

        logger = get_logger("test.json")
        logger.info("oauth2_introspection.test", client_secret="hidden")

    def test_configure_logging_binds_service_name(self) -> None:
        """Test that the service name is bound to every event."""
        configure_logging(service_name="orders-api", force=True)

        assert structlog.contextvars.get_contextvars().get("service") == "orders-api"
        clear_context()

    def test_configure_logging_from_environment_variables(self) -> None:
        """Test that configure_logging reads from environment variables."""
        with patch.dict(
            "os.environ",
            {
                "OAUTH2_INTROSPECTION_LOG_FORMAT": "json",
                "OAUTH2_INTROSPECTION_LOG_LEVEL": "ERROR",
                "OAUTH2_INTROSPECTION_SERVICE_NAME": "env-service",
            },
        ):
            configure_logging(force=True)

            assert logging.getLogger().level == logging.ERROR
        clear_context()


class TestContextBinding:
    """Tests for context binding functions."""

    def test_bind_and_clear_context(self) -> None:
        """Test that bound context is visible until cleared."""
        configure_logging(force=True)

        bind_context(request_id="req_abc", path="/api/me")
        ctx = structlog.contextvars.get_contextvars()
        assert ctx.get("request_id") == "req_abc"
        assert ctx.get("path") == "/api/me"

        clear_context()
        assert "request_id" not in structlog.contextvars.get_contextvars()


class TestSanitizeForLogging:
    """Tests for sanitize_for_logging (sensitive data redaction)."""

    def test_tokens_redacted(self) -> None:
        """Test that token-like keys are redacted."""
        data = {
            "token": "opaque",
            "access_token": "a",
            "refresh_token": "r",
            "authorization": "Bearer xyz",
        }
        result = sanitize_for_logging(data)
        assert set(result.values()) == {REDACTED_PLACEHOLDER}

    def test_client_secret_redacted(self) -> None:
        """Test that client secrets are redacted but client ids kept."""
        result = sanitize_for_logging({"client_id": "api1", "client_secret": "s3cr3t"})
        assert result == {"client_id": "api1", "client_secret": REDACTED_PLACEHOLDER}

    def test_nested_objects_sanitized(self) -> None:
        """Test that nested dicts and lists of dicts are recursively sanitized."""
        data = {"nested": {"token": "t", "id": 1}, "items": [{"password": "p"}, "plain"]}
        result = sanitize_for_logging(data)
        assert result["nested"] == {"token": REDACTED_PLACEHOLDER, "id": 1}
        assert result["items"] == [{"password": REDACTED_PLACEHOLDER}, "plain"]

    def test_non_sensitive_preserved(self) -> None:
        """Test that cache keys, endpoints and errors are preserved."""
        data = {
            "cache_key": "introspection:abc=",
            "endpoint": "https://auth.example.com/connect/introspect",
            "error": "invalid_client",
            "token_type_hint": "access_token",
        }
        assert sanitize_for_logging(data) == data

    def test_sensitive_key_case_insensitive(self) -> None:
        """Test that sensitive key matching is case-insensitive."""
        result = sanitize_for_logging({"Token": "t1", "Authorization": "Bearer x"})
        assert result == {"Token": REDACTED_PLACEHOLDER, "Authorization": REDACTED_PLACEHOLDER}

    def test_empty_dict_returns_empty(self) -> None:
        """Test that empty dict returns empty dict."""
        assert sanitize_for_logging({}) == {}


class TestRedactionProcessor:
    """Tests for the structlog redaction processor."""

    def test_processor_redacts_event_dict(self) -> None:
        """Test that the processor replaces sensitive values in events."""
        with patch.dict("os.environ", {"OAUTH2_INTROSPECTION_DEBUG": ""}):
            event = _redact_sensitive(
                None, "info", {"event": "oauth2_introspection.test", "access_token": "abc"}
            )

        assert event == {"event": "oauth2_introspection.test", "access_token": REDACTED_PLACEHOLDER}

    def test_processor_passes_through_in_debug_mode(self) -> None:
        """Test that debug mode disables redaction."""
        with patch.dict("os.environ", {"OAUTH2_INTROSPECTION_DEBUG": "true"}):
            event = _redact_sensitive(None, "info", {"event": "e", "token": "abc"})

        assert event["token"] == "abc"


class TestIsDebugMode:
    """Tests for OAUTH2_INTROSPECTION_DEBUG (is_debug_mode)."""

    def test_debug_mode_false_when_unset(self) -> None:
        """Test that is_debug_mode is False when the variable is empty."""
        with patch.dict("os.environ", {"OAUTH2_INTROSPECTION_DEBUG": ""}):
            assert is_debug_mode() is False

    def test_debug_mode_true_values(self) -> None:
        """Test that true, 1, yes and on enable debug mode."""
        for value in ("true", "1", "yes", "on"):
            with patch.dict("os.environ", {"OAUTH2_INTROSPECTION_DEBUG": value}):
                assert is_debug_mode() is True

    def test_debug_mode_false_when_false(self) -> None:
        """Test that is_debug_mode is False when set to false."""
        with patch.dict("os.environ", {"OAUTH2_INTROSPECTION_DEBUG": "false"}):
            assert is_debug_mode() is False


class TestLoggingIntegration:
    """Module loggers can be created after configuration."""

    def test_module_loggers_exist(self) -> None:
        """Test that handler, cache and coordinator loggers are available."""
        configure_logging(force=True)
        from oauth2_introspection.cache.claims import logger as cache_logger
        from oauth2_introspection.coordination.single_flight import logger as flight_logger
        from oauth2_introspection.handler import logger as handler_logger

        assert cache_logger is not None
        assert flight_logger is not None
        assert handler_logger is not None
