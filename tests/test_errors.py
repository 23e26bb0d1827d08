"""Tests for introspection layer error handling."""

from oauth2_introspection.errors import (
    CacheCorruptionError,
    ConfigurationError,
    DiscoveryError,
    IntrospectionLayerError,
)


class TestIntrospectionLayerError:
    """Test IntrospectionLayerError base class."""

    def test_basic_error_creation(self) -> None:
        """Test creating a basic error."""
        error = IntrospectionLayerError(code="oauth2_introspection:test/error", message="Boom")

        assert error.code == "oauth2_introspection:test/error"
        assert error.message == "Boom"
        assert error.details == {}
        assert str(error) == "Boom"

    def test_to_dict(self) -> None:
        """Test serialization to a plain dict."""
        error = IntrospectionLayerError("code", "msg", {"key": "value"})

        assert error.to_dict() == {"code": "code", "message": "msg", "details": {"key": "value"}}


class TestConfigurationError:
    """Test ConfigurationError class."""

    def test_carries_option_name(self) -> None:
        """Test that the offending option is exposed and included in details."""
        error = ConfigurationError("client_id", "client_id must be set", details={"hint": "x"})

        assert isinstance(error, IntrospectionLayerError)
        assert error.option == "client_id"
        assert error.code == "oauth2_introspection:config/invalid_option"
        assert error.details == {"option": "client_id", "hint": "x"}


class TestDiscoveryError:
    """Test DiscoveryError class."""

    def test_message_names_authority(self) -> None:
        """Test that the message names the authority and the reason."""
        error = DiscoveryError("https://auth.example.com", "discovery endpoint returned 500")

        assert error.message == (
            "Endpoint discovery failed for https://auth.example.com: "
            "discovery endpoint returned 500"
        )
        assert error.authority == "https://auth.example.com"
        assert error.details["reason"] == "discovery endpoint returned 500"


class TestCacheCorruptionError:
    """Test CacheCorruptionError class."""

    def test_message(self) -> None:
        """Test the message and code of a corruption error."""
        error = CacheCorruptionError("invalid claim list", details={"errors": 2})

        assert error.code == "oauth2_introspection:cache/corrupt_entry"
        assert error.message == "Cached claims could not be deserialized: invalid claim list"
        assert error.reason == "invalid claim list"
        assert error.details == {"errors": 2}
