"""Tests for RedisDistributedStore and the store factory."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from oauth2_introspection.cache import (
    InMemoryDistributedStore,
    RedisDistributedStore,
    create_distributed_store,
)
from oauth2_introspection.cache.store import DistributedStore


def _client() -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    return client


async def test_set_uses_pxat_in_milliseconds() -> None:
    """Verify writes pass the absolute expiration as PXAT milliseconds."""
    client = _client()
    store = RedisDistributedStore(client)
    expires = datetime(2030, 1, 1, 0, 0, 30, tzinfo=timezone.utc)

    await store.set("introspection:abc", b"[]", expires)

    client.set.assert_awaited_once_with(
        "introspection:abc", b"[]", pxat=int(expires.timestamp() * 1000)
    )


async def test_get_returns_bytes() -> None:
    """Verify get passes bytes through and encodes str responses."""
    client = _client()
    store = RedisDistributedStore(client)

    client.get.return_value = b"payload"
    assert await store.get("k") == b"payload"

    client.get.return_value = "text"
    assert await store.get("k") == b"text"


async def test_get_missing_returns_none() -> None:
    """Verify a Redis nil reads as None."""
    store = RedisDistributedStore(_client())
    assert await store.get("missing") is None


async def test_remove_deletes_key() -> None:
    """Verify remove issues DEL."""
    client = _client()
    await RedisDistributedStore(client).remove("k")

    client.delete.assert_awaited_once_with("k")


async def test_aclose_closes_client() -> None:
    """Verify aclose closes the connection pool."""
    client = _client()
    await RedisDistributedStore(client).aclose()

    client.aclose.assert_awaited_once()


def test_redis_store_satisfies_protocol() -> None:
    """Verify RedisDistributedStore is a DistributedStore."""
    assert isinstance(RedisDistributedStore(_client()), DistributedStore)


def test_factory_defaults_to_memory() -> None:
    """Verify the in-memory backend is the default."""
    assert isinstance(create_distributed_store(), InMemoryDistributedStore)


def test_factory_builds_redis_store(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify OAUTH2_INTROSPECTION_CACHE_BACKEND=redis builds a Redis store from the URL."""
    monkeypatch.setenv("OAUTH2_INTROSPECTION_CACHE_BACKEND", "redis")
    monkeypatch.setenv("OAUTH2_INTROSPECTION_REDIS_URL", "redis://cache:6379/2")

    with patch("oauth2_introspection.cache.redis_store.redis.from_url") as from_url:
        store = create_distributed_store()

    assert isinstance(store, RedisDistributedStore)
    assert from_url.call_args.args[0] == "redis://cache:6379/2"
    assert from_url.call_args.kwargs["decode_responses"] is False


def test_factory_rejects_unknown_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify unknown backends raise ValueError."""
    monkeypatch.setenv("OAUTH2_INTROSPECTION_CACHE_BACKEND", "memcached")

    with pytest.raises(ValueError, match="memcached"):
        create_distributed_store()
