"""Redis-backed DistributedStore.

Entries are written with ``SET key value PXAT <ms>`` so Redis itself drops
them at the absolute expiration; nothing is stored beyond the raw bytes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import redis.asyncio as redis

from oauth2_introspection.observability import get_logger

logger = get_logger(__name__)

DEFAULT_SOCKET_TIMEOUT = 5.0


class RedisDistributedStore:
    """DistributedStore over a ``redis.asyncio`` client.

    Example:
        >>> store = RedisDistributedStore.from_url("redis://localhost:6379/0")
        >>> await store.get("introspection:abc")
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(
        cls, url: str, *, socket_timeout: float = DEFAULT_SOCKET_TIMEOUT
    ) -> RedisDistributedStore:
        """Create a store from a redis:// URL; responses stay as bytes."""
        client = redis.from_url(
            url,
            decode_responses=False,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[bytes]:
        value = await self._client.get(key)
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    async def set(self, key: str, value: bytes, absolute_expiration: datetime) -> None:
        expire_at_ms = int(absolute_expiration.timestamp() * 1000)
        await self._client.set(key, value, pxat=expire_at_ms)

    async def remove(self, key: str) -> None:
        await self._client.delete(key)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
        logger.info("oauth2_introspection.redis.closed")
