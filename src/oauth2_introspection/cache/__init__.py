"""Claims caching on top of a distributed key-value store.

Factory:
- create_distributed_store() builds a DistributedStore from
  OAUTH2_INTROSPECTION_CACHE_BACKEND and OAUTH2_INTROSPECTION_REDIS_URL
  (default: memory, redis://localhost:6379/0).
"""

import os

from oauth2_introspection.cache.claims import ClaimsCache
from oauth2_introspection.cache.keys import cache_key_from_token, derive_cache_key
from oauth2_introspection.cache.redis_store import RedisDistributedStore
from oauth2_introspection.cache.store import DistributedStore, InMemoryDistributedStore

CACHE_BACKEND_ENV = "OAUTH2_INTROSPECTION_CACHE_BACKEND"
REDIS_URL_ENV = "OAUTH2_INTROSPECTION_REDIS_URL"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def create_distributed_store() -> DistributedStore:
    """Create a DistributedStore from environment.

    Returns:
        Configured DistributedStore instance.

    Raises:
        ValueError: If the backend is not "memory" or "redis".
    """
    backend = os.environ.get(CACHE_BACKEND_ENV, "memory").strip().lower()
    if backend == "memory":
        return InMemoryDistributedStore()
    if backend == "redis":
        url = os.environ.get(REDIS_URL_ENV, DEFAULT_REDIS_URL).strip()
        return RedisDistributedStore.from_url(url)
    raise ValueError(f"Unknown {CACHE_BACKEND_ENV}={backend!r}. Use 'memory' or 'redis'.")


__all__ = [
    "ClaimsCache",
    "DistributedStore",
    "InMemoryDistributedStore",
    "RedisDistributedStore",
    "cache_key_from_token",
    "create_distributed_store",
    "derive_cache_key",
]
