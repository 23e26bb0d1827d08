"""OAuth2 token introspection with claims caching and request coalescing.

Validates bearer tokens against an RFC 7662 introspection endpoint:
- Claims of active tokens are cached in a distributed store, keyed by a
  SHA-256 hash of the token, until min(token expiry, now + cache duration)
- Concurrent requests presenting the same token share one introspection call
- Starlette middleware and FastAPI dependencies for protecting routes

Public exports:
    IntrospectionHandler: Per-request orchestrator (authenticate)
    IntrospectionOptions: Scheme configuration
    IntrospectionMiddleware: Starlette middleware around the handler
    IntrospectionClient: RFC 7662 client with endpoint discovery
    ClaimsCache: Claims cache over a DistributedStore
    InMemoryDistributedStore, RedisDistributedStore: Cache backends
    SingleFlight: Request coalescing table
    derive_cache_key: Token to cache key derivation
    AuthenticateResult, Principal, ClaimSet, IntrospectionOutcome: Values
"""

__version__ = "0.1.0"

from oauth2_introspection.cache import (
    ClaimsCache,
    DistributedStore,
    InMemoryDistributedStore,
    RedisDistributedStore,
    create_distributed_store,
    derive_cache_key,
)
from oauth2_introspection.coordination import SingleFlight
from oauth2_introspection.errors import (
    CacheCorruptionError,
    ConfigurationError,
    DiscoveryError,
    IntrospectionLayerError,
)
from oauth2_introspection.handler import IntrospectionHandler
from oauth2_introspection.identity import Principal, build_principal
from oauth2_introspection.introspection import EndpointDiscovery, IntrospectionClient
from oauth2_introspection.middleware import IntrospectionMiddleware
from oauth2_introspection.models import (
    AuthenticateResult,
    Claim,
    ClaimSet,
    IntrospectionOutcome,
    OutcomeKind,
    ResultKind,
)
from oauth2_introspection.options import IntrospectionOptions

__all__ = [
    "AuthenticateResult",
    "CacheCorruptionError",
    "Claim",
    "ClaimSet",
    "ClaimsCache",
    "ConfigurationError",
    "DiscoveryError",
    "DistributedStore",
    "EndpointDiscovery",
    "InMemoryDistributedStore",
    "IntrospectionClient",
    "IntrospectionHandler",
    "IntrospectionLayerError",
    "IntrospectionMiddleware",
    "IntrospectionOptions",
    "IntrospectionOutcome",
    "OutcomeKind",
    "Principal",
    "RedisDistributedStore",
    "ResultKind",
    "SingleFlight",
    "__version__",
    "build_principal",
    "create_distributed_store",
    "derive_cache_key",
]
