"""Cache key derivation.

Raw tokens are never used as cache keys. A key is the configured prefix
followed by the standard base64 encoding of the SHA-256 digest of the
token's UTF-8 bytes (always 44 characters, padding kept).
"""

from __future__ import annotations

import base64
import hashlib
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from oauth2_introspection.options import IntrospectionOptions

CacheKeyGenerator = Callable[["IntrospectionOptions", "str | None"], str]


def derive_cache_key(prefix: str, token: str | None) -> str:
    """Return ``prefix`` + base64(sha256(token)).

    A missing, empty or whitespace-only token yields ``prefix`` unchanged.

    Example:
        >>> derive_cache_key("key:", "abcdefg01234")
        'key:9/+6X7C6m2lsSY7l+QUPZ8WP88j03/JP3iTSUUFqJBY='
        >>> derive_cache_key("key:", "   ")
        'key:'
    """
    if token is None or not token.strip():
        return prefix
    digest = hashlib.sha256(token.encode("utf-8")).digest()
    return prefix + base64.b64encode(digest).decode("ascii")


def cache_key_from_token() -> CacheKeyGenerator:
    """Return the default generator, keyed by ``options.cache_key_prefix``."""

    def generate(options: IntrospectionOptions, token: str | None) -> str:
        return derive_cache_key(options.cache_key_prefix, token)

    return generate
