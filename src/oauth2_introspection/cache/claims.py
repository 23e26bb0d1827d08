"""Claims cache: validated claim sets stored under derived keys.

Entries expire at ``min(exp, now + duration)``; claim sets without an
``exp`` claim, or already expired, are never written. Reads treat an entry
that fails to deserialize as a miss and drop it from the store.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

from oauth2_introspection.cache.store import Clock, DistributedStore, utc_now
from oauth2_introspection.errors import CacheCorruptionError
from oauth2_introspection.models.claims import ClaimSet, deserialize_claims, serialize_claims
from oauth2_introspection.observability import get_logger

if TYPE_CHECKING:
    from oauth2_introspection.options import IntrospectionOptions

logger = get_logger(__name__)


class ClaimsCache:
    """Read/write access to cached claim sets for tokens.

    Example:
        >>> cache = ClaimsCache(InMemoryDistributedStore(), options)
        >>> await cache.set_claims(token, claims, timedelta(minutes=5))
        >>> await cache.get_claims(token)
    """

    def __init__(
        self,
        store: DistributedStore,
        options: IntrospectionOptions,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._options = options
        self._clock = clock

    @property
    def store(self) -> DistributedStore:
        return self._store

    def key_for(self, token: str) -> str:
        return self._options.cache_key_generator(self._options, token)

    async def get_claims(self, token: str) -> Optional[ClaimSet]:
        """Return the cached ClaimSet for ``token``, or None on a miss.

        Store read failures and corrupt entries both degrade to a miss.
        """
        key = self.key_for(token)
        try:
            data = await self._store.get(key)
        except Exception as exc:
            logger.warning("oauth2_introspection.cache.read_failed", error=str(exc))
            return None
        if data is None:
            return None
        try:
            return deserialize_claims(data)
        except CacheCorruptionError as exc:
            logger.error(
                "oauth2_introspection.cache.corrupt_entry",
                cache_key=key,
                error=exc.message,
            )
            try:
                await self._store.remove(key)
            except Exception as remove_exc:
                logger.warning("oauth2_introspection.cache.remove_failed", error=str(remove_exc))
            return None

    async def set_claims(self, token: str, claims: ClaimSet, duration: timedelta) -> None:
        """Cache ``claims`` for ``token`` for at most ``duration``.

        Does nothing when the claims carry no usable ``exp`` claim or the
        token is already expired. Store errors propagate; callers decide
        whether a failed write matters.
        """
        expiration_ts = claims.expiration
        if expiration_ts is None:
            logger.info("oauth2_introspection.cache.no_exp_claim")
            return

        now = self._clock()
        try:
            expiration = datetime.fromtimestamp(expiration_ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            # Outside the platform's timestamp range
            bound = datetime.max if expiration_ts > 0 else datetime.min
            expiration = bound.replace(tzinfo=timezone.utc)
        logger.debug("oauth2_introspection.cache.token_expires", expires_at=expiration.isoformat())

        if expiration <= now:
            return

        absolute_lifetime = min(expiration, now + duration)
        logger.debug(
            "oauth2_introspection.cache.setting",
            expires_at=absolute_lifetime.isoformat(),
        )
        await self._store.set(self.key_for(token), serialize_claims(claims), absolute_lifetime)
