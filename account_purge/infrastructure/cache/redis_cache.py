"""Redis connection holding per-session state.

Only what session teardown needs: connect/disconnect, an availability flag
and pattern deletion via SCAN + pipelined UNLINK (never KEYS/DEL, which
block Redis). A dropped connection is retried once per call.
"""

from __future__ import annotations

import logging

import redis.asyncio as redis

from account_purge.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Keys per UNLINK round trip.
_UNLINK_CHUNK = 500


class CacheService:
    """Async Redis cache service.

    Call connect() at startup and disconnect() at shutdown. When Redis is
    unreachable the service reports itself unavailable and delete_pattern
    returns 0 instead of raising.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional already-connected client (tests, DI).
            settings: Optional settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    def _create_client(self) -> redis.Redis:
        password = self.settings.redis_password
        return redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=password.get_secret_value() if password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )

    async def connect(self) -> None:
        """Open and ping a connection unless one is already held."""
        if self.redis is not None:
            return
        client = self._create_client()
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Session cache disabled.", e)
            await client.aclose()
            self._connected = False
            return
        self.redis = client
        self._connected = True
        logger.info(
            "Redis cache connected: %s:%s", self.settings.redis_host, self.settings.redis_port
        )

    async def disconnect(self) -> None:
        """Close the connection. Call on app shutdown."""
        if self.redis is None:
            return
        await self.redis.aclose()
        self.redis = None
        self._connected = False
        logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current connection and open a new one. Returns True on success."""
        if self.redis is None:
            return False
        try:
            await self.redis.aclose()
        except redis.RedisError as e:
            logger.debug("Ignoring error while closing stale Redis connection: %s", e)
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def delete_pattern(self, pattern: str, _retry: bool = True) -> int:
        """Delete every key matching a SCAN pattern (e.g. ``session:<uid>:*``).

        Returns:
            Number of keys deleted; 0 when Redis is unavailable.
        """
        if not self.is_available():
            return 0
        try:
            deleted = await self._scan_and_unlink(pattern)
        except (redis.ConnectionError, redis.TimeoutError):
            if _retry and await self._reconnect():
                return await self.delete_pattern(pattern, _retry=False)
            logger.warning("Cache delete_pattern unavailable for %s (Redis disconnected)", pattern)
            return 0
        except redis.RedisError:
            logger.exception("Cache delete_pattern error for %s", pattern)
            return 0
        if deleted:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    async def _scan_and_unlink(self, pattern: str) -> int:
        deleted = 0
        chunk: list[str] = []
        async for key in self.redis.scan_iter(match=pattern):
            chunk.append(key)
            if len(chunk) >= _UNLINK_CHUNK:
                deleted += await self._unlink(chunk)
                chunk = []
        if chunk:
            deleted += await self._unlink(chunk)
        return deleted

    async def _unlink(self, keys: list[str]) -> int:
        async with self.redis.pipeline(transaction=False) as pipe:
            pipe.unlink(*keys)
            results = await pipe.execute()
        return sum(int(r or 0) for r in results)
