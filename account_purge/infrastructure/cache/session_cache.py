"""Per-session cache handle (implements ISessionCache).

Passed explicitly into the identity revoker rather than reached through a
global, so teardown can be exercised without a real Redis.
"""

from __future__ import annotations

import logging

from account_purge.infrastructure.cache.cache_protocol import CacheProtocol
from account_purge.infrastructure.cache.keys import session_pattern

logger = logging.getLogger(__name__)


class RedisSessionCache:
    """Session state of one identity stored under ``<prefix>:<uid>:*``."""

    def __init__(self, cache: CacheProtocol | None, uid: str, prefix: str = "session") -> None:
        self._cache = cache
        self._uid = uid
        self._prefix = prefix

    async def clear_all(self) -> None:
        """Drop every cached key of the identity. No-op without a cache."""
        if self._cache is None or not self._cache.is_available():
            logger.debug("Session cache unavailable; nothing to clear for %s", self._uid)
            return
        deleted = await self._cache.delete_pattern(session_pattern(self._prefix, self._uid))
        logger.info("Cleared %s session key(s) for %s", deleted, self._uid)
