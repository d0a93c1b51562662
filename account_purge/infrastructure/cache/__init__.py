"""Cache: Redis service, session cache handle and key utilities."""

from account_purge.infrastructure.cache.cache_protocol import CacheProtocol
from account_purge.infrastructure.cache.keys import session_pattern
from account_purge.infrastructure.cache.redis_cache import CacheService
from account_purge.infrastructure.cache.session_cache import RedisSessionCache

__all__ = [
    "CacheProtocol",
    "CacheService",
    "RedisSessionCache",
    "session_pattern",
]
