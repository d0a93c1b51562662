"""Tests for session cache keys, CacheService.delete_pattern and RedisSessionCache."""

from fnmatch import fnmatchcase

import pytest

from account_purge.core.config import Settings
from account_purge.infrastructure.cache import (
    CacheService,
    RedisSessionCache,
    session_pattern,
)


class _FakePipeline:
    def __init__(self, redis: "_FakeRedis") -> None:
        self._redis = redis
        self._keys: list[str] = []

    async def __aenter__(self) -> "_FakePipeline":
        return self

    async def __aexit__(self, *exc) -> None:
        return None

    def unlink(self, *keys: str) -> None:
        self._keys.extend(keys)

    async def execute(self) -> list[int]:
        removed = sum(1 for k in self._keys if self._redis.data.pop(k, None) is not None)
        return [removed]


class _FakeRedis:
    """Just enough of redis.asyncio.Redis for SCAN + pipelined UNLINK."""

    def __init__(self, keys: list[str]) -> None:
        self.data = {k: "v" for k in keys}

    async def scan_iter(self, match: str):
        for key in list(self.data):
            if fnmatchcase(key, match):
                yield key

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        return _FakePipeline(self)


def test_session_pattern_format() -> None:
    assert session_pattern("session", "U1") == "session:U1:*"


@pytest.mark.parametrize("uid", ["", "U1:x", "U*", "U?", "U[1]"])
def test_session_pattern_rejects_widening_uid(uid: str) -> None:
    with pytest.raises(ValueError):
        session_pattern("session", uid)


async def test_delete_pattern_only_removes_matching_keys() -> None:
    fake = _FakeRedis(["session:U1:a", "session:U1:b", "session:U10:a", "session:U2:a"])
    cache = CacheService(redis_client=fake, settings=Settings())

    deleted = await cache.delete_pattern(session_pattern("session", "U1"))

    assert deleted == 2
    assert sorted(fake.data) == ["session:U10:a", "session:U2:a"]


async def test_session_cache_clears_identity_keys() -> None:
    fake = _FakeRedis(["session:U1:a", "session:U2:a"])
    cache = CacheService(redis_client=fake, settings=Settings())

    await RedisSessionCache(cache, "U1").clear_all()

    assert list(fake.data) == ["session:U2:a"]


async def test_session_cache_without_redis_is_noop() -> None:
    await RedisSessionCache(None, "U1").clear_all()
    await RedisSessionCache(CacheService(settings=Settings()), "U1").clear_all()
