from __future__ import annotations

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.store import SharedStore


class UnreachableRedis:
    """Client double whose every command fails as if Redis were down."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RedisConnectionError(f"Error 111 connecting to localhost:6379 ({name})")

        return _fail


@pytest.fixture()
def redis_client() -> fakeredis.FakeStrictRedis:
    client = fakeredis.FakeStrictRedis()
    client.flushall()
    return client


@pytest.fixture()
def store(redis_client) -> SharedStore:
    return SharedStore(redis_client)


@pytest.fixture()
def unreachable_store() -> SharedStore:
    return SharedStore(UnreachableRedis())
