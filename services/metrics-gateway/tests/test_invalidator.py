"""Tests for prefix-based cache invalidation."""

from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.caching.invalidator import CacheInvalidator
from app.store import SharedStore


class DeleteFailsAfterFirstBatch:
    """Client wrapper whose connection drops after one successful DEL."""

    def __init__(self, client) -> None:
        self._client = client
        self.delete_calls = 0

    def __getattr__(self, name):
        return getattr(self._client, name)

    def delete(self, *keys):
        self.delete_calls += 1
        if self.delete_calls > 1:
            raise RedisConnectionError("Connection reset by peer")
        return self._client.delete(*keys)


def test_invalidates_only_matching_prefix(store, redis_client):
    for key in ("metrics:daily:default", "metrics:hourly:default", "metrics:summary:a=1"):
        redis_client.set(key, b"{}")
    redis_client.set("other:key", b"{}")
    redis_client.set("rate-limit:ip:1.1.1.1", 3)

    removed = CacheInvalidator(store).invalidate("metrics:")

    assert removed == 3
    assert redis_client.exists("other:key") == 1
    assert redis_client.exists("rate-limit:ip:1.1.1.1") == 1
    assert redis_client.keys("metrics:*") == []


def test_returns_zero_when_nothing_matches(store, redis_client):
    redis_client.set("other:key", b"{}")
    assert CacheInvalidator(store).invalidate("metrics:") == 0
    assert redis_client.exists("other:key") == 1


def test_prefix_glob_characters_are_literal(store, redis_client):
    redis_client.set("metrics:daily:default", b"{}")
    redis_client.set("m*:x", b"{}")

    assert CacheInvalidator(store).invalidate("m*") == 1
    assert redis_client.exists("metrics:daily:default") == 1


def test_deletes_across_several_scan_batches(redis_client):
    for idx in range(25):
        redis_client.set(f"metrics:daily:page={idx}", b"{}")

    removed = CacheInvalidator(SharedStore(redis_client, scan_batch_size=4)).invalidate("metrics:")

    assert removed == 25
    assert redis_client.dbsize() == 0


def test_unreachable_store_reports_nothing_deleted(unreachable_store):
    assert CacheInvalidator(unreachable_store).invalidate("metrics:") == 0


def test_failure_partway_returns_count_deleted_so_far(redis_client):
    for idx in range(10):
        redis_client.set(f"metrics:daily:page={idx}", b"{}")
    store = SharedStore(DeleteFailsAfterFirstBatch(redis_client), scan_batch_size=4)

    removed = CacheInvalidator(store).invalidate("metrics:")

    assert removed == 4
    assert len(redis_client.keys("metrics:*")) == 6


def test_empty_prefix_is_refused(store, redis_client):
    redis_client.set("unrelated:session", b"{}")

    with pytest.raises(ValueError):
        CacheInvalidator(store).invalidate("")

    assert redis_client.exists("unrelated:session") == 1
