"""Redis-backed shared counter/key store used by the gates."""

from __future__ import annotations

import re
from typing import Iterator

from redis import Redis
from redis.exceptions import RedisError

from .errors import StoreUnavailableError

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so ``value`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class SharedStore:
    """Thin adapter over a Redis client exposing only the primitives the gates need.

    Every Redis failure (connection refused, socket timeout, protocol error) is
    re-raised as :class:`StoreUnavailableError` so callers have a single failure
    type to absorb.
    """

    def __init__(self, client: Redis, *, scan_batch_size: int = 500) -> None:
        """Store the Redis client and the batch size used for prefix scans."""
        self._client = client
        self._scan_batch_size = scan_batch_size

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: float | None = None) -> "SharedStore":
        """Build a store from a Redis URL with bounded socket timeouts."""
        client = Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    @property
    def client(self) -> Redis:
        return self._client

    def incr(self, key: str) -> int:
        """Atomically increment ``key`` and return the post-increment value."""
        try:
            return int(self._client.incr(key))
        except RedisError as exc:
            raise StoreUnavailableError("incr", exc) from exc

    def expire(self, key: str, seconds: int) -> bool:
        try:
            return bool(self._client.expire(key, seconds))
        except RedisError as exc:
            raise StoreUnavailableError("expire", exc) from exc

    def ttl(self, key: str) -> int:
        """Return remaining seconds; ``-1`` without expiry, ``-2`` when absent."""
        try:
            return int(self._client.ttl(key))
        except RedisError as exc:
            raise StoreUnavailableError("ttl", exc) from exc

    def get(self, key: str) -> bytes | None:
        try:
            return self._client.get(key)
        except RedisError as exc:
            raise StoreUnavailableError("get", exc) from exc

    def set(self, key: str, value: bytes | str, ttl_seconds: int) -> None:
        try:
            self._client.setex(key, ttl_seconds, value)
        except RedisError as exc:
            raise StoreUnavailableError("set", exc) from exc

    def delete(self, *keys: str | bytes) -> int:
        if not keys:
            return 0
        try:
            return int(self._client.delete(*keys))
        except RedisError as exc:
            raise StoreUnavailableError("delete", exc) from exc

    def iter_prefix_batches(self, prefix: str) -> Iterator[list[bytes]]:
        """Yield batches of keys starting with ``prefix`` using ``SCAN``."""
        pattern = f"{escape_glob(prefix)}*"
        batch: list[bytes] = []
        try:
            for key in self._client.scan_iter(match=pattern, count=self._scan_batch_size):
                batch.append(key)
                if len(batch) >= self._scan_batch_size:
                    yield batch
                    batch = []
        except RedisError as exc:
            raise StoreUnavailableError("scan", exc) from exc
        if batch:
            yield batch

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError as exc:
            raise StoreUnavailableError("ping", exc) from exc
