"""Redis-backed memoization of successful downstream responses."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import time
from typing import Any

from ..domain.context import ComputationResult
from ..errors import MalformedStoredValueError, StoreUnavailableError
from ..observability import CACHE_LOOKUPS, report_store_failure
from ..store import SharedStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredResponse:
    """A cached response plus the metadata needed to replay it."""

    status_code: int
    payload: dict[str, Any]
    stored_at: float

    def encode(self) -> str:
        return json.dumps(
            {"status_code": self.status_code, "payload": self.payload, "stored_at": self.stored_at},
            separators=(",", ":"),
        )

    @classmethod
    def decode(cls, raw: bytes | str) -> "StoredResponse":
        try:
            data = json.loads(raw)
            return cls(
                status_code=int(data["status_code"]),
                payload=dict(data["payload"]),
                stored_at=float(data["stored_at"]),
            )
        except (ValueError, TypeError, KeyError) as exc:
            raise MalformedStoredValueError(str(exc)) from exc


class ResponseCache:
    """Lookup/store of memoized responses with a single process-wide TTL.

    Store failures never escape: a failed lookup is a miss, a failed write is
    logged and dropped.
    """

    def __init__(self, store: SharedStore, *, ttl_seconds: int) -> None:
        """Keep the store handle and the TTL applied to every entry."""
        self._store = store
        self._ttl_seconds = ttl_seconds

    def lookup(self, key: str) -> StoredResponse | None:
        """Return the stored response for ``key`` or ``None`` on miss."""
        try:
            raw = self._store.get(key)
        except StoreUnavailableError as exc:
            report_store_failure("response cache", exc)
            CACHE_LOOKUPS.labels(result="error").inc()
            return None
        if raw is None:
            CACHE_LOOKUPS.labels(result="miss").inc()
            return None
        try:
            stored = StoredResponse.decode(raw)
        except MalformedStoredValueError as exc:
            logger.warning("dropping malformed cache entry %s: %s", key, exc)
            CACHE_LOOKUPS.labels(result="malformed").inc()
            self._discard(key)
            return None
        CACHE_LOOKUPS.labels(result="hit").inc()
        return stored

    def store(self, key: str, response: ComputationResult, ttl_seconds: int | None = None) -> bool:
        """Persist a successful result under ``key``; returns whether it was written."""
        if not response.success:
            return False
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        record = StoredResponse(
            status_code=response.status_code,
            payload=response.payload,
            stored_at=time.time(),
        )
        try:
            self._store.set(key, record.encode(), ttl)
        except StoreUnavailableError as exc:
            report_store_failure("response cache", exc)
            return False
        except (TypeError, ValueError):
            logger.exception("response for %s is not JSON serialisable, not caching", key)
            return False
        logger.debug("cached %s for %ss", key, ttl)
        return True

    def _discard(self, key: str) -> None:
        try:
            self._store.delete(key)
        except StoreUnavailableError as exc:
            report_store_failure("response cache", exc)
