"""Administrative bulk removal of cached responses."""

from __future__ import annotations

import logging

from ..errors import StoreUnavailableError
from ..observability import INVALIDATED_KEYS, report_store_failure
from ..store import SharedStore

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Delete every cached response whose key starts with a prefix."""

    def __init__(self, store: SharedStore) -> None:
        self._store = store

    def invalidate(self, prefix: str) -> int:
        """Remove keys under ``prefix`` and return how many the store deleted.

        A store failure part-way through stops the sweep; the count deleted up
        to that point is returned and nothing is retried.

        Raises
        ------
        ValueError
            When ``prefix`` is empty, which would match every key in the store.
        """
        if not prefix:
            raise ValueError("invalidation prefix must not be empty")
        deleted = 0
        try:
            for batch in self._store.iter_prefix_batches(prefix):
                deleted += self._store.delete(*batch)
        except StoreUnavailableError as exc:
            report_store_failure("cache invalidator", exc)
            logger.warning("invalidation of %r stopped after %s keys", prefix, deleted)
        else:
            logger.info("invalidated %s cached responses under %r", deleted, prefix)
        INVALIDATED_KEYS.inc(deleted)
        return deleted
