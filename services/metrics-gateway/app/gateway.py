"""Handler chain combining the quota gate and response memoization."""

from __future__ import annotations

import logging
from typing import Callable

from .caching.keys import derive_cache_key
from .caching.response_cache import ResponseCache
from .domain.context import CacheStatus, ComputationResult, GatedResponse, RequestContext
from .errors import QuotaExceededError
from .security.quota_gate import QuotaGate

logger = logging.getLogger(__name__)

Computation = Callable[[], ComputationResult]


class Gateway:
    """Run a downstream computation behind admission control and memoization.

    The quota gate runs first so rejected clients never reach the cache or the
    computation. Admitted read requests are served from the cache when a fresh
    entry exists; otherwise the computation runs and its result is stored only
    when it reports success.
    """

    def __init__(self, quota_gate: QuotaGate, response_cache: ResponseCache, *, key_prefix: str) -> None:
        """Wire the gates together; ``key_prefix`` namespaces derived cache keys."""
        self._quota_gate = quota_gate
        self._response_cache = response_cache
        self._key_prefix = key_prefix

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def handle(self, context: RequestContext, compute: Computation) -> GatedResponse:
        """Gate ``compute`` for the request described by ``context``.

        Raises
        ------
        QuotaExceededError
            When the identity has exhausted its quota for the current window.
        Exception
            Anything raised by ``compute`` propagates unchanged.
        """
        decision = self._quota_gate.admit(context.identity)
        if not decision.allowed:
            raise QuotaExceededError(decision)
        headers = decision.headers()

        if not context.memoizable:
            result = compute()
            return GatedResponse(status_code=result.status_code, payload=result.payload, headers=headers)

        key = derive_cache_key(context.path, context.params, prefix=self._key_prefix)
        stored = self._response_cache.lookup(key)
        if stored is not None:
            logger.info("cache HIT: %s", key)
            headers.update({"X-Cache-Status": CacheStatus.HIT.value, "X-Cache-Key": key})
            return GatedResponse(
                status_code=stored.status_code,
                payload={**stored.payload, "cached": True},
                headers=headers,
                cache_status=CacheStatus.HIT,
                cache_key=key,
            )

        logger.info("cache MISS: %s", key)
        headers.update({"X-Cache-Status": CacheStatus.MISS.value, "X-Cache-Key": key})
        result = compute()
        if result.success:
            self._response_cache.store(key, result)
        return GatedResponse(
            status_code=result.status_code,
            payload=result.payload,
            headers=headers,
            cache_status=CacheStatus.MISS,
            cache_key=key,
        )
