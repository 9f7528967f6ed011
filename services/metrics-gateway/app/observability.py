"""Prometheus counters and failure reporting for the gating layer."""

from __future__ import annotations

import logging

from prometheus_client import Counter

logger = logging.getLogger(__name__)

STORE_ERRORS = Counter(
    "gateway_store_errors_total",
    "Shared store failures absorbed by the gateway, by operation.",
    ("operation",),
)
CACHE_LOOKUPS = Counter(
    "gateway_cache_lookups_total",
    "Memoization lookups by result.",
    ("result",),
)
QUOTA_DECISIONS = Counter(
    "gateway_quota_decisions_total",
    "Quota gate decisions by outcome.",
    ("outcome",),
)
INVALIDATED_KEYS = Counter(
    "gateway_cache_invalidated_keys_total",
    "Cached responses removed by explicit invalidation.",
)


def report_store_failure(component: str, exc: Exception) -> None:
    """Log and count a store failure that the caller is about to absorb."""
    operation = getattr(exc, "operation", "unknown")
    STORE_ERRORS.labels(operation=operation).inc()
    logger.warning("%s degraded, store %s failed: %s", component, operation, exc)
