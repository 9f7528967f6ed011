"""Tests for the quota + memoization handler chain."""

from __future__ import annotations

import pytest

from app.caching.response_cache import ResponseCache
from app.domain.context import CacheStatus, ComputationResult, RequestContext
from app.errors import QuotaExceededError
from app.gateway import Gateway
from app.security.quota_gate import QuotaGate


class CountingComputation:
    def __init__(self, result: ComputationResult | None = None, error: Exception | None = None) -> None:
        self.calls = 0
        self._result = result or ComputationResult(payload={"success": True, "data": [1, 2, 3], "cached": False})
        self._error = error

    def __call__(self) -> ComputationResult:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result


def build_gateway(store, *, max_requests: int = 100) -> Gateway:
    return Gateway(
        QuotaGate(store, max_requests=max_requests, window_seconds=60),
        ResponseCache(store, ttl_seconds=60),
        key_prefix="metrics",
    )


def context(params=(), method="GET", identity="ip:127.0.0.1") -> RequestContext:
    return RequestContext(identity=identity, method=method, path="/daily", params=tuple(params))


def test_miss_then_hit_skips_computation(store):
    gateway = build_gateway(store)
    compute = CountingComputation()

    first = gateway.handle(context(), compute)
    second = gateway.handle(context(), compute)

    assert compute.calls == 1
    assert first.cache_status is CacheStatus.MISS
    assert first.headers["X-Cache-Status"] == "MISS"
    assert first.headers["X-Cache-Key"] == "metrics:daily:default"
    assert first.payload["cached"] is False
    assert second.cache_status is CacheStatus.HIT
    assert second.headers["X-Cache-Status"] == "HIT"
    assert second.payload == {"success": True, "data": [1, 2, 3], "cached": True}


def test_equivalent_queries_share_an_entry(store):
    gateway = build_gateway(store)
    compute = CountingComputation()

    gateway.handle(context([("b", "2"), ("a", "1")]), compute)
    hit = gateway.handle(context([("a", "1"), ("b", "2")]), compute)

    assert compute.calls == 1
    assert hit.cache_key == "metrics:daily:a=1&b=2"


def test_unsuccessful_result_is_never_served_from_cache(store):
    gateway = build_gateway(store)
    failed = ComputationResult(payload={"success": False}, success=False, status_code=404)
    compute = CountingComputation(result=failed)

    responses = [gateway.handle(context(), compute) for _ in range(3)]

    assert compute.calls == 3
    assert all(r.cache_status is CacheStatus.MISS for r in responses)
    assert all(r.status_code == 404 for r in responses)


def test_computation_errors_propagate_and_are_not_cached(store, redis_client):
    gateway = build_gateway(store)
    compute = CountingComputation(error=ValueError("Invalid start_date format. Use YYYY-MM-DD"))

    with pytest.raises(ValueError):
        gateway.handle(context(), compute)

    assert redis_client.get("metrics:daily:default") is None


def test_non_read_requests_bypass_memoization(store, redis_client):
    gateway = build_gateway(store)
    compute = CountingComputation()

    gateway.handle(context(method="POST"), compute)
    response = gateway.handle(context(method="POST"), compute)

    assert compute.calls == 2
    assert response.cache_status is CacheStatus.BYPASS
    assert "X-Cache-Status" not in response.headers
    assert redis_client.keys("metrics:*") == []


def test_rejection_happens_before_cache_and_computation(store):
    gateway = build_gateway(store, max_requests=1)
    compute = CountingComputation()

    gateway.handle(context(), compute)
    with pytest.raises(QuotaExceededError) as excinfo:
        gateway.handle(context(), compute)

    assert compute.calls == 1
    assert excinfo.value.decision.retry_after is not None
    assert "Retry-After" in excinfo.value.decision.headers()


def test_quota_headers_are_attached(store):
    response = build_gateway(store, max_requests=3).handle(context(), CountingComputation())
    assert response.headers["X-RateLimit-Limit"] == "3"
    assert response.headers["X-RateLimit-Remaining"] == "2"


def test_unreachable_store_still_returns_computed_result(unreachable_store):
    gateway = build_gateway(unreachable_store, max_requests=1)
    compute = CountingComputation()

    responses = [gateway.handle(context(), compute) for _ in range(3)]

    assert compute.calls == 3
    assert all(r.status_code == 200 for r in responses)
    assert all(r.cache_status is CacheStatus.MISS for r in responses)
    assert all("X-RateLimit-Limit" not in r.headers for r in responses)
    assert responses[0].payload["data"] == [1, 2, 3]
