"""Tests for cache key derivation."""

from __future__ import annotations

from app.caching.keys import derive_cache_key


def test_parameter_order_does_not_matter():
    assert derive_cache_key("/daily", {"b": "2", "a": "1"}) == derive_cache_key("/daily", {"a": "1", "b": "2"})
    assert derive_cache_key("/daily", {"a": "1", "b": "2"}) == "metrics:daily:a=1&b=2"


def test_no_parameters_uses_stable_sentinel():
    key = derive_cache_key("/daily", {})
    assert key == "metrics:daily:default"
    assert key == derive_cache_key("/daily")
    assert key != derive_cache_key("/daily", {"default": ""})
    assert key != derive_cache_key("/daily", {"start_date": "2024-01-01"})


def test_different_values_produce_different_keys():
    first = derive_cache_key("/daily", {"start_date": "2024-01-01"})
    second = derive_cache_key("/daily", {"start_date": "2024-01-02"})
    assert first != second


def test_different_resources_do_not_collide():
    assert derive_cache_key("/daily", {}) != derive_cache_key("/hourly", {})
    assert derive_cache_key("/a/b", {}) != derive_cache_key("/a:b", {})


def test_delimiters_inside_values_cannot_forge_another_query():
    forged = derive_cache_key("/daily", {"a": "1&b=2"})
    genuine = derive_cache_key("/daily", {"a": "1", "b": "2"})
    assert forged != genuine


def test_repeated_parameters_are_sorted_deterministically():
    one = derive_cache_key("/daily", [("tag", "z"), ("tag", "a")])
    other = derive_cache_key("/daily", [("tag", "a"), ("tag", "z")])
    assert one == other == "metrics:daily:tag=a&tag=z"


def test_custom_prefix():
    assert derive_cache_key("/summary", {}, prefix="analytics").startswith("analytics:summary:")
