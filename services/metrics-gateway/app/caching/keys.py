"""Deterministic cache key derivation."""

from __future__ import annotations

from typing import Iterable, Mapping
from urllib.parse import quote

DEFAULT_PREFIX = "metrics"
NO_PARAMS_SENTINEL = "default"


def _token(value: str) -> str:
    # ':', '&' and '=' are delimiters below and must never leak from input
    return quote(str(value), safe="")


def derive_cache_key(
    path: str,
    params: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """Map a request path and its query parameters to a stable cache key.

    Parameters are sorted by key (then value, for repeated keys) so equivalent
    queries given in a different order share one key. A request without
    parameters maps to the ``default`` sentinel.
    """
    if params is None:
        items: list[tuple[str, str]] = []
    elif isinstance(params, Mapping):
        items = [(str(k), str(v)) for k, v in params.items()]
    else:
        items = [(str(k), str(v)) for k, v in params]

    segments = [_token(segment) for segment in path.split("/") if segment]
    resource = ":".join([prefix, *segments])

    if not items:
        return f"{resource}:{NO_PARAMS_SENTINEL}"
    query = "&".join(f"{_token(k)}={_token(v)}" for k, v in sorted(items))
    return f"{resource}:{query}"
