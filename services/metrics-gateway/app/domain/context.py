"""Request-scoped values threaded through the gateway handler chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MEMOIZABLE_METHODS = frozenset({"GET", "HEAD"})


class CacheStatus(str, Enum):
    HIT = "HIT"
    MISS = "MISS"
    BYPASS = "BYPASS"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Identity-relevant fields of one inbound request."""

    identity: str
    method: str
    path: str
    params: tuple[tuple[str, str], ...] = ()

    @property
    def memoizable(self) -> bool:
        return self.method.upper() in MEMOIZABLE_METHODS


@dataclass(frozen=True, slots=True)
class ComputationResult:
    """Structured output of the downstream computation.

    ``success`` is an explicit signal; only results carrying it are memoized.
    """

    payload: dict[str, Any]
    success: bool = True
    status_code: int = 200


@dataclass(slots=True)
class GatedResponse:
    """What the gateway hands back to the transport layer."""

    status_code: int
    payload: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    cache_status: CacheStatus = CacheStatus.BYPASS
    cache_key: str | None = None
