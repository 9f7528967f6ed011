"""Redis-backed fixed-window quota gate."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
import time
from typing import Callable, Final

from ..errors import StoreUnavailableError
from ..observability import QUOTA_DECISIONS, report_store_failure
from ..store import SharedStore

logger = logging.getLogger(__name__)

_NO_EXPIRY: Final = -1


@dataclass(frozen=True, slots=True)
class QuotaDecision:
    """Outcome of a quota check plus the data needed for exposition headers."""

    allowed: bool
    limit: int = 0
    remaining: int = 0
    reset_epoch: int = 0
    retry_after: int | None = None
    count: int = 0
    enforced: bool = True

    @classmethod
    def unenforced(cls) -> "QuotaDecision":
        """Admission granted without consulting the store (fail-open)."""
        return cls(allowed=True, enforced=False)

    def headers(self) -> dict[str, str]:
        """Return quota exposition headers; empty when the gate failed open."""
        if not self.enforced:
            return {}
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_epoch),
        }
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


@dataclass
class QuotaGate:
    """Per-identity fixed-window request counter.

    Each identity owns one counter ``rate-limit:<identity>``. The first
    increment of a window sets its expiry; later increments never touch it, so
    a full burst at the end of one window may be followed immediately by a full
    burst at the start of the next.

    One recovery path sets the expiry again: a counter found with no expiry at
    all (TTL -1) means the caller that saw count 1 died between INCR and
    EXPIRE. Left alone, that counter would never lapse and the identity would
    stay rejected forever, so the gate arms the window on its behalf.
    """

    store: SharedStore
    max_requests: int
    window_seconds: int
    key_prefix: str = "rate-limit"
    clock: Callable[[], float] = field(default=time.time)

    def record_key(self, identity: str) -> str:
        return f"{self.key_prefix}:{identity}"

    def admit(
        self,
        identity: str,
        max_requests: int | None = None,
        window_seconds: int | None = None,
    ) -> QuotaDecision:
        """Count this request against ``identity`` and decide whether to admit it.

        Parameters
        ----------
        identity:
            Tagged client identity (``key:<token>`` or ``ip:<address>``).
        max_requests:
            Optional override of the configured per-window quota.
        window_seconds:
            Optional override of the configured window length.

        Returns
        -------
        QuotaDecision
            Rejected once the window's count exceeds the quota. When the store
            is unavailable the decision is an unenforced admission.
        """
        limit = self.max_requests if max_requests is None else max_requests
        window = self.window_seconds if window_seconds is None else window_seconds
        key = self.record_key(identity)
        try:
            count = self.store.incr(key)
            if count == 1:
                self.store.expire(key, window)
            ttl = self.store.ttl(key)
            if ttl == _NO_EXPIRY:
                # the first caller died between INCR and EXPIRE
                logger.warning("quota counter %s had no expiry, re-arming", key)
                self.store.expire(key, window)
                ttl = window
        except StoreUnavailableError as exc:
            report_store_failure("quota gate", exc)
            QUOTA_DECISIONS.labels(outcome="unenforced").inc()
            return QuotaDecision.unenforced()

        if ttl < 0:
            ttl = window
        remaining = max(0, limit - count)
        reset_epoch = math.ceil(self.clock()) + ttl

        if count > limit:
            QUOTA_DECISIONS.labels(outcome="rejected").inc()
            logger.info("quota exceeded for %s (count=%s limit=%s)", identity, count, limit)
            return QuotaDecision(
                allowed=False,
                limit=limit,
                remaining=remaining,
                reset_epoch=reset_epoch,
                retry_after=ttl,
                count=count,
            )

        QUOTA_DECISIONS.labels(outcome="admitted").inc()
        return QuotaDecision(
            allowed=True,
            limit=limit,
            remaining=remaining,
            reset_epoch=reset_epoch,
            count=count,
        )
