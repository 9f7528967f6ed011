"""Exceptions raised inside the gating layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .security.quota_gate import QuotaDecision


class StoreUnavailableError(RuntimeError):
    """The shared store could not be reached or timed out."""

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(f"store {operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class MalformedStoredValueError(ValueError):
    """A cached record could not be decoded."""


class QuotaExceededError(Exception):
    """Raised when the quota gate rejects a request."""

    def __init__(self, decision: "QuotaDecision") -> None:
        super().__init__("rate limited")
        self.decision = decision
