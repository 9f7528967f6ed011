"""Cache administration contracts."""

from __future__ import annotations

from pydantic import BaseModel


class CacheInvalidationRequest(BaseModel):
    prefix: str | None = None


class CacheInvalidationResponse(BaseModel):
    success: bool = True
    message: str
    prefix: str
    keys_deleted: int
