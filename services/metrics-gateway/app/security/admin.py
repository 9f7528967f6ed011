"""Privileged-credential check guarding administrative endpoints."""

from __future__ import annotations

import logging
import secrets

from fastapi import Header, HTTPException, status

from ..config import get_settings

logger = logging.getLogger(__name__)


def verify_admin_key(provided: str | None, expected: str) -> bool:
    """Constant-time comparison; an unset expected key never matches."""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_admin_key(api_key: str | None = Header(default=None, alias="X-API-Key")) -> str:
    """FastAPI dependency rejecting callers without the configured admin key."""
    if not api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="API key not provided")
    if not verify_admin_key(api_key, get_settings().admin_api_key):
        logger.warning("rejected admin request with invalid API key")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid API key")
    return api_key
