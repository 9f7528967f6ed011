"""Client identity derivation for quota accounting."""

from __future__ import annotations


def client_identity(api_key: str | None, remote_addr: str | None) -> str:
    """Return ``key:<token>`` when a credential is supplied, else ``ip:<address>``."""
    if api_key:
        return f"key:{api_key}"
    return f"ip:{remote_addr or 'unknown'}"
