from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values read once at process start."""

    app_name: str = os.getenv("APP_NAME", "metrics-gateway")
    version: str = "0.1.0"
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "8080"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    redis_socket_timeout_seconds: float = float(os.getenv("REDIS_SOCKET_TIMEOUT_SECONDS", "0.5"))
    rate_limit_requests: int = int(os.getenv("RATE_LIMIT_REQUESTS", "10"))
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
    cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "metrics")
    admin_api_key: str = os.getenv("ADMIN_API_KEY", "")
    compute_delay_seconds: float = float(os.getenv("COMPUTE_DELAY_SECONDS", "0.5"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
