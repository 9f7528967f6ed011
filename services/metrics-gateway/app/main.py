"""FastAPI application wiring for the metrics gateway."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.routes import router as v1_router
from .caching.invalidator import CacheInvalidator
from .caching.response_cache import ResponseCache
from .config import Settings, get_settings
from .domain.metrics import MetricsService
from .errors import StoreUnavailableError
from .gateway import Gateway
from .security.quota_gate import QuotaGate
from .store import SharedStore

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def configure_state(app: FastAPI, store: SharedStore, config: Settings) -> None:
    """Attach the gates and collaborators built from ``config`` to ``app.state``."""
    app.state.store = store
    app.state.gateway = Gateway(
        QuotaGate(
            store,
            max_requests=config.rate_limit_requests,
            window_seconds=config.rate_limit_window_seconds,
        ),
        ResponseCache(store, ttl_seconds=config.cache_ttl_seconds),
        key_prefix=config.cache_key_prefix,
    )
    app.state.invalidator = CacheInvalidator(store)
    app.state.metrics_service = MetricsService(compute_delay_seconds=config.compute_delay_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared Redis store for the app lifecycle."""
    store = SharedStore.from_url(settings.redis_url, socket_timeout=settings.redis_socket_timeout_seconds)
    configure_state(app, store, settings)
    logger.info(
        "gateway ready: %s requests / %ss per identity, cache ttl %ss",
        settings.rate_limit_requests,
        settings.rate_limit_window_seconds,
        settings.cache_ttl_seconds,
    )
    try:
        yield
    finally:
        store.client.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.get("/healthz", tags=["health"])
def healthz(request: Request) -> JSONResponse:
    """Report readiness together with the state of the shared store."""
    store: SharedStore = request.app.state.store
    try:
        store.ping()
    except StoreUnavailableError as exc:
        logger.warning("health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "redis": "disconnected"},
        )
    return JSONResponse(content={"status": "healthy", "redis": "connected"})


app.include_router(v1_router)


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def run() -> None:
    """Serve the gateway with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level=settings.log_level.lower())
