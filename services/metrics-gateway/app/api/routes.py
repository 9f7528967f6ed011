"""HTTP route definitions for the metrics gateway."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from schemas import CacheInvalidationRequest, CacheInvalidationResponse

from ..caching.invalidator import CacheInvalidator
from ..domain.context import ComputationResult, RequestContext
from ..domain.identity import client_identity
from ..domain.metrics import MetricsService
from ..domain.validation import parse_date_range
from ..errors import QuotaExceededError
from ..gateway import Computation, Gateway
from ..security.admin import require_admin_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

# cache keys are derived from the path below this root
METRICS_ROOT = "/api/v1/metrics"


def get_gateway(request: Request) -> Gateway:
    """Resolve the `Gateway` stored on the FastAPI application state."""
    gateway: Gateway = request.app.state.gateway
    return gateway


def get_metrics_service(request: Request) -> MetricsService:
    service: MetricsService = request.app.state.metrics_service
    return service


def get_invalidator(request: Request) -> CacheInvalidator:
    invalidator: CacheInvalidator = request.app.state.invalidator
    return invalidator


def build_context(request: Request, api_key: str | None, root: str = METRICS_ROOT) -> RequestContext:
    """Capture the identity-relevant fields of an inbound request."""
    path = request.url.path
    if path.startswith(root):
        path = path[len(root):] or "/"
    remote_addr = request.client.host if request.client else None
    return RequestContext(
        identity=client_identity(api_key, remote_addr),
        method=request.method,
        path=path,
        params=tuple(request.query_params.multi_items()),
    )


def _serve(gateway: Gateway, context: RequestContext, compute: Computation) -> JSONResponse:
    try:
        gated = gateway.handle(context, compute)
    except QuotaExceededError as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="rate limited",
            headers=exc.decision.headers(),
        ) from exc
    except ValueError as exc:
        logger.info("rejected query for %s: %s", context.path, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return JSONResponse(content=gated.payload, status_code=gated.status_code, headers=gated.headers)


@router.get("/metrics/daily")
def daily_metrics(
    request: Request,
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    api_key: str | None = Header(default=None, alias="X-API-Key"),
    gateway: Gateway = Depends(get_gateway),
    service: MetricsService = Depends(get_metrics_service),
) -> JSONResponse:
    """Return daily metric rows, optionally bounded by date."""

    def compute() -> ComputationResult:
        return service.daily(parse_date_range(start_date, end_date))

    return _serve(gateway, build_context(request, api_key), compute)


@router.get("/metrics/hourly")
def hourly_metrics(
    request: Request,
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    api_key: str | None = Header(default=None, alias="X-API-Key"),
    gateway: Gateway = Depends(get_gateway),
    service: MetricsService = Depends(get_metrics_service),
) -> JSONResponse:
    """Return hourly metric rows for whole days within the bounds."""

    def compute() -> ComputationResult:
        return service.hourly(parse_date_range(start_date, end_date))

    return _serve(gateway, build_context(request, api_key), compute)


@router.get("/metrics/summary")
def metrics_summary(
    request: Request,
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    api_key: str | None = Header(default=None, alias="X-API-Key"),
    gateway: Gateway = Depends(get_gateway),
    service: MetricsService = Depends(get_metrics_service),
) -> JSONResponse:
    """Return totals and daily averages over the selected range."""

    def compute() -> ComputationResult:
        return service.summary(parse_date_range(start_date, end_date))

    return _serve(gateway, build_context(request, api_key), compute)


@router.post("/cache/invalidate", response_model=CacheInvalidationResponse)
def invalidate_cache(
    payload: CacheInvalidationRequest | None = Body(default=None),
    _: str = Depends(require_admin_key),
    gateway: Gateway = Depends(get_gateway),
    invalidator: CacheInvalidator = Depends(get_invalidator),
) -> CacheInvalidationResponse:
    """Drop cached responses under a key prefix (defaults to every metrics entry)."""
    cache_root = f"{gateway.key_prefix}:"
    prefix = (payload.prefix if payload and payload.prefix else None) or cache_root
    if not prefix.startswith(cache_root):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"prefix must start with {cache_root!r}",
        )
    deleted = invalidator.invalidate(prefix)
    return CacheInvalidationResponse(
        message="Cache invalidated successfully",
        prefix=prefix,
        keys_deleted=deleted,
    )
