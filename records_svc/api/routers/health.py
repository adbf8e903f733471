"""
Health, readiness, and metrics endpoints for operational visibility.

This module provides:
- /health: Liveness probe (is the app running?)
- /ready: Readiness probe (is the record store reachable?)
- /metrics: Prometheus-compatible metrics
- /metrics/json: The same metrics as JSON

No authentication; these endpoints are for infrastructure use.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.config import settings
from core.dependencies import get_record_store
from core.middleware import get_metrics_collector
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

SERVICE_NAME = "Health Records Service API"
SERVICE_VERSION = "1.0.0"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str  # "ok", "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    """Response model for /ready endpoint."""
    status: str  # "ready", "not_ready"
    backend: str
    dependencies: List[DependencyStatus]
    store: Optional[Dict[str, int]] = None
    timestamp: str


class MetricsResponse(BaseModel):
    """Response model for JSON metrics endpoint."""
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float
    record_events_total: Dict[str, int]


# =============================================================================
# HEALTH ENDPOINT (LIVENESS)
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Check if the application is running. Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=SERVICE_VERSION,
        timestamp=_utc_timestamp()
    )


# =============================================================================
# READINESS ENDPOINT
# =============================================================================

def _check_record_store(store: RecordStore) -> tuple:
    """
    Check that the primary store answers queries.

    Returns:
        (DependencyStatus, store stats or None)
    """
    start = time.perf_counter()
    try:
        stats = store.stats()
        latency_ms = (time.perf_counter() - start) * 1000
        return DependencyStatus(
            name="record_store",
            status="ok",
            latency_ms=round(latency_ms, 2),
            message=f"{stats['records']} records indexed"
        ), stats
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.error("Record store health check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="record_store",
            status="unavailable",
            latency_ms=round(latency_ms, 2),
            message=f"Store unavailable: {type(e).__name__}"
        ), None


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Check that the record store is reachable. Returns 503 if not ready."
)
async def readiness_check(
    response: Response,
    store: RecordStore = Depends(get_record_store)
) -> ReadyResponse:
    store_status, stats = _check_record_store(store)

    if store_status.status == "unavailable":
        status = "not_ready"
        response.status_code = 503
    else:
        status = "ready"

    return ReadyResponse(
        status=status,
        backend=settings.records_svc_storage_backend,
        dependencies=[store_status],
        store=stats,
        timestamp=_utc_timestamp()
    )


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Export metrics in Prometheus text format: HTTP request counts, "
                "latency percentiles, and record events by operation."
)
async def get_metrics() -> Response:
    collector = get_metrics_collector()
    return Response(
        content=collector.get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics",
    description="Export metrics in JSON format."
)
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@router.get(
    "/",
    summary="API root",
    description="Root endpoint with basic API information."
)
async def root() -> Dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics"
    }
