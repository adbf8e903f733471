"""
FastAPI middleware for observability.

This module provides:
- Request/Response logging with request_id propagation
- Request timing for latency tracking
- In-memory metrics collection for HTTP traffic and record events

Design Choices:
- In-memory metrics with fixed-size buffers (no unbounded growth)
- Request ID in response headers for debugging

Middleware Stack Order (in main.py):
    1. LoggingMiddleware (outermost - captures everything)
    2. CORS Middleware
    3. Application routes
"""

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import set_request_id, clear_request_id

logger = logging.getLogger(__name__)


# =============================================================================
# IN-MEMORY METRICS COLLECTOR
# =============================================================================
# Uses fixed-size deques to prevent unbounded memory growth.
# Metrics are exposed via /metrics endpoint for Prometheus scraping.

@dataclass
class RequestMetrics:
    """Container for a single request's metrics."""
    timestamp: datetime
    method: str
    path: str
    status_code: int
    duration_ms: float
    request_id: str


@dataclass
class MetricsCollector:
    """
    In-memory metrics collector with fixed-size buffer.

    Stores recent requests for latency percentile calculation and counts
    record mutation events reported by the event sink.
    """
    # Fixed-size buffer for latency calculations (last N requests)
    max_history: int = 1000

    # Request history for percentile calculations
    _requests: Deque[RequestMetrics] = field(default_factory=lambda: deque(maxlen=1000))

    total_requests: int = 0
    total_2xx: int = 0
    total_4xx: int = 0
    total_5xx: int = 0

    # Record events by operation name (add_health_record, ...)
    record_events: Dict[str, int] = field(default_factory=dict)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record_request(self, metrics: RequestMetrics) -> None:
        """Record a completed request's metrics."""
        with self._lock:
            self._requests.append(metrics)
            self.total_requests += 1

            # Categorize by status code
            if 200 <= metrics.status_code < 300:
                self.total_2xx += 1
            elif 400 <= metrics.status_code < 500:
                self.total_4xx += 1
            elif 500 <= metrics.status_code < 600:
                self.total_5xx += 1

    def record_event(self, operation: str) -> None:
        """Count a successful record mutation."""
        with self._lock:
            self.record_events[operation] = self.record_events.get(operation, 0) + 1

    def get_latency_percentiles(self) -> Dict[str, float]:
        """
        Calculate latency percentiles from recent requests.

        Returns p50, p95, p99 latencies in milliseconds.
        Returns 0 if no data available.
        """
        durations = sorted(r.duration_ms for r in list(self._requests))
        if not durations:
            return {"p50": 0, "p95": 0, "p99": 0}

        n = len(durations)

        def percentile(p: float) -> float:
            """Get the value at percentile p (0-100)."""
            idx = int(n * p / 100)
            return durations[min(idx, n - 1)]

        return {
            "p50": round(percentile(50), 2),
            "p95": round(percentile(95), 2),
            "p99": round(percentile(99), 2),
        }

    def get_summary(self) -> Dict:
        """Get metrics summary for /metrics endpoint."""
        latencies = self.get_latency_percentiles()

        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.total_2xx,
            "http_requests_4xx_total": self.total_4xx,
            "http_requests_5xx_total": self.total_5xx,
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
            "record_events_total": dict(self.record_events),
        }

    def get_prometheus_format(self) -> str:
        """
        Export metrics in Prometheus text format.

        This format can be scraped directly by Prometheus/Grafana Agent.
        """
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f'http_requests_total {summary["http_requests_total"]}',
            "",
            "# HELP http_requests_by_status HTTP requests by status category",
            "# TYPE http_requests_by_status counter",
            f'http_requests_by_status{{status="2xx"}} {summary["http_requests_2xx_total"]}',
            f'http_requests_by_status{{status="4xx"}} {summary["http_requests_4xx_total"]}',
            f'http_requests_by_status{{status="5xx"}} {summary["http_requests_5xx_total"]}',
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
            f'http_request_duration_ms{{quantile="0.5"}} {summary["http_request_duration_ms_p50"]}',
            f'http_request_duration_ms{{quantile="0.95"}} {summary["http_request_duration_ms_p95"]}',
            f'http_request_duration_ms{{quantile="0.99"}} {summary["http_request_duration_ms_p99"]}',
            "",
            "# HELP record_events_total Successful record mutations by operation",
            "# TYPE record_events_total counter",
        ]
        for operation, count in sorted(summary["record_events_total"].items()):
            lines.append(f'record_events_total{{operation="{operation}"}} {count}')
        return "\n".join(lines) + "\n"


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/Response logging middleware with request_id propagation.

    Features:
    - Generates unique request_id for each request
    - Logs request start and completion with structured JSON
    - Records latency metrics
    - Adds X-Request-ID header to responses for debugging
    """

    # Paths to exclude from detailed logging (reduce noise)
    EXCLUDED_PATHS = {"/health", "/ready", "/metrics", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with logging and metrics collection."""
        request_id = str(uuid.uuid4())[:8]  # Short UUID for readability

        # Set request_id in context for propagation to all logs
        set_request_id(request_id)

        method = request.method
        path = request.url.path

        start_time = time.perf_counter()

        if path not in self.EXCLUDED_PATHS:
            logger.info(
                "Request started",
                extra={
                    "method": method,
                    "path": path,
                    "query": str(request.query_params) if request.query_params else None,
                }
            )

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            clear_request_id()

        metrics_collector.record_request(RequestMetrics(
            timestamp=datetime.now(timezone.utc),
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
            request_id=request_id,
        ))

        if path not in self.EXCLUDED_PATHS:
            log_level = logging.WARNING if status_code >= 400 else logging.INFO
            logger.log(
                log_level,
                "Request completed",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

        response.headers["X-Request-ID"] = request_id

        return response
