"""
Prometheus metrics for the HTTP engine.

Metrics live in the default prometheus_client registry and are exported on
a separate port by start_metrics_server(); the engine's own route table is
left untouched.
"""

"""
Copyright 2026 Chris Bunting
File: metrics.py | Purpose: Prometheus request metrics
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-13 - Chris Bunting: Initial implementation
"""

import logging

from prometheus_client import Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger("httpengine.metrics")

REQ_TOTAL = Counter(
    "httpengine_requests_total",
    "Total HTTP requests answered",
    ["method", "status"],
)
REQ_ERRORS = Counter(
    "httpengine_request_errors_total",
    "Connections aborted by an error",
    ["kind"],
)
REQ_IN_FLIGHT = Gauge("httpengine_in_flight_requests", "In-flight requests")
REQ_LATENCY = Histogram("httpengine_request_duration_seconds", "Request duration seconds")


def record_response(method: str, status: int, duration: float) -> None:
    REQ_TOTAL.labels(method=method, status=str(status)).inc()
    REQ_LATENCY.observe(duration)


def record_error(error: Exception) -> None:
    REQ_ERRORS.labels(kind=type(error).__name__).inc()


def start_metrics_server(port: int, addr: str = "127.0.0.1") -> None:
    """Serve /metrics for the default registry on a background thread."""
    start_http_server(port, addr=addr)
    logger.info("Prometheus metrics available on %s:%s", addr, port)
