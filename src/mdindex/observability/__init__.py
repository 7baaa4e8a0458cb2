"""Observability module for OpenTelemetry tracing, Prometheus metrics, and logging."""

from mdindex.observability.logging import JsonFormatter, configure_logging
from mdindex.observability.metrics import (
    CACHE_WRITE_ERRORS,
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    SYNC_CHANGES,
    SYNC_RUNS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from mdindex.observability.tracing import create_span, current_trace_ids, get_tracer, init_tracing


__all__ = [
    "CACHE_WRITE_ERRORS",
    "INDEX_DOC_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "SYNC_CHANGES",
    "SYNC_RUNS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "current_trace_ids",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "init_tracing",
    "track_latency",
]
