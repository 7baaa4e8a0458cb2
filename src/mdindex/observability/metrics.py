"""Prometheus metrics for search and cache synchronization."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_LATENCY = Histogram(
    "mdindex_search_latency_seconds",
    "Search query latency",
    ["mode"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

SEARCH_REQUESTS = Counter(
    "mdindex_search_requests_total",
    "Total search queries by matching mode",
    ["mode"],
)

SYNC_RUNS = Counter(
    "mdindex_sync_runs_total",
    "Synchronization runs by mode and outcome",
    ["mode", "outcome"],
)

SYNC_CHANGES = Counter(
    "mdindex_sync_changes_total",
    "Files added, updated, removed or skipped as unreadable during synchronization",
    ["kind"],
)

INDEX_DOC_COUNT = Gauge(
    "mdindex_index_document_count",
    "Documents in the live index",
    ["namespace"],
)

CACHE_WRITE_ERRORS = Counter(
    "mdindex_cache_write_errors_total",
    "Failed cache snapshot writes",
    ["namespace"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for a metrics endpoint."""
    return CONTENT_TYPE_LATEST
