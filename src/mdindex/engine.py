"""Public entry points of the search core.

``initialize`` builds (or restores) the index for a data directory and arms
the rebuild scheduler; ``query`` runs a search against the handle it returns.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mdindex.config import Settings
from mdindex.domain.search import SearchPage
from mdindex.index_handle import IndexHandle
from mdindex.observability.logging import configure_logging
from mdindex.observability.metrics import SEARCH_LATENCY, SEARCH_REQUESTS, track_latency
from mdindex.observability.tracing import create_span, init_tracing
from mdindex.search.tokenizer import is_phrase_query
from mdindex.services.delta_synchronizer import DeltaSynchronizer
from mdindex.services.rebuild_scheduler import RebuildScheduler
from mdindex.utils.cache_store import CacheStore


logger = logging.getLogger(__name__)


def configure_observability(settings: Settings) -> None:
    """Install log handlers and the tracer provider from ``settings``."""
    configure_logging(level=settings.log_level.upper(), json_output=settings.log_json)
    init_tracing(service_name="mdindex")


def build_synchronizer(data_dir: Path, settings: Settings) -> DeltaSynchronizer:
    store = CacheStore(settings.resolved_cache_dir(), data_dir)
    return DeltaSynchronizer(data_dir, store, extensions=settings.get_file_extensions())


async def initialize(
    data_dir: str | Path | None = None,
    auto_rebuild_interval_hours: float | None = None,
    *,
    settings: Settings | None = None,
) -> IndexHandle:
    """Load or build the index for ``data_dir`` and return its live handle.

    Args:
        data_dir: Root directory of the documents; defaults to ``Settings.data_dir``
        auto_rebuild_interval_hours: Hours between background refreshes;
            defaults to the configured value, non-positive disables them
        settings: Optional Settings instance, loaded from the environment otherwise

    Returns:
        IndexHandle shared by every later query and refresh
    """
    resolved_settings = settings or Settings()
    if resolved_settings.observability_setup:
        configure_observability(resolved_settings)

    interval = (
        resolved_settings.auto_rebuild_interval_hours
        if auto_rebuild_interval_hours is None
        else auto_rebuild_interval_hours
    )
    data_path = Path(resolved_settings.data_dir if data_dir is None else data_dir).expanduser()

    synchronizer = build_synchronizer(data_path, resolved_settings)
    index, result = await synchronizer.load_or_build()

    handle = IndexHandle(
        data_path,
        index,
        result.mod_times,
        settings=resolved_settings,
        persist_pending=result.persist_failed,
    )
    logger.info(
        "Index ready: %d documents (%s, %.0fms)",
        len(index),
        result.mode,
        result.duration_seconds * 1000,
    )

    scheduler = RebuildScheduler(handle, synchronizer, interval_hours=interval)
    if scheduler.start():
        handle.scheduler = scheduler
    return handle


def query(handle: IndexHandle, text: str, page: int = 1) -> SearchPage:
    """Search the live index; blank text returns an empty page without touching it.

    Never raises for malformed input: a non-string query yields an empty page
    and a page that is not a finite integer falls back to page 1.
    """
    if not isinstance(text, str) or not text.strip():
        return SearchPage.empty()

    query_text = text.strip()
    try:
        page_num = int(page)
    except (TypeError, ValueError, OverflowError):
        page_num = 1

    mode = "phrase" if is_phrase_query(query_text) else "token"
    SEARCH_REQUESTS.labels(mode=mode).inc()
    settings = handle.settings
    with create_span("mdindex.query", attributes={"mdindex.mode": mode, "mdindex.page": page_num}):
        with track_latency(SEARCH_LATENCY, mode=mode):
            return handle.index.search(
                query_text,
                page_num,
                page_size=settings.page_size,
                max_hits=settings.max_hits_per_result,
            )
