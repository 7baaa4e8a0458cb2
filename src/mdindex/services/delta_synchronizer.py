"""Reconcile on-disk files with the cached index.

The synchronizer compares the current-state table (path -> mtime from a
directory scan) with a persisted modification-time table and touches only
files that were added, changed or deleted. Unchanged files are never re-read.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import TYPE_CHECKING, Any

from mdindex.domain.model import Document
from mdindex.errors import CacheCorruptError, DocumentLoadError
from mdindex.observability.metrics import CACHE_WRITE_ERRORS, INDEX_DOC_COUNT, SYNC_CHANGES, SYNC_RUNS
from mdindex.observability.tracing import create_span
from mdindex.search.inverted_index import InvertedIndex
from mdindex.utils.cache_store import CacheStore
from mdindex.utils.file_scanner import DEFAULT_EXTENSIONS, collect_files, read_document


if TYPE_CHECKING:
    from mdindex.index_handle import IndexHandle


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncResult:
    """Outcome of one synchronization run."""

    mode: str
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unreadable: list[str] = field(default_factory=list)
    mod_times: dict[str, float] = field(default_factory=dict)
    document_count: int = 0
    persisted: bool = False
    persist_failed: bool = False
    skipped: bool = False
    duration_seconds: float = 0.0

    @property
    def changed(self) -> bool:
        """True when the index content differs from before the run."""
        return bool(self.added or self.updated or self.removed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": not self.skipped,
            "mode": self.mode,
            "changed": self.changed,
            "added": len(self.added),
            "updated": len(self.updated),
            "removed": len(self.removed),
            "unreadable": len(self.unreadable),
            "document_count": self.document_count,
            "persisted": self.persisted,
            "persist_failed": self.persist_failed,
            "skipped": self.skipped,
            "duration_seconds": round(self.duration_seconds, 4),
        }


def diff_tables(current: Mapping[str, float], persisted: Mapping[str, float]) -> tuple[list[str], list[str]]:
    """Return ``(changed_or_new, deleted)`` paths between two mtime tables."""
    changed = [path for path, mod_time in current.items() if persisted.get(path) != mod_time]
    deleted = [path for path in persisted if path not in current]
    return changed, deleted


class DeltaSynchronizer:
    """Startup policy, delta application and scheduled refresh for one data directory."""

    def __init__(
        self,
        data_dir: Path,
        store: CacheStore,
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.store = store
        self.extensions = tuple(extensions)

    async def scan(self) -> dict[str, float]:
        return await collect_files(self.data_dir, self.extensions)

    async def load_or_build(self) -> tuple[InvertedIndex, SyncResult]:
        """Produce the startup index.

        - no cache: full rebuild from an empty index
        - cache whose mtime table equals the current scan: load it, read nothing
        - stale cache: load it, then apply the delta
        - unreadable or corrupt cache: discard it, then full rebuild
        """
        start = time.perf_counter()
        with create_span("mdindex.sync.startup", attributes={"mdindex.namespace": self.store.namespace}):
            current = await self.scan()
            index: InvertedIndex | None = None
            persisted: dict[str, float] | None = None

            if self.store.exists():
                try:
                    persisted = await self.store.load_mod_times()
                    index = await self.store.load_snapshot()
                except CacheCorruptError as exc:
                    logger.warning("Cache for %s is unreadable, rebuilding: %s", self.data_dir, exc)
                    self._discard_cache()
                    index, persisted = None, None

            if index is not None and persisted is not None and persisted == current:
                logger.info("Loaded %d files from cache", len(index))
                result = SyncResult(mode="fast_path", mod_times=dict(current), document_count=len(index))
                return index, self._finish(result, start)

            if index is None or persisted is None:
                logger.info("Building search index for %s", self.data_dir)
                index, persisted, mode = InvertedIndex(), {}, "full"
            else:
                logger.info("Delta indexing %s", self.data_dir)
                mode = "delta"

            result = await self.apply_delta(index, current, persisted, mode=mode)
            if mode == "full" or result.changed or result.mod_times != persisted:
                await self._persist(index, result)
            logger.info("Indexed %d files", len(index))
            return index, self._finish(result, start)

    async def apply_delta(
        self,
        index: InvertedIndex,
        current: Mapping[str, float],
        persisted: Mapping[str, float],
        *,
        mode: str = "delta",
    ) -> SyncResult:
        """Mutate ``index`` so it matches ``current``.

        A path is reprocessed when its timestamp differs from ``persisted`` or
        when the index lacks it. Reprocessing removes the old entry first and
        appends a fresh one. Paths present only in ``persisted`` are removed.
        Unreadable files are skipped and left out of the returned table so a
        later run retries them.
        """
        result = SyncResult(mode=mode)
        mod_times: dict[str, float] = {}

        for path, mod_time in current.items():
            if persisted.get(path) == mod_time and path in index:
                mod_times[path] = mod_time
                continue

            existed = index.remove_document(path)
            try:
                content = await read_document(path)
            except DocumentLoadError as exc:
                logger.warning("Error indexing %s: %s", path, exc)
                result.unreadable.append(path)
                if existed:
                    result.removed.append(path)
                continue

            index.add(Document.from_file(path, content, mod_time))
            mod_times[path] = mod_time
            (result.updated if existed else result.added).append(path)

        for path in persisted:
            if path not in current and index.remove_document(path):
                logger.info("Removed %s from index", path)
                result.removed.append(path)

        result.mod_times = mod_times
        result.document_count = len(index)
        return result

    async def refresh(self, handle: IndexHandle) -> SyncResult:
        """Re-synchronize the live index behind ``handle``.

        The delta is applied to a scratch copy which is swapped in only once
        complete. The cache is written only when something changed or a
        previous write failed. A refresh requested while another one holds the
        handle lock is skipped.
        """
        if handle.lock.locked():
            logger.info("Sync already running for %s; skipping", self.data_dir)
            return SyncResult(mode="refresh", skipped=True, document_count=handle.document_count)

        async with handle.lock:
            start = time.perf_counter()
            with create_span("mdindex.sync.refresh", attributes={"mdindex.namespace": self.store.namespace}):
                current = await self.scan()
                changed, deleted = diff_tables(current, handle.mod_times)

                if not changed and not deleted:
                    result = SyncResult(
                        mode="refresh", mod_times=dict(handle.mod_times), document_count=handle.document_count
                    )
                else:
                    scratch = handle.index.copy()
                    result = await self.apply_delta(scratch, current, handle.mod_times, mode="refresh")
                    if result.changed or result.mod_times != handle.mod_times:
                        handle.swap(scratch, result.mod_times)

                if result.changed or handle.persist_pending:
                    await self._persist(handle.index, result)
                    handle.persist_pending = result.persist_failed
                    if result.persisted:
                        logger.info(
                            "Cache rebuilt successfully (%d files, %.0fms)",
                            handle.document_count,
                            (time.perf_counter() - start) * 1000,
                        )
                else:
                    logger.info("No changes detected (%.0fms)", (time.perf_counter() - start) * 1000)

            return self._finish(result, start)

    def _discard_cache(self) -> None:
        try:
            self.store.clear()
        except OSError as exc:
            logger.warning("Could not remove cache files for %s: %s", self.data_dir, exc)

    async def _persist(self, index: InvertedIndex, result: SyncResult) -> None:
        try:
            await self.store.save(index, result.mod_times)
        except OSError as exc:
            logger.error("Error saving cache for %s: %s", self.data_dir, exc)
            CACHE_WRITE_ERRORS.labels(namespace=self.store.namespace).inc()
            result.persist_failed = True
            return
        result.persisted = True
        result.persist_failed = False

    def _finish(self, result: SyncResult, start: float) -> SyncResult:
        result.duration_seconds = time.perf_counter() - start
        SYNC_RUNS.labels(mode=result.mode, outcome="skipped" if result.skipped else "ok").inc()
        for kind in ("added", "updated", "removed", "unreadable"):
            count = len(getattr(result, kind))
            if count:
                SYNC_CHANGES.labels(kind=kind).inc(count)
        if not result.skipped:
            INDEX_DOC_COUNT.labels(namespace=self.store.namespace).set(result.document_count)
        return result
