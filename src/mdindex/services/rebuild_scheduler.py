"""Recurring background refresh of the live index."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from datetime import datetime, timedelta, timezone
import logging
from typing import TYPE_CHECKING, Any

from mdindex.observability.metrics import SYNC_RUNS

from .scheduler_protocol import SyncSchedulerProtocol


if TYPE_CHECKING:
    from mdindex.index_handle import IndexHandle
    from mdindex.services.delta_synchronizer import DeltaSynchronizer


logger = logging.getLogger(__name__)

# At most one scheduler is armed per process
_active_holder: dict[str, RebuildScheduler | None] = {"scheduler": None}


def get_active_scheduler() -> RebuildScheduler | None:
    return _active_holder["scheduler"]


class RebuildScheduler(SyncSchedulerProtocol):
    """Re-run the delta synchronizer against a live index at a fixed interval.

    Starting a scheduler cancels whichever scheduler was active before it.
    A non-positive interval disables scheduling; manual triggers still work.
    """

    def __init__(
        self,
        handle: IndexHandle,
        synchronizer: DeltaSynchronizer,
        *,
        interval_hours: float,
    ) -> None:
        self.handle = handle
        self.synchronizer = synchronizer
        self.interval_hours = interval_hours

        self._running = False
        self._scheduler_task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

        self._total_syncs = 0
        self._errors = 0
        self._last_sync_at: datetime | None = None
        self._next_sync_at: datetime | None = None
        self._last_result: dict[str, Any] | None = None

    @property
    def enabled(self) -> bool:
        return self.interval_hours > 0

    @property
    def interval_seconds(self) -> float:
        return self.interval_hours * 3600

    @property
    def running(self) -> bool:
        return self._running and self._scheduler_task is not None and not self._scheduler_task.done()

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "interval_hours": self.interval_hours,
            "running": self.running,
            "total_syncs": self._total_syncs,
            "errors": self._errors,
            "last_sync_at": self._datetime_to_iso(self._last_sync_at),
            "next_sync_at": self._datetime_to_iso(self._next_sync_at),
            "last_result": self._last_result,
            "document_count": self.handle.document_count,
        }

    async def get_status_snapshot(self) -> dict[str, Any]:
        return {"scheduler_running": self.running, "stats": self.stats}

    def start(self) -> bool:
        """Arm the recurring refresh.

        Returns:
            False when the interval is non-positive, True once the loop runs.
        """
        if not self.enabled:
            logger.debug("Rebuild scheduling disabled (interval %.2fh)", self.interval_hours)
            return False
        if self.running:
            return True

        previous = _active_holder["scheduler"]
        if previous is not None and previous is not self:
            previous._cancel()
        _active_holder["scheduler"] = self

        self._stop_event.clear()
        self._running = True
        self._next_sync_at = datetime.now(timezone.utc) + timedelta(seconds=self.interval_seconds)
        self._scheduler_task = asyncio.create_task(self._run_scheduler_loop())
        logger.info(
            "Cache rebuild scheduled every %s hours (next: %s)",
            self.interval_hours,
            self._next_sync_at.isoformat(),
        )
        return True

    async def stop(self) -> None:
        self._stop_event.set()
        task = self._scheduler_task
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
            self._scheduler_task = None
        self._running = False
        self._next_sync_at = None
        if _active_holder["scheduler"] is self:
            _active_holder["scheduler"] = None

    async def trigger_sync(self) -> dict:
        """Refresh immediately; refused while another refresh holds the index."""
        if self.handle.syncing:
            return {"success": False, "message": "Sync already running"}
        return await self._execute_and_record()

    def _cancel(self) -> None:
        self._stop_event.set()
        if self._scheduler_task is not None and not self._scheduler_task.done():
            self._scheduler_task.cancel()
        self._running = False
        self._next_sync_at = None

    async def _run_scheduler_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
                    break
                except asyncio.TimeoutError:
                    pass

                logger.info("Starting scheduled cache rebuild...")
                await self._execute_and_record()
                self._next_sync_at = datetime.now(timezone.utc) + timedelta(seconds=self.interval_seconds)
        except asyncio.CancelledError:  # pragma: no cover - cooperative cancellation
            raise
        finally:
            self._running = False

    async def _execute_and_record(self) -> dict:
        try:
            result = await self.synchronizer.refresh(self.handle)
        except Exception as exc:
            logger.error("Error during cache rebuild: %s", exc, exc_info=True)
            SYNC_RUNS.labels(mode="refresh", outcome="error").inc()
            self._errors += 1
            return {"success": False, "message": f"Cache rebuild error: {exc}"}

        payload = result.to_dict()
        if result.skipped:
            payload["message"] = "Sync already running"
            return payload

        self._total_syncs += 1
        self._last_sync_at = datetime.now(timezone.utc)
        self._last_result = payload
        return payload

    def _datetime_to_iso(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return value.isoformat()
