"""Interface for background index refresh schedulers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SyncSchedulerProtocol(Protocol):
    """Scheduler surface consumed by the service wrapping the core."""

    @property
    def running(self) -> bool:  # pragma: no cover - Protocol only
        """Return True while a background refresh loop is active."""

    @property
    def stats(self) -> dict[str, object]:  # pragma: no cover - Protocol only
        """Return scheduler metrics suitable for status endpoints."""

    def start(self) -> bool:  # pragma: no cover - Protocol only
        """Arm the recurring refresh; return False when scheduling is disabled."""

    async def stop(self) -> None:  # pragma: no cover - Protocol only
        """Cancel the pending refresh and release resources."""

    async def trigger_sync(self) -> dict:  # pragma: no cover - Protocol only
        """Run a refresh now and return structured status."""
