"""Synchronization and scheduling services."""

from .delta_synchronizer import DeltaSynchronizer, SyncResult
from .rebuild_scheduler import RebuildScheduler
from .scheduler_protocol import SyncSchedulerProtocol


__all__ = [
    "DeltaSynchronizer",
    "RebuildScheduler",
    "SyncResult",
    "SyncSchedulerProtocol",
]
