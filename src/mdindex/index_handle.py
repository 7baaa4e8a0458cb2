"""Process-lifetime handle owning the live index."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mdindex.config import Settings
from mdindex.search.inverted_index import InvertedIndex


if TYPE_CHECKING:
    from mdindex.services.rebuild_scheduler import RebuildScheduler


logger = logging.getLogger(__name__)


class IndexHandle:
    """Explicit reference to the live index, shared by queries and refreshes.

    Synchronization never mutates ``index`` in place: it builds a scratch copy
    and calls :meth:`swap`, so a query always sees one consistent index.
    ``lock`` guards against overlapping synchronization runs.
    """

    def __init__(
        self,
        data_dir: Path,
        index: InvertedIndex,
        mod_times: dict[str, float],
        *,
        settings: Settings,
        persist_pending: bool = False,
    ) -> None:
        self.data_dir = data_dir
        self.settings = settings
        self.index = index
        self.mod_times = dict(mod_times)
        self.persist_pending = persist_pending
        self.lock = asyncio.Lock()
        self.scheduler: RebuildScheduler | None = None

    @property
    def document_count(self) -> int:
        return len(self.index)

    @property
    def syncing(self) -> bool:
        return self.lock.locked()

    def swap(self, index: InvertedIndex, mod_times: dict[str, float]) -> None:
        """Publish a fully synchronized index in a single assignment."""
        self.index = index
        self.mod_times = dict(mod_times)

    async def close(self) -> None:
        """Stop the rebuild scheduler, if one is armed."""
        if self.scheduler is not None:
            await self.scheduler.stop()
            self.scheduler = None
