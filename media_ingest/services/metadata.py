"""
Best-effort media library catalog writes.

A catalog row describes an uploaded original: name, public URL, type, size,
pixel dimensions and thumbnail URL. The write runs as a detached asyncio task
after the upload has already succeeded. Its failure is logged, never retried
and never reported to whoever triggered the upload.
"""
import asyncio
from typing import Optional, Set

import structlog

from ..catalog.store import CatalogStore
from ..config import settings
from ..schemas.media import CatalogEntry

logger = structlog.get_logger(__name__)


class MetadataRecorder:
    def __init__(self, store: CatalogStore, table: Optional[str] = None):
        self.store = store
        self.table = table or settings.catalog_table
        self._pending: Set[asyncio.Task] = set()

    def record(self, entry: CatalogEntry) -> None:
        """Insert the row synchronously; errors propagate to the caller."""
        self.store.insert_row(self.table, entry.to_row())
        logger.info("Added to media library", table=self.table, file_path=entry.file_path)

    def record_in_background(self, entry: CatalogEntry) -> asyncio.Task:
        """Schedule the insert on the running loop without awaiting it."""
        task = asyncio.get_running_loop().create_task(asyncio.to_thread(self.record, entry))
        self._pending.add(task)
        task.add_done_callback(lambda t: self._finished(t, entry))
        return task

    def _finished(self, task: asyncio.Task, entry: CatalogEntry) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Media library write cancelled", table=self.table, file_path=entry.file_path)
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "Could not add to media library",
                table=self.table,
                file_path=entry.file_path,
                error=str(exc),
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def wait_for_background(self) -> None:
        """Wait until every scheduled write has finished (successfully or not)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
