"""
Sync queue repository.

Entries are only ever inserted (by observers) and deleted (by the batch
sync). Nothing updates them in place.
"""

from datetime import datetime
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, select
import logging

from models.base import SyncTarget, utcnow
from models.sync_queue import SyncQueueEntry

logger = logging.getLogger(__name__)


class SyncQueueRepository:
    """Queue partition of one sync target"""

    def __init__(self, db_session: AsyncSession, target: SyncTarget):
        self.db = db_session
        self.target = target

    def _pending(self):
        return (
            SyncQueueEntry.target == self.target,
            SyncQueueEntry.processed.is_(False),
        )

    async def fetch_unprocessed(self, limit: int = 100) -> List[SyncQueueEntry]:
        """Up to `limit` unprocessed entries, oldest first"""
        result = await self.db.execute(
            select(SyncQueueEntry)
            .where(*self._pending())
            .order_by(SyncQueueEntry.queued_at, SyncQueueEntry.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def has_unprocessed(self, reference_id: str) -> bool:
        result = await self.db.execute(
            select(SyncQueueEntry.id)
            .where(*self._pending(), SyncQueueEntry.reference_id == reference_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def enqueue(self, reference_id: str) -> SyncQueueEntry:
        """Append an entry and commit"""
        entry = SyncQueueEntry(
            target=self.target,
            reference_id=reference_id,
            queued_at=utcnow(),
            processed=False,
            retries=0,
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)

        logger.info(f"Queued {self.target.value}/{reference_id} (entry {entry.id})")
        return entry

    async def enqueue_if_absent(self, reference_id: str) -> Optional[SyncQueueEntry]:
        """
        Append an entry unless an unprocessed one exists for the reference.

        The check and the insert are not atomic; a concurrent writer can still
        produce a duplicate entry, which the batch sync tolerates.
        """
        if await self.has_unprocessed(reference_id):
            logger.info(f"{self.target.value}/{reference_id} already queued, skipping")
            return None
        return await self.enqueue(reference_id)

    async def retire(self, entries: Sequence[SyncQueueEntry]) -> int:
        """
        Delete entries by id and commit.

        Deleting ids that are already gone is a no-op.

        Returns:
            Number of rows actually deleted
        """
        ids = [entry.id for entry in entries]
        if not ids:
            return 0

        result = await self.db.execute(
            delete(SyncQueueEntry)
            .where(SyncQueueEntry.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def count_unprocessed(self) -> int:
        result = await self.db.execute(
            select(func.count(SyncQueueEntry.id)).where(*self._pending())
        )
        return result.scalar_one()

    async def oldest_unprocessed(self) -> Optional[datetime]:
        result = await self.db.execute(
            select(func.min(SyncQueueEntry.queued_at)).where(*self._pending())
        )
        return result.scalar_one_or_none()
