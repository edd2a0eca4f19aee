"""
Event observers: turn source record writes into sync queue entries.
"""

from typing import Any, Dict, Mapping, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.exceptions import EnqueueError
from models.base import SyncTarget
from sync_engine.queue import SyncQueueRepository
from sync_engine.targets import TargetDefinition, build_targets

logger = logging.getLogger(__name__)


class SyncEventObserver:
    """
    Enqueue a record when a write moves it into a sync-eligible status.

    Rules:
    - Deletes (no `after` snapshot) are ignored
    - Targets with `require_status_change` only react when the status
      actually changed between `before` and `after`
    - The new status must be one of the target's eligible statuses
    - At most one unprocessed entry per record (best effort)
    """

    def __init__(
        self,
        db_session: AsyncSession,
        targets: Optional[Mapping[SyncTarget, TargetDefinition]] = None
    ):
        self.db = db_session
        self.targets = targets if targets is not None else build_targets()

    async def handle_write(
        self,
        target: SyncTarget,
        reference_id: str,
        before: Optional[Dict[str, Any]],
        after: Optional[Dict[str, Any]],
    ) -> bool:
        """
        React to one source record write.

        Returns:
            True if a queue entry was created

        Raises:
            EnqueueError: If the dedupe check or the insert fails
        """
        definition = self.targets[target]

        if after is None:
            logger.debug(f"{target.value}/{reference_id} deleted, ignoring")
            return False

        new_status = after.get("status")
        old_status = (before or {}).get("status")

        if definition.require_status_change and old_status == new_status:
            return False

        if not definition.is_eligible(new_status):
            return False

        logger.info(
            f"{target.value}/{reference_id} status changed: {old_status} -> {new_status}"
        )

        queue = SyncQueueRepository(self.db, target)
        try:
            entry = await queue.enqueue_if_absent(reference_id)
        except Exception as e:
            await self.db.rollback()
            raise EnqueueError(
                "Failed to add record to sync queue",
                context={"target": target.value, "reference_id": reference_id},
                original_exception=e
            )

        return entry is not None

    async def on_order_written(self, order_id, before, after) -> bool:
        return await self.handle_write(SyncTarget.ORDERS, order_id, before, after)

    async def on_delivery_run_written(self, run_id, before, after) -> bool:
        return await self.handle_write(SyncTarget.DELIVERY_RUNS, run_id, before, after)
