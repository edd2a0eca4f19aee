"""
Sync queue status endpoint
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db
from schemas.api import QueueStatusResponse, QueueTargetStatus
from models.base import SyncTarget
from sync_engine.queue import SyncQueueRepository
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Queue"])


@router.get("/queue", response_model=QueueStatusResponse)
async def queue_status(
    sample: int = Query(5, ge=0, le=100, description="Reference ids to list per target"),
    db: AsyncSession = Depends(get_db)
):
    """
    Unprocessed backlog per sync target.

    Returns:
    - Unprocessed entry count
    - Oldest queued_at (how far behind the batch sync is)
    - A sample of queued reference ids, oldest first
    """
    request_id = f"req_{uuid.uuid4().hex[:12]}"
    logger.info(f"[{request_id}] GET /queue")

    targets = []
    for target in SyncTarget:
        queue = SyncQueueRepository(db, target)
        entries = await queue.fetch_unprocessed(sample) if sample else []
        targets.append(QueueTargetStatus(
            target=target,
            unprocessed=await queue.count_unprocessed(),
            oldest_queued_at=await queue.oldest_unprocessed(),
            sample_reference_ids=[entry.reference_id for entry in entries],
        ))

    return QueueStatusResponse(
        total_unprocessed=sum(t.unprocessed for t in targets),
        targets=targets,
    )
