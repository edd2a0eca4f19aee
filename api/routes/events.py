"""
Observer entry point: the operational store reports record writes here
"""

from typing import Dict
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_targets
from core.exceptions import EnqueueError
from models.base import SyncTarget
from schemas.api import EventResponse, WriteEvent
from sync_engine.observers import SyncEventObserver
from sync_engine.targets import TargetDefinition
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/{target}/{reference_id}", response_model=EventResponse)
async def record_written(
    target: SyncTarget,
    reference_id: str,
    event: WriteEvent,
    db: AsyncSession = Depends(get_db),
    targets: Dict[SyncTarget, TargetDefinition] = Depends(get_targets),
):
    """
    Handle one source record write.

    Enqueues the record when it reached a sync-eligible status and is not
    already queued. Deletes (no `after`) are accepted and ignored.
    """
    observer = SyncEventObserver(db, targets)

    try:
        enqueued = await observer.handle_write(target, reference_id, event.before, event.after)
    except EnqueueError as e:
        logger.error(
            f"Enqueue failed for {target.value}/{reference_id}: {e.message}",
            extra={"error_context": e.to_dict()}
        )
        raise HTTPException(status_code=503, detail="Sync queue unavailable")

    return EventResponse(target=target, reference_id=reference_id, enqueued=enqueued)
