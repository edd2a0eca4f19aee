"""
Manual batch sync trigger
"""

from typing import Dict
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_staging_store, get_targets, get_warehouse_loader
from core.config import settings
from core.exceptions import RetryableError, SyncException
from models.base import SyncTarget
from schemas.api import SyncRunResponse
from sync_engine.loaders import WarehouseLoader
from sync_engine.runner import BatchSyncRunner
from sync_engine.staging import StagingStore
from sync_engine.targets import TargetDefinition
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post("/{target}", response_model=SyncRunResponse)
async def run_sync(
    target: SyncTarget,
    db: AsyncSession = Depends(get_db),
    staging_store: StagingStore = Depends(get_staging_store),
    warehouse_loader: WarehouseLoader = Depends(get_warehouse_loader),
    targets: Dict[SyncTarget, TargetDefinition] = Depends(get_targets),
):
    """Run one batch sync pass for a target now, outside the schedule"""
    runner = BatchSyncRunner(
        db_session=db,
        target=targets[target],
        staging_store=staging_store,
        warehouse_loader=warehouse_loader,
        batch_size=settings.SYNC_BATCH_SIZE,
    )

    try:
        result = await runner.run()
    except RetryableError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except SyncException as e:
        raise HTTPException(status_code=500, detail=e.message)

    return SyncRunResponse(**result)
