"""
Health check endpoint with database and last sync run status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, text
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, SyncRunInfo
from models.base import SyncTarget, SyncRunStatus
from models.sync_run import SyncRun
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Last batch sync run of every target
    """
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    last_runs = []
    failed_targets = 0

    if db_connected:
        try:
            for target in SyncTarget:
                result = await db.execute(
                    select(SyncRun)
                    .where(SyncRun.target == target)
                    .order_by(SyncRun.started_at.desc(), SyncRun.id.desc())
                    .limit(1)
                )
                run = result.scalar_one_or_none()
                if run is None:
                    continue

                if run.status == SyncRunStatus.FAILED:
                    failed_targets += 1
                last_runs.append(SyncRunInfo.model_validate(run))
        except Exception as e:
            logger.error(f"Failed to fetch sync runs: {str(e)}")

    return HealthCheckResponse(
        database_connected=db_connected,
        last_runs=last_runs,
        failed_targets=failed_targets,
    )
