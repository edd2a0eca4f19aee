"""
FastAPI dependencies; overridden with fakes in tests
"""

from functools import lru_cache
from typing import AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import async_session_maker
from models.base import SyncTarget
from sync_engine.loaders import BigQueryLoader, WarehouseLoader
from sync_engine.staging import GCSStagingStore, StagingStore
from sync_engine.targets import TargetDefinition, build_targets


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session"""
    async with async_session_maker() as session:
        yield session


@lru_cache
def get_staging_store() -> StagingStore:
    return GCSStagingStore(settings.STAGING_BUCKET, project=settings.GCP_PROJECT)


@lru_cache
def get_warehouse_loader() -> WarehouseLoader:
    return BigQueryLoader(settings.WAREHOUSE_DATASET, project=settings.GCP_PROJECT)


@lru_cache
def get_targets() -> Dict[SyncTarget, TargetDefinition]:
    return build_targets(settings)
