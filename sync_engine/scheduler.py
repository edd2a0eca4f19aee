import logging
from typing import Dict, Mapping, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker
from core.config import Settings, settings as default_settings
from core.database import build_engine, build_session_maker
from models.base import SyncTarget
from sync_engine.loaders import BigQueryLoader, WarehouseLoader
from sync_engine.runner import BatchSyncRunner
from sync_engine.staging import GCSStagingStore, StagingStore
from sync_engine.targets import TargetDefinition, build_targets

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Run the batch sync for every target on a fixed interval"""

    def __init__(
        self,
        settings: Settings = default_settings,
        session_maker: Optional[async_sessionmaker] = None,
        staging_store: Optional[StagingStore] = None,
        warehouse_loader: Optional[WarehouseLoader] = None,
        targets: Optional[Mapping[SyncTarget, TargetDefinition]] = None,
    ):
        self.settings = settings
        self.scheduler = AsyncIOScheduler(timezone=settings.SYNC_TIMEZONE)

        if session_maker is None:
            self.engine = build_engine(settings.DATABASE_URL)
            session_maker = build_session_maker(self.engine)
        else:
            self.engine = None
        self.SessionLocal = session_maker

        self.staging_store = staging_store or GCSStagingStore(
            settings.STAGING_BUCKET, project=settings.GCP_PROJECT
        )
        self.warehouse_loader = warehouse_loader or BigQueryLoader(
            settings.WAREHOUSE_DATASET, project=settings.GCP_PROJECT
        )
        self.targets: Dict[SyncTarget, TargetDefinition] = dict(
            targets if targets is not None else build_targets(settings)
        )

    async def run_sync_job(self, target: SyncTarget) -> Optional[dict]:
        """Job to run one batch sync pass for a target"""
        logger.info(f"Scheduler: Starting {target.value} sync job")
        async with self.SessionLocal() as session:
            try:
                runner = BatchSyncRunner(
                    db_session=session,
                    target=self.targets[target],
                    staging_store=self.staging_store,
                    warehouse_loader=self.warehouse_loader,
                    batch_size=self.settings.SYNC_BATCH_SIZE,
                )
                return await runner.run()

            except Exception as e:
                # Queue entries stay queued; the next tick retries them
                logger.error(f"Scheduler: {target.value} sync job failed - {e}")
                return None

    async def run_all(self) -> Dict[str, Optional[dict]]:
        """One pass over every target, sequentially"""
        return {
            target.value: await self.run_sync_job(target)
            for target in self.targets
        }

    def start(self):
        """Start the scheduler"""
        for target in self.targets:
            self.scheduler.add_job(
                self.run_sync_job,
                trigger=IntervalTrigger(minutes=self.settings.SYNC_INTERVAL_MINUTES),
                args=[target],
                id=f"sync_{target.value}",
                replace_existing=True,
            )
        self.scheduler.start()
        logger.info(
            f"Sync scheduler started ({len(self.targets)} targets, "
            f"every {self.settings.SYNC_INTERVAL_MINUTES} min)"
        )

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Sync scheduler stopped")
