# ============================================================================
# File: sync_engine/runner.py
# Description: Batch sync orchestrator: queue -> transform -> stage -> load
# ============================================================================
"""
Batch Sync Runner - drains one target's sync queue into the warehouse.

This module provides the per-invocation orchestration with:
- Bounded, oldest-first reads of the sync queue
- Self-healing retirement of entries whose record is missing or not terminal
- Per-record transform isolation (one bad record never blocks the batch)
- Append-only, explicit-schema bulk load submission (fire-and-forget)
- At-least-once delivery: any abort before the load is submitted leaves
  the queue untouched for the next tick
"""

from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
import logging
import uuid

from core.exceptions import (
    SyncException,
    QueueReadError,
    QueueRetirementError,
    SourceFetchError,
    StagingError,
    StagingUploadError,
    LoadSubmissionError,
)
from models.base import SyncRunStatus, utcnow
from models.source_document import SourceDocument
from models.sync_queue import SyncQueueEntry
from models.sync_run import SyncRun
from schemas.warehouse import WarehouseRow
from sync_engine.loaders.base import LoadJobHandle, WarehouseLoader
from sync_engine.queue import SyncQueueRepository
from sync_engine.sources import SourceDocumentRepository
from sync_engine.staging.base import StagingStore
from sync_engine.staging.ndjson import StagedBatch, write_ndjson
from sync_engine.targets import TargetDefinition

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class BatchSyncRunner:
    """
    Batch sync orchestrator for one target.

    Responsibilities:
    - Read a bounded slice of unprocessed queue entries
    - Resolve and filter the referenced source records
    - Transform, stage and submit one append load per invocation
    - Retire the slice and clean up the staged artifact
    - Record a sync run row for every non-empty invocation
    """

    def __init__(
        self,
        db_session: AsyncSession,
        target: TargetDefinition,
        staging_store: StagingStore,
        warehouse_loader: WarehouseLoader,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.db = db_session
        self.target = target
        self.staging_store = staging_store
        self.warehouse_loader = warehouse_loader
        self.batch_size = batch_size

        self.queue = SyncQueueRepository(db_session, target.target)
        self.sources = SourceDocumentRepository(db_session, target.source_collection)

    async def run(self) -> Dict[str, Any]:
        """
        Run one batch sync pass.

        Pipeline phases:
        1. Read queue - up to batch_size entries, oldest first
        2. Resolve - fetch referenced records, keep sync-eligible ones
        3. Transform - map each record to a warehouse row, isolating failures
        4. Stage + load - write NDJSON, upload, submit the append load
        5. Retire - delete every entry of the slice
        6. Cleanup - delete the staged object

        Returns:
            Dictionary with run statistics:
            - status: "empty", "skipped", "partial" or "success"
            - entries_read / records_eligible / records_transformed /
              records_failed / entries_retired
            - load_job_id, staged_object (when a load was submitted)
            - error_details: per-record transform failures (if any)

        Raises:
            QueueReadError: If the queue cannot be read
            SourceFetchError: If the referenced records cannot be read
            StagingError: If the batch file cannot be written or uploaded
            LoadSubmissionError: If the warehouse rejects the load job
            QueueRetirementError: If the slice cannot be deleted after the load
            SyncException: For any other failure
        """
        stats = self._empty_stats()
        error_details: List[Dict[str, Any]] = []
        run_id: Optional[str] = None
        started_at = utcnow()

        try:
            # --------------------------------------------------
            # PHASE 1: READ QUEUE
            # --------------------------------------------------
            logger.info(f"Starting batch sync for {self.target.target.value}")

            try:
                entries = await self.queue.fetch_unprocessed(self.batch_size)
            except Exception as e:
                raise QueueReadError(
                    "Failed to read unprocessed queue entries",
                    context={"target": self.target.target.value, "batch_size": self.batch_size},
                    original_exception=e
                )

            if not entries:
                logger.info(f"No entries to sync, {self.target.target.value} queue is empty")
                return self._result("empty", stats)

            stats["entries_read"] = len(entries)
            logger.info(f"Found {len(entries)} queue entries to sync")

            run_id = await self._start_run(started_at, len(entries))

            # --------------------------------------------------
            # PHASE 2: RESOLVE SOURCE RECORDS
            # --------------------------------------------------
            eligible = await self._resolve_eligible(entries)
            stats["records_eligible"] = len(eligible)

            if not eligible:
                logger.info(
                    f"No sync-eligible {self.target.source_collection} records in queue entries"
                )
                stats["entries_retired"] = await self._retire(entries)
                return await self._finish(run_id, started_at, SyncRunStatus.SKIPPED, stats)

            # --------------------------------------------------
            # PHASE 3: TRANSFORM
            # --------------------------------------------------
            rows = await self._transform_all(eligible, error_details)
            stats["records_transformed"] = len(rows)
            stats["records_failed"] = len(error_details)

            logger.info(
                f"Transform complete: {len(rows)} succeeded, {len(error_details)} failed"
            )

            if not rows:
                logger.warning("No rows to load (all transforms failed)")
                stats["entries_retired"] = await self._retire(entries)
                return await self._finish(
                    run_id, started_at, SyncRunStatus.PARTIAL, stats, error_details
                )

            # --------------------------------------------------
            # PHASE 4: STAGE + SUBMIT LOAD
            # --------------------------------------------------
            staged = write_ndjson(rows, self.target.staging_prefix)
            stats["staged_object"] = staged.object_name

            try:
                handle = await self._stage_and_submit(staged)
            finally:
                staged.remove_local()

            stats["load_job_id"] = handle.job_id

            # --------------------------------------------------
            # PHASE 5: RETIRE QUEUE ENTRIES
            # --------------------------------------------------
            try:
                stats["entries_retired"] = await self._retire(entries)
            except QueueRetirementError:
                await self._discard_staged(staged.object_name)
                raise

            # --------------------------------------------------
            # PHASE 6: DELETE STAGED OBJECT
            # --------------------------------------------------
            await self._discard_staged(staged.object_name)

            status = SyncRunStatus.SUCCESS if not error_details else SyncRunStatus.PARTIAL
            result = await self._finish(run_id, started_at, status, stats, error_details)

            logger.info(
                f"Batch sync completed: {result['status']} - "
                f"Read: {stats['entries_read']}, Loaded: {stats['records_transformed']}, "
                f"Failed: {stats['records_failed']}, Retired: {stats['entries_retired']}"
            )
            return result

        except (QueueReadError, SourceFetchError, StagingError,
                LoadSubmissionError, QueueRetirementError) as e:
            logger.error(
                f"Batch sync failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            await self.db.rollback()
            await self._fail_run(run_id, started_at, stats, e.message, e.to_dict())
            raise

        except Exception as e:
            logger.exception("Unexpected error in batch sync")
            await self.db.rollback()
            await self._fail_run(run_id, started_at, stats, str(e), None)

            raise SyncException(
                "Unexpected error in batch sync",
                context={"target": self.target.target.value, **self._counters(stats)},
                original_exception=e
            )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def _resolve_eligible(self, entries: Sequence[SyncQueueEntry]) -> List[SourceDocument]:
        """Referenced records whose current status is sync-eligible, in queue order"""
        reference_ids = list(dict.fromkeys(entry.reference_id for entry in entries))

        try:
            documents = await self.sources.get_many(reference_ids)
        except Exception as e:
            raise SourceFetchError(
                "Failed to fetch referenced source records",
                context={
                    "collection": self.target.source_collection,
                    "reference_count": len(reference_ids)
                },
                original_exception=e
            )

        eligible = []
        for reference_id in reference_ids:
            document = documents.get(reference_id)
            if document is None:
                logger.warning(
                    f"{self.target.source_collection}/{reference_id} not found, dropping"
                )
                continue
            if not self.target.is_eligible(document.status):
                logger.info(
                    f"{self.target.source_collection}/{reference_id} has status "
                    f"'{document.status}', dropping"
                )
                continue
            eligible.append(document)

        return eligible

    async def _transform_all(
        self,
        documents: Sequence[SourceDocument],
        error_details: List[Dict[str, Any]],
    ) -> List[WarehouseRow]:
        transformer = self.target.build_transformer(self.db)
        rows = []

        for document in documents:
            try:
                rows.append(await transformer.transform(document))
            except Exception as e:
                error_detail = {
                    "phase": "transform",
                    "reference_id": document.doc_id,
                    "error_type": type(e).__name__,
                    "error_message": getattr(e, "message", str(e))
                }
                error_details.append(error_detail)

                logger.warning(
                    f"Transform failed for {self.target.source_collection}/{document.doc_id}: {str(e)}",
                    extra={"error_context": error_detail}
                )

        return rows

    async def _stage_and_submit(self, staged: StagedBatch) -> LoadJobHandle:
        try:
            source_uri = await self.staging_store.upload(staged.local_path, staged.object_name)
        except StagingError:
            raise
        except Exception as e:
            raise StagingUploadError(
                "Failed to upload batch file",
                context={"object_name": staged.object_name},
                original_exception=e
            )

        try:
            return await self.warehouse_loader.submit_append_load(
                source_uri, self.target.table_id, self.target.schema
            )
        except Exception as e:
            await self._discard_staged(staged.object_name)
            if isinstance(e, LoadSubmissionError):
                raise
            raise LoadSubmissionError(
                "Failed to submit warehouse load job",
                context={"table_id": self.target.table_id, "source_uri": source_uri},
                original_exception=e
            )

    async def _retire(self, entries: Sequence[SyncQueueEntry]) -> int:
        try:
            retired = await self.queue.retire(entries)
        except Exception as e:
            raise QueueRetirementError(
                "Failed to delete processed queue entries",
                context={"target": self.target.target.value, "entries": len(entries)},
                original_exception=e
            )

        logger.info(f"Deleted {retired} entries from {self.target.target.value} sync queue")
        return retired

    async def _discard_staged(self, object_name: str) -> None:
        """Delete the staged object; failures are logged, never raised"""
        try:
            await self.staging_store.delete(object_name)
        except Exception as e:
            logger.warning(f"Failed to delete staged object {object_name}: {str(e)}")

    # ------------------------------------------------------------------
    # Sync run bookkeeping
    # ------------------------------------------------------------------

    async def _start_run(self, started_at, entries_read: int) -> str:
        run_id = str(uuid.uuid4())
        self.db.add(SyncRun(
            run_id=run_id,
            target=self.target.target,
            status=SyncRunStatus.RUNNING,
            started_at=started_at,
            entries_read=entries_read,
        ))
        await self.db.commit()
        return run_id

    async def _update_run(self, run_id: str, started_at, **values) -> None:
        completed_at = utcnow()
        await self.db.execute(
            update(SyncRun)
            .where(SyncRun.run_id == run_id)
            .values(
                completed_at=completed_at,
                duration_seconds=(completed_at - started_at).total_seconds(),
                **values
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()

    async def _finish(
        self,
        run_id: str,
        started_at,
        status: SyncRunStatus,
        stats: Dict[str, Any],
        error_details: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        await self._update_run(
            run_id,
            started_at,
            status=status,
            staged_object=stats["staged_object"],
            load_job_id=stats["load_job_id"],
            error_message=(
                f"{len(error_details)} records failed" if error_details else None
            ),
            error_details=error_details or None,
            **self._counters(stats)
        )

        result = self._result(status.value, stats)
        result["run_id"] = run_id
        if error_details:
            result["error_details"] = error_details
        return result

    async def _fail_run(
        self,
        run_id: Optional[str],
        started_at,
        stats: Dict[str, Any],
        error_message: str,
        error_context: Optional[Dict[str, Any]],
    ) -> None:
        if run_id is None:
            return
        try:
            await self._update_run(
                run_id,
                started_at,
                status=SyncRunStatus.FAILED,
                staged_object=stats["staged_object"],
                load_job_id=stats["load_job_id"],
                error_message=error_message,
                error_details=[error_context] if error_context else None,
                **self._counters(stats)
            )
        except Exception:
            logger.exception(f"Failed to mark sync run {run_id} as failed")
            await self.db.rollback()

    # ------------------------------------------------------------------
    # Result helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "entries_read": 0,
            "records_eligible": 0,
            "records_transformed": 0,
            "records_failed": 0,
            "entries_retired": 0,
            "load_job_id": None,
            "staged_object": None,
        }

    @staticmethod
    def _counters(stats: Dict[str, Any]) -> Dict[str, int]:
        return {
            key: stats[key]
            for key in (
                "entries_read",
                "records_eligible",
                "records_transformed",
                "records_failed",
                "entries_retired",
            )
        }

    def _result(self, status: str, stats: Dict[str, Any]) -> Dict[str, Any]:
        return {"status": status, "target": self.target.target.value, **stats}
