"""
SQLAlchemy ORM models for the queue and source stores.

Models:
    base: Declarative base, portable column types and shared enums
          (SyncTarget, SyncRunStatus)
    source_document: Operational documents keyed by (collection, doc_id)
    sync_queue: Sync queue entries written by observers, drained by the batch sync
    sync_run: Batch sync invocation tracking and metrics

Usage:
    from models import SyncQueueEntry, SourceDocument, SyncRun
    from models.base import SyncTarget, SyncRunStatus

Example:
    entry = SyncQueueEntry(target=SyncTarget.ORDERS, reference_id="order-1")
    session.add(entry)
    await session.commit()
"""

from models.base import Base, SyncTarget, SyncRunStatus
from models.source_document import SourceDocument
from models.sync_queue import SyncQueueEntry
from models.sync_run import SyncRun

__all__ = [
    "Base",
    "SyncTarget",
    "SyncRunStatus",
    "SourceDocument",
    "SyncQueueEntry",
    "SyncRun",
]
