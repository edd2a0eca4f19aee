from sqlalchemy import Column, String, Enum, DateTime, Float, Integer, Text, Index
from models.base import Base, BigIntPK, JSONType, SyncTarget, SyncRunStatus, utcnow
import uuid


class SyncRun(Base):
    """
    Tracks metadata for each non-empty batch sync invocation.

    Purpose:
    - Audit trail of what each tick read, dropped, loaded and retired
    - Links a warehouse load job back to the queue slice that produced it
    - Error tracking and debugging

    Empty-queue ticks do not write a row.
    """
    __tablename__ = "sync_runs"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    run_id = Column(String(36), default=lambda: str(uuid.uuid4()), unique=True, nullable=False, index=True)

    target = Column(Enum(SyncTarget), nullable=False, index=True)
    status = Column(Enum(SyncRunStatus), default=SyncRunStatus.RUNNING, nullable=False, index=True)

    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Float, nullable=True)

    # Statistics
    entries_read = Column(Integer, default=0)
    records_eligible = Column(Integer, default=0)
    records_transformed = Column(Integer, default=0)
    records_failed = Column(Integer, default=0)
    entries_retired = Column(Integer, default=0)

    # Load tracking
    staged_object = Column(String(1024), nullable=True)
    load_job_id = Column(String(1024), nullable=True)

    # Error tracking
    error_message = Column(Text, nullable=True)
    error_details = Column(JSONType, nullable=True)

    __table_args__ = (
        Index("idx_sync_run_target_started", "target", "started_at"),
    )
