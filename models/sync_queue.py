from sqlalchemy import Column, String, Enum, DateTime, Boolean, Integer, Index
from models.base import Base, BigIntPK, SyncTarget, utcnow


class SyncQueueEntry(Base):
    """
    Durable pointer: "record X became sync-eligible at time T".

    Purpose:
    - Decouple state transitions from the warehouse load
    - Let the batch sync drain work in bounded, ordered slices

    Design:
    - Written by the event observers, deleted by the batch sync
    - Never updated in place; ``processed`` stays False for the entry's life
    - At most one unprocessed entry per (target, reference_id) is a
      best-effort invariant kept by the observer, not a unique index
    - ``retries`` is carried for compatibility and never incremented
    """
    __tablename__ = "sync_queue"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)

    target = Column(Enum(SyncTarget), nullable=False, index=True)
    reference_id = Column(String(255), nullable=False, index=True)

    queued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    processed = Column(Boolean, nullable=False, default=False)
    retries = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_sync_queue_pending", "target", "processed", "queued_at"),
        Index("idx_sync_queue_reference", "target", "reference_id", "processed"),
    )

    def __repr__(self) -> str:
        return (
            f"<SyncQueueEntry id={self.id} target={self.target} "
            f"reference_id={self.reference_id} processed={self.processed}>"
        )
