from sqlalchemy import Column, String, DateTime, Index
from models.base import Base, JSONType, utcnow


class SourceDocument(Base):
    """
    Operational documents (orders, delivery runs, vehicles) as stored by the app.

    Purpose:
    - Read-only source for the batch sync
    - Keeps the payload exactly as the mobile app wrote it

    Design Decisions:
    - One table for every collection, keyed by (collection, doc_id)
    - Free-form JSON payload; field shapes vary between app versions
      (items as list or comma string, timestamps as objects, strings or
      epoch millis), so no columns are derived from it
    """
    __tablename__ = "source_documents"

    collection = Column(String(100), primary_key=True)
    doc_id = Column(String(255), primary_key=True)

    data = Column(JSONType, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_source_collection_updated", "collection", "updated_at"),
    )

    @property
    def status(self):
        return (self.data or {}).get("status")

    def __repr__(self) -> str:
        return f"<SourceDocument {self.collection}/{self.doc_id}>"
