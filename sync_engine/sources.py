"""
Read access to the operational document store.
"""

from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from models.source_document import SourceDocument

logger = logging.getLogger(__name__)


class SourceDocumentRepository:
    """
    Documents of one collection (orders, delivery runs, vehicles).

    The sync engine only reads through this repository; `put` exists for the
    operational app side (and fixtures) and commits immediately.
    """

    def __init__(self, db_session: AsyncSession, collection: str):
        self.db = db_session
        self.collection = collection

    async def get(self, doc_id: str) -> Optional[SourceDocument]:
        result = await self.db.execute(
            select(SourceDocument).where(
                SourceDocument.collection == self.collection,
                SourceDocument.doc_id == doc_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_many(self, doc_ids: Iterable[str]) -> Dict[str, SourceDocument]:
        """
        Fetch several documents at once.

        Returns:
            Mapping doc_id -> document; ids with no document are absent
        """
        ids = list(dict.fromkeys(doc_ids))
        if not ids:
            return {}

        result = await self.db.execute(
            select(SourceDocument).where(
                SourceDocument.collection == self.collection,
                SourceDocument.doc_id.in_(ids),
            )
        )
        return {doc.doc_id: doc for doc in result.scalars().all()}

    async def put(self, doc_id: str, data: Dict[str, Any]) -> SourceDocument:
        """Create or replace a document payload"""
        doc = await self.get(doc_id)
        if doc is None:
            doc = SourceDocument(collection=self.collection, doc_id=doc_id, data=dict(data))
            self.db.add(doc)
        else:
            doc.data = dict(data)

        await self.db.commit()
        return doc

    async def list_ids_by_status(
        self,
        statuses: Iterable[str],
        limit: Optional[int] = None,
    ) -> List[str]:
        """Ids of documents whose status is one of `statuses`, in id order"""
        stmt = (
            select(SourceDocument.doc_id)
            .where(
                SourceDocument.collection == self.collection,
                SourceDocument.data["status"].as_string().in_(list(statuses)),
            )
            .order_by(SourceDocument.doc_id)
        )
        if limit:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
