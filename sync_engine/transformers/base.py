"""
Base class for record transformers
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List
import json

from models.source_document import SourceDocument
from schemas.warehouse import WarehouseRow
from sync_engine.timestamps import isoformat_utc


def _json_default(value: Any):
    if isinstance(value, datetime):
        return isoformat_utc(value)
    return str(value)


class RecordTransformer(ABC):
    """
    Map one source document to one warehouse row.

    Transformers never write to the source store. Given the same document
    (and registry state) they produce the same row, byte for byte.
    """

    @abstractmethod
    async def transform(self, document: SourceDocument) -> WarehouseRow:
        """
        Build the warehouse row for a document.

        Raises:
            RecordTransformError: If a required column cannot be derived
        """
        pass

    @staticmethod
    def to_blob(value: Any) -> str:
        """Compact JSON text for nested structures stored as STRING columns"""
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)

    @staticmethod
    def to_list(value: Any) -> List[Any]:
        """Lists are kept, comma-separated strings split, anything else is empty"""
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return []

    @staticmethod
    def to_text(value: Any, default=None):
        if value is None or value == "":
            return default
        return str(value)
