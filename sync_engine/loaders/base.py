"""
Abstract warehouse bulk-load sink
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from schemas.warehouse import ColumnSpec


@dataclass(frozen=True)
class LoadJobHandle:
    """Acknowledgement of a submitted load job; completion is never awaited"""
    job_id: str
    table_id: str
    source_uri: str
    location: Optional[str] = None


class WarehouseLoader(ABC):
    """Append-only bulk loads from staged NDJSON into a pinned-schema table"""

    @abstractmethod
    async def submit_append_load(
        self,
        source_uri: str,
        table_id: str,
        schema: Sequence[ColumnSpec],
    ) -> LoadJobHandle:
        """
        Submit an append load job and return as soon as it is accepted.

        Raises:
            LoadSubmissionError: If the warehouse does not accept the job
        """
        pass
