"""
Local NDJSON artifact for one batch sync invocation.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging
import os
import tempfile
import time

from core.exceptions import StagingWriteError
from schemas.warehouse import WarehouseRow

logger = logging.getLogger(__name__)

NDJSON_CONTENT_TYPE = "application/x-ndjson"


@dataclass
class StagedBatch:
    """A written NDJSON file and the object name it will be uploaded as"""
    local_path: str
    object_name: str
    line_count: int

    def remove_local(self) -> None:
        try:
            os.remove(self.local_path)
        except FileNotFoundError:
            pass


def staging_object_name(prefix: str, now_ms: Optional[int] = None) -> str:
    """`<prefix>/sync_<epoch_ms>.ndjson`"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{prefix.rstrip('/')}/sync_{now_ms}.ndjson"


def write_ndjson(
    rows: Sequence[WarehouseRow],
    prefix: str,
    directory: Optional[str] = None,
) -> StagedBatch:
    """
    Write one row per line to a temp file.

    Args:
        rows: Validated warehouse rows
        prefix: Staging prefix of the target (e.g. "sync")
        directory: Temp directory override, system default otherwise

    Raises:
        StagingWriteError: If the file cannot be written
    """
    object_name = staging_object_name(prefix)

    try:
        fd, local_path = tempfile.mkstemp(
            prefix="sync_", suffix=".ndjson", dir=directory
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            for row in rows:
                f.write(row.to_ndjson_line())
                f.write("\n")
    except OSError as e:
        raise StagingWriteError(
            "Failed to write NDJSON batch file",
            context={"object_name": object_name, "rows": len(rows)},
            original_exception=e
        )

    logger.info(f"Wrote {len(rows)} rows to {local_path}")
    return StagedBatch(local_path=local_path, object_name=object_name, line_count=len(rows))
