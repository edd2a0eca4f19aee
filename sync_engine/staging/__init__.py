from sync_engine.staging.base import StagingStore
from sync_engine.staging.ndjson import NDJSON_CONTENT_TYPE, StagedBatch, staging_object_name, write_ndjson
from sync_engine.staging.gcs_store import GCSStagingStore

__all__ = [
    "StagingStore",
    "GCSStagingStore",
    "StagedBatch",
    "NDJSON_CONTENT_TYPE",
    "staging_object_name",
    "write_ndjson",
]
