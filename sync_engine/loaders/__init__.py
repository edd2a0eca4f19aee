from sync_engine.loaders.base import LoadJobHandle, WarehouseLoader
from sync_engine.loaders.bigquery_loader import BigQueryLoader, to_schema_fields

__all__ = ["LoadJobHandle", "WarehouseLoader", "BigQueryLoader", "to_schema_fields"]
