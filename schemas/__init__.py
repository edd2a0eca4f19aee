"""
Pydantic schemas for warehouse rows and the HTTP surface.

Schemas:
    warehouse: Warehouse row models and the pinned destination table schemas
    api: Health, queue status, event and sync endpoint models

Usage:
    from schemas.warehouse import OrderWarehouseRow, ORDERS_TABLE_SCHEMA
    from schemas.api import HealthCheckResponse, QueueStatusResponse

Validation:
    Warehouse rows are frozen once built; the transformers do all permissive
    parsing up front so a row that validates is a row the warehouse accepts.
"""

__all__ = [
    "ColumnSpec",
    "OrderWarehouseRow",
    "DeliveryRunWarehouseRow",
    "ORDERS_TABLE_SCHEMA",
    "DELIVERY_RUNS_TABLE_SCHEMA",
    "HealthCheckResponse",
    "QueueStatusResponse",
    "WriteEvent",
    "EventResponse",
    "SyncRunResponse",
]
