"""
Warehouse row schemas and the pinned destination table schemas.

The row models and the column lists describe the same contract: every row
field is a column, in column order. Loads never auto-detect, so the column
lists here are the only source of the warehouse schema.
"""

from datetime import datetime
from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColumnSpec(NamedTuple):
    """One column of a destination table"""
    name: str
    field_type: str
    mode: str = "NULLABLE"


ORDERS_TABLE_SCHEMA: List[ColumnSpec] = [
    ColumnSpec("order_id", "STRING", "REQUIRED"),
    ColumnSpec("order_number", "STRING"),
    ColumnSpec("customer_name", "STRING"),
    ColumnSpec("customer_phone", "STRING"),
    ColumnSpec("address", "STRING"),
    ColumnSpec("region", "STRING"),
    ColumnSpec("pharmacy_unit_id", "STRING"),
    ColumnSpec("delivery_man", "STRING"),
    ColumnSpec("delivery_man_name", "STRING"),
    ColumnSpec("status", "STRING"),
    ColumnSpec("price_number", "FLOAT64"),
    ColumnSpec("rating", "FLOAT64"),
    ColumnSpec("review_comment", "STRING"),
    ColumnSpec("review_date", "TIMESTAMP"),
    ColumnSpec("items", "STRING"),
    ColumnSpec("item_count", "INT64"),
    ColumnSpec("license_plate", "STRING"),
    ColumnSpec("delivery_time_minutes", "FLOAT64"),
    ColumnSpec("status_history", "STRING"),
    ColumnSpec("created_at", "TIMESTAMP", "REQUIRED"),
    ColumnSpec("updated_at", "TIMESTAMP"),
]

DELIVERY_RUNS_TABLE_SCHEMA: List[ColumnSpec] = [
    ColumnSpec("run_id", "STRING", "REQUIRED"),
    ColumnSpec("deliveryman_id", "STRING", "REQUIRED"),
    ColumnSpec("motorcycle_id", "STRING"),
    ColumnSpec("pharmacy_unit_id", "STRING", "REQUIRED"),
    ColumnSpec("order_ids", "STRING", "REPEATED"),
    ColumnSpec("start_time", "TIMESTAMP", "REQUIRED"),
    ColumnSpec("end_time", "TIMESTAMP"),
    ColumnSpec("total_distance", "FLOAT64", "REQUIRED"),
    ColumnSpec("status", "STRING", "REQUIRED"),
    ColumnSpec("checkpoint_count", "INT64"),
]


class WarehouseRow(BaseModel):
    """Base for rows staged into NDJSON; frozen once built"""

    model_config = ConfigDict(frozen=True)

    def to_ndjson_line(self) -> str:
        return self.model_dump_json()


class OrderWarehouseRow(WarehouseRow):
    """Flattened order, one row per synced terminal order"""

    order_id: str = Field(..., min_length=1)
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    region: Optional[str] = None
    pharmacy_unit_id: Optional[str] = None
    delivery_man: Optional[str] = None
    delivery_man_name: Optional[str] = None
    status: Optional[str] = None
    price_number: Optional[float] = None
    rating: Optional[float] = None
    review_comment: Optional[str] = None
    review_date: Optional[datetime] = None
    items: Optional[str] = None
    item_count: Optional[int] = Field(None, ge=0)
    license_plate: Optional[str] = None
    delivery_time_minutes: Optional[float] = None
    status_history: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class DeliveryRunWarehouseRow(WarehouseRow):
    """Flattened delivery run, one row per completed run"""

    run_id: str = Field(..., min_length=1)
    deliveryman_id: str
    motorcycle_id: Optional[str] = None
    pharmacy_unit_id: str
    order_ids: List[str] = Field(default_factory=list)
    start_time: datetime
    end_time: Optional[datetime] = None
    total_distance: float = 0.0
    status: str
    checkpoint_count: Optional[int] = Field(None, ge=0)

    @field_validator("order_ids", mode="before")
    @classmethod
    def clean_order_ids(cls, v):
        """Ensure order_ids is a list of strings"""
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        if isinstance(v, (list, tuple)):
            return [str(t) for t in v if t is not None and str(t).strip()]
        return []
