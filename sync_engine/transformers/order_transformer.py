"""
Order document -> orders warehouse row
"""

from typing import Any, Dict, List
import logging

from pydantic import ValidationError

from core.exceptions import RecordTransformError
from models.source_document import SourceDocument
from schemas.warehouse import OrderWarehouseRow
from sync_engine.enrichment.duration import (
    DEFAULT_ARRIVAL_STATUS,
    DEFAULT_DEPARTURE_STATUS,
    estimate_duration_minutes,
)
from sync_engine.enrichment.gazetteer import match_region
from sync_engine.enrichment.plates import PlateResolver
from sync_engine.timestamps import isoformat_utc, parse_float, parse_timestamp
from sync_engine.transformers.base import RecordTransformer

logger = logging.getLogger(__name__)


class OrderTransformer(RecordTransformer):
    """
    Flatten an order into the orders table row.

    Handles:
    - Items as list or comma-separated string
    - Permissive price and rating parsing
    - Creation timestamp with `date` as fallback
    - Derived region, delivery duration and license plate
    """

    def __init__(
        self,
        plate_resolver: PlateResolver,
        departure_status: str = DEFAULT_DEPARTURE_STATUS,
        arrival_status: str = DEFAULT_ARRIVAL_STATUS,
    ):
        self.plate_resolver = plate_resolver
        self.departure_status = departure_status
        self.arrival_status = arrival_status

    async def transform(self, document: SourceDocument) -> OrderWarehouseRow:
        data: Dict[str, Any] = document.data or {}
        order_id = document.doc_id

        items = self.to_list(data.get("items"))

        created_at = parse_timestamp(data.get("createdAt")) or parse_timestamp(data.get("date"))
        if created_at is None:
            raise RecordTransformError(
                "Order has no parseable creation timestamp",
                context={"doc_id": order_id, "field_name": "createdAt"}
            )
        updated_at = parse_timestamp(data.get("updatedAt")) or created_at

        address = self.to_text(data.get("address"), "")
        history = data.get("statusHistory") or []

        plate_value = self.to_text(data.get("licensePlate"))
        license_plate = await self.plate_resolver.resolve(plate_value)

        try:
            return OrderWarehouseRow(
                order_id=order_id,
                order_number=self.to_text(
                    data.get("orderId") or data.get("originalOrderId"), order_id
                ),
                customer_name=self.to_text(data.get("customerName"), ""),
                customer_phone=self.to_text(data.get("customerPhone"), ""),
                address=address,
                region=match_region(address),
                pharmacy_unit_id=self.to_text(data.get("pharmacyUnitId"), ""),
                delivery_man=self.to_text(data.get("deliveryMan")),
                delivery_man_name=self.to_text(data.get("deliveryManName")),
                status=self.to_text(data.get("status"), ""),
                price_number=parse_float(data.get("priceNumber"), 0.0),
                # unrated orders store 0
                rating=parse_float(data["rating"]) if data.get("rating") else None,
                review_comment=self.to_text(data.get("reviewComment")),
                review_date=parse_timestamp(data.get("reviewDate")),
                items=self.to_blob(items),
                item_count=len(items),
                license_plate=license_plate,
                delivery_time_minutes=estimate_duration_minutes(
                    history,
                    order_id,
                    departure_status=self.departure_status,
                    arrival_status=self.arrival_status,
                ),
                status_history=self.to_blob(self._render_history(history)),
                created_at=created_at,
                updated_at=updated_at,
            )
        except ValidationError as e:
            raise RecordTransformError(
                "Order row failed validation",
                context={"doc_id": order_id, "errors": e.error_count()},
                original_exception=e
            )

    @staticmethod
    def _render_history(history: Any) -> List[Any]:
        """Status events with timestamps as ISO-8601 UTC strings"""
        if not isinstance(history, list):
            return []

        rendered = []
        for event in history:
            if isinstance(event, dict) and "timestamp" in event:
                parsed = parse_timestamp(event["timestamp"])
                if parsed is not None:
                    event = {**event, "timestamp": isoformat_utc(parsed)}
            rendered.append(event)
        return rendered
