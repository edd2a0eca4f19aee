"""
Delivery run document -> delivery_runs warehouse row
"""

from typing import Any, Dict

from pydantic import ValidationError

from core.exceptions import RecordTransformError
from models.source_document import SourceDocument
from schemas.warehouse import DeliveryRunWarehouseRow
from sync_engine.timestamps import parse_float, parse_timestamp
from sync_engine.transformers.base import RecordTransformer


class DeliveryRunTransformer(RecordTransformer):
    """Flatten a delivery run; no lookups, so the row depends on the document only"""

    async def transform(self, document: SourceDocument) -> DeliveryRunWarehouseRow:
        data: Dict[str, Any] = document.data or {}
        run_id = document.doc_id

        start_time = parse_timestamp(data.get("startTime"))
        if start_time is None:
            raise RecordTransformError(
                "Delivery run has no parseable start time",
                context={"doc_id": run_id, "field_name": "startTime"}
            )

        checkpoints = data.get("checkpoints")

        try:
            return DeliveryRunWarehouseRow(
                run_id=run_id,
                deliveryman_id=self.to_text(data.get("deliverymanId"), ""),
                motorcycle_id=self.to_text(data.get("motorcycleId")),
                pharmacy_unit_id=self.to_text(data.get("pharmacyUnitId"), ""),
                order_ids=data.get("orderIds"),
                start_time=start_time,
                end_time=parse_timestamp(data.get("endTime")),
                total_distance=parse_float(data.get("totalDistance"), 0.0),
                status=self.to_text(data.get("status"), ""),
                checkpoint_count=len(checkpoints) if isinstance(checkpoints, list) else 0,
            )
        except ValidationError as e:
            raise RecordTransformError(
                "Delivery run row failed validation",
                context={"doc_id": run_id, "errors": e.error_count()},
                original_exception=e
            )
