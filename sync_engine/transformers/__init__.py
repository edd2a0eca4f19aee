from sync_engine.transformers.base import RecordTransformer
from sync_engine.transformers.order_transformer import OrderTransformer
from sync_engine.transformers.delivery_run_transformer import DeliveryRunTransformer

__all__ = ["RecordTransformer", "OrderTransformer", "DeliveryRunTransformer"]
