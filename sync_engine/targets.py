"""
Sync target definitions: which collection feeds which warehouse table.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, settings as default_settings
from models.base import SyncTarget
from schemas.warehouse import ColumnSpec, DELIVERY_RUNS_TABLE_SCHEMA, ORDERS_TABLE_SCHEMA
from sync_engine.enrichment.plates import DocumentVehicleRegistry, PlateResolver
from sync_engine.transformers import DeliveryRunTransformer, OrderTransformer, RecordTransformer


@dataclass(frozen=True)
class TargetDefinition:
    """Everything the batch sync and the observers need to know about one target"""
    target: SyncTarget
    source_collection: str
    eligible_statuses: FrozenSet[str]
    table_id: str
    staging_prefix: str
    schema: List[ColumnSpec] = field(hash=False)
    transformer_factory: Callable[[AsyncSession], RecordTransformer] = field(hash=False, compare=False)
    # Orders only enqueue on an actual status transition
    require_status_change: bool = False

    def is_eligible(self, status) -> bool:
        return isinstance(status, str) and status in self.eligible_statuses

    def build_transformer(self, db_session: AsyncSession) -> RecordTransformer:
        return self.transformer_factory(db_session)


def build_targets(settings: Settings = default_settings) -> Dict[SyncTarget, TargetDefinition]:
    """Target definitions from configuration, keyed by target"""

    def order_transformer(db_session: AsyncSession) -> RecordTransformer:
        registry = DocumentVehicleRegistry(db_session, settings.VEHICLES_COLLECTION)
        return OrderTransformer(
            plate_resolver=PlateResolver(registry),
            departure_status=settings.DEPARTURE_STATUS,
            arrival_status=settings.ARRIVAL_STATUS,
        )

    def delivery_run_transformer(db_session: AsyncSession) -> RecordTransformer:
        return DeliveryRunTransformer()

    return {
        SyncTarget.ORDERS: TargetDefinition(
            target=SyncTarget.ORDERS,
            source_collection=settings.ORDERS_COLLECTION,
            eligible_statuses=frozenset(settings.ORDER_SYNC_STATUSES),
            table_id=settings.ORDERS_TABLE,
            staging_prefix=settings.ORDERS_STAGING_PREFIX,
            schema=ORDERS_TABLE_SCHEMA,
            transformer_factory=order_transformer,
            require_status_change=True,
        ),
        SyncTarget.DELIVERY_RUNS: TargetDefinition(
            target=SyncTarget.DELIVERY_RUNS,
            source_collection=settings.DELIVERY_RUNS_COLLECTION,
            eligible_statuses=frozenset(settings.DELIVERY_RUN_SYNC_STATUSES),
            table_id=settings.DELIVERY_RUNS_TABLE,
            staging_prefix=settings.DELIVERY_RUNS_STAGING_PREFIX,
            schema=DELIVERY_RUNS_TABLE_SCHEMA,
            transformer_factory=delivery_run_transformer,
        ),
    }
