"""
License plate resolution for order records.

Couriers sometimes register the vehicle's internal id instead of its plate.
Values that already look like a plate are returned as typed; anything else is
looked up in the vehicle registry, falling back to the input on a miss.
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging
import re

from sqlalchemy.ext.asyncio import AsyncSession

from sync_engine.sources import SourceDocumentRepository

logger = logging.getLogger(__name__)

# Legacy ABC1234 and current ABC1D23 formats
PLATE_PATTERN = re.compile(r"^[A-Z]{3}[0-9][A-Z0-9][0-9]{2}$", re.IGNORECASE)
_SEPARATORS = re.compile(r"[-\s]")


def looks_like_plate(value: str) -> bool:
    return bool(PLATE_PATTERN.match(_SEPARATORS.sub("", value)))


class VehicleRegistry(ABC):
    """Lookup of a vehicle's plate by its internal id"""

    @abstractmethod
    async def get_plate(self, vehicle_id: str) -> Optional[str]:
        """Return the registered plate, or None when unknown"""
        pass


class DocumentVehicleRegistry(VehicleRegistry):
    """Vehicle registry backed by the source document store"""

    def __init__(self, db_session: AsyncSession, collection: str = "motorcycles"):
        self.repository = SourceDocumentRepository(db_session, collection)

    async def get_plate(self, vehicle_id: str) -> Optional[str]:
        doc = await self.repository.get(vehicle_id)
        if doc is None:
            return None
        return (doc.data or {}).get("plate")


class PlateResolver:
    """Resolve a plate-or-vehicle-id value to a display plate"""

    def __init__(self, registry: VehicleRegistry):
        self.registry = registry

    async def resolve(self, value: Optional[str]) -> Optional[str]:
        """
        Resolve a license plate value.

        Returns:
            None for empty input; the input unchanged when it already is a
            plate or the lookup misses or fails; otherwise the registry plate
        """
        if not value:
            return None

        if looks_like_plate(value):
            return value

        try:
            plate = await self.registry.get_plate(value)
        except Exception as e:
            logger.warning(f"Vehicle lookup failed for {value}: {str(e)}")
            return value

        if plate:
            logger.debug(f"Resolved vehicle {value} to plate {plate}")
            return plate

        logger.debug(f"Vehicle {value} not registered, keeping value as is")
        return value
