"""
Derived warehouse fields: region, delivery duration and license plate.
"""

from sync_engine.enrichment.gazetteer import KNOWN_REGIONS, match_region
from sync_engine.enrichment.duration import FALLBACK_MINUTES, estimate_duration_minutes
from sync_engine.enrichment.plates import (
    DocumentVehicleRegistry,
    PlateResolver,
    VehicleRegistry,
    looks_like_plate,
)

__all__ = [
    "KNOWN_REGIONS",
    "match_region",
    "FALLBACK_MINUTES",
    "estimate_duration_minutes",
    "VehicleRegistry",
    "DocumentVehicleRegistry",
    "PlateResolver",
    "looks_like_plate",
]
