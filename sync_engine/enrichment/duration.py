"""
Delivery duration derived from an order's status history.
"""

from typing import Any, Optional
import logging

from sync_engine.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

FALLBACK_MINUTES = 10.0
MIN_PLAUSIBLE_MINUTES = 5.0
MAX_PLAUSIBLE_MINUTES = 300.0

DEFAULT_DEPARTURE_STATUS = "A caminho"
DEFAULT_ARRIVAL_STATUS = "Entregue"


def _first_event(history: list, status: str) -> Optional[dict]:
    for event in history:
        if isinstance(event, dict) and event.get("status") == status:
            return event
    return None


def estimate_duration_minutes(
    status_history: Any,
    record_id: str = "unknown",
    *,
    departure_status: str = DEFAULT_DEPARTURE_STATUS,
    arrival_status: str = DEFAULT_ARRIVAL_STATUS,
) -> float:
    """
    Minutes between the first departure event and the first arrival event.

    Events are looked up in list order, not sorted. Missing events, a
    duration outside (0, 300] or under 5 minutes all yield FALLBACK_MINUTES,
    the typical delivery time, so the warehouse column is never null.

    Args:
        status_history: List of {"status", "timestamp"} events
        record_id: Used in log messages only
        departure_status: Status marking the courier leaving
        arrival_status: Status marking the delivery

    Returns:
        Duration rounded to 2 decimals, or FALLBACK_MINUTES
    """
    if not status_history or not isinstance(status_history, list):
        logger.debug(f"Order {record_id}: no status history, using fallback duration")
        return FALLBACK_MINUTES

    departure = _first_event(status_history, departure_status)
    arrival = _first_event(status_history, arrival_status)

    if departure is None or arrival is None:
        logger.debug(
            f"Order {record_id}: missing '{departure_status}' or '{arrival_status}' event, "
            f"using fallback duration"
        )
        return FALLBACK_MINUTES

    departed_at = parse_timestamp(departure.get("timestamp"))
    arrived_at = parse_timestamp(arrival.get("timestamp"))

    if departed_at is None or arrived_at is None:
        logger.debug(f"Order {record_id}: unparseable event timestamp, using fallback duration")
        return FALLBACK_MINUTES

    minutes = (arrived_at - departed_at).total_seconds() / 60

    if minutes <= 0 or minutes > MAX_PLAUSIBLE_MINUTES:
        logger.info(f"Order {record_id}: implausible duration {minutes:.2f} min, using fallback")
        return FALLBACK_MINUTES

    if minutes < MIN_PLAUSIBLE_MINUTES:
        logger.info(f"Order {record_id}: instant registration ({minutes:.2f} min), using fallback")
        return FALLBACK_MINUTES

    return round(minutes, 2)
