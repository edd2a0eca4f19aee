"""
Permissive timestamp and number parsing shared by the enrichment helpers and
the record transformers.

Source payloads were written by several app versions, so a timestamp may
arrive as a datetime, a structured {seconds, nanoseconds} mapping (with or
without leading underscores), an ISO-8601 string or epoch milliseconds.
Everything comes out as a timezone-aware UTC datetime, or None.
"""

from datetime import datetime, timezone
from typing import Any, Optional
import math
import re

LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def to_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Safely parse a timestamp value in any of the stored shapes"""
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return None
        nanos = value.get("_nanoseconds", value.get("nanoseconds")) or 0
        try:
            return datetime.fromtimestamp(
                int(seconds) + int(nanos) / 1_000_000_000, tz=timezone.utc
            )
        except (ValueError, TypeError, OverflowError, OSError):
            return None

    # bool is an int subclass; never a timestamp
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None

    if isinstance(value, str):
        try:
            return to_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None

    return None


def parse_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Safely parse float value.

    Strings are read up to the end of their leading number ("25,90" -> 25.0,
    "12.5km" -> 12.5). Non-finite results (NaN, Infinity) return `default`.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = LEADING_NUMBER.match(value)
        if not match:
            return default
        number = float(match.group(0))
    else:
        return default

    return number if math.isfinite(number) else default


def isoformat_utc(value: datetime) -> str:
    return to_utc(value).isoformat().replace("+00:00", "Z")
