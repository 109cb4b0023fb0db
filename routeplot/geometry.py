"""
routeplot — Geometry helpers
Great-circle distance and elapsed time over ordered, timestamped points.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .models import NavigationPoint, TimestampError

log = logging.getLogger("routeplot.geometry")

EARTH_RADIUS = 6371000  # meters


def distance_between(a: NavigationPoint, b: NavigationPoint) -> float:
    """
    Haversine distance in meters.

    A zero coordinate counts as missing: the pair contributes 0 and a warning
    is logged. Points on the equator or the prime meridian are under-counted.
    """
    if not a.latitude or not a.longitude or not b.latitude or not b.longitude:
        log.warning("Invalid latitudes or longitudes: %s, %s", a, b)
        return 0.0
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return EARTH_RADIUS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def total_distance(points: Sequence[NavigationPoint]) -> float:
    """Total distance in meters, rounded to 2 decimals."""
    total = 0.0
    for i in range(1, len(points)):
        total += distance_between(points[i - 1], points[i])
    return round(total, 2)


# ─────────────────────────────────────────────────────────────
# Timestamps
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Known:
    value: float


class _Unknown:
    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = _Unknown()

Timestamp = Union[Known, _Unknown]


def read_timestamp(raw: Optional[str]) -> Timestamp:
    """Numeric value of a raw timestamp string, or UNKNOWN."""
    if raw is None:
        return UNKNOWN
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return UNKNOWN
    if math.isnan(value):
        return UNKNOWN
    return Known(value)


def pick_timestamp(primary: Optional[str], fallback: Optional[str], where: str = "") -> float:
    """
    Fallback policy for the ends of a track: use the primary timestamp, or its
    neighbour when the primary is unreadable. Raises TimestampError when
    neither can be read.
    """
    for raw in (primary, fallback):
        ts = read_timestamp(raw)
        if isinstance(ts, Known):
            return ts.value
    raise TimestampError(
        f"Invalid timestamps in the {where or 'boundary'} locations: {primary!r}, {fallback!r}"
    )


def elapsed_time(points: Sequence[NavigationPoint]) -> float:
    """
    Seconds between the first and last point, rounded to 2 decimals.
    0 for fewer than 2 points and for untimed tracks (no point has a timestamp).
    """
    if len(points) < 2:
        return 0.0
    if all(p.timestamp is None for p in points):
        return 0.0
    start = pick_timestamp(points[0].timestamp, points[1].timestamp, "first two")
    end = pick_timestamp(points[-1].timestamp, points[-2].timestamp, "last two")
    return round(end - start, 2)
