"""Great-circle distance and point sanity checks."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Float overshoot above 1 would put asin out of its domain.
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def _is_real_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_point(lat: object, lng: object) -> bool:
    if not _is_real_number(lat) or not _is_real_number(lng):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return not (lat == 0 and lng == 0)
