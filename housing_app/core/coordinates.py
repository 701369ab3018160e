import math
from dataclasses import dataclass
from typing import Any, Optional

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class CoordinateCheck:
    valid: bool
    error: Optional[str] = None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_coordinates(lat: Any, lng: Any) -> CoordinateCheck:
    lat_value = _as_float(lat)
    lng_value = _as_float(lng)

    if lat_value is None or lng_value is None:
        return CoordinateCheck(False, "Latitude and longitude must be numbers")
    if math.isnan(lat_value) or math.isnan(lng_value):
        return CoordinateCheck(False, "Latitude and longitude must not be NaN")
    if math.isinf(lat_value) or math.isinf(lng_value):
        return CoordinateCheck(False, "Latitude and longitude must be finite")
    if not -90 <= lat_value <= 90:
        return CoordinateCheck(False, "Latitude must be between -90 and 90")
    if not -180 <= lng_value <= 180:
        return CoordinateCheck(False, "Longitude must be between -180 and 180")
    return CoordinateCheck(True)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
