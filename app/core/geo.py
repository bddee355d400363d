# app/core/geo.py
"""Coordinate validation and great-circle helpers.

Points are always handled as (longitude, latitude), the GeoJSON order.
"""
import math
from typing import Any, Optional, Tuple

from .exceptions import CoordinateError, ValidationError

EARTH_RADIUS_M = 6371008.8  # mean earth radius

MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0
MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0


def _to_finite_float(value: Any) -> Optional[float]:
    # bools are ints in Python but never a coordinate
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _echo(value: Any) -> Any:
    # keep error payloads JSON safe (no NaN, no arbitrary objects)
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return str(value)


def validate_coordinates(longitude: Any, latitude: Any) -> Tuple[float, float]:
    """Return ``(longitude, latitude)`` as floats or raise :class:`CoordinateError`.

    Rules are checked in order: both values numeric and finite, longitude
    within [-180, 180], latitude within [-90, 90]. The error names the rule
    that failed and echoes the offending values.
    """
    lon = _to_finite_float(longitude)
    lat = _to_finite_float(latitude)
    if lon is None or lat is None:
        raise CoordinateError(
            "Invalid coordinates. Both longitude and latitude must be valid finite numbers.",
            rule="numeric",
            received_coordinates=[_echo(longitude), _echo(latitude)],
        )
    if not MIN_LONGITUDE <= lon <= MAX_LONGITUDE:
        raise CoordinateError(
            f"Longitude {lon} out of range. Longitude must be between -180 and 180.",
            rule="longitude_range",
            received_coordinates=[lon, lat],
        )
    if not MIN_LATITUDE <= lat <= MAX_LATITUDE:
        raise CoordinateError(
            f"Latitude {lat} out of range. Latitude must be between -90 and 90.",
            rule="latitude_range",
            received_coordinates=[lon, lat],
        )
    return lon, lat


def is_valid_coordinate(longitude: Any, latitude: Any) -> bool:
    try:
        validate_coordinates(longitude, latitude)
    except CoordinateError:
        return False
    return True


def validate_radius(radius: Any, max_radius: Optional[float] = None) -> float:
    value = _to_finite_float(radius)
    if value is None or value <= 0:
        raise ValidationError(
            "Radius must be a positive number of meters.",
            errors=[{"field": "radius", "message": "must be a positive number"}],
            received_radius=_echo(radius),
        )
    if max_radius is not None and value > max_radius:
        raise ValidationError(
            f"Radius must not exceed {max_radius} meters.",
            errors=[{"field": "radius", "message": f"must be at most {max_radius}"}],
            received_radius=_echo(radius),
        )
    return value


def haversine_meters(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(longitude: float, latitude: float, radius_m: float):
    """Index prefilter around a point.

    Returns ``(min_lon, min_lat, max_lon, max_lat)``. The longitude bounds are
    ``None`` when the circle reaches a pole or crosses the antimeridian, in
    which case only the latitude band can be used.
    """
    delta_lat = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat = latitude - delta_lat
    max_lat = latitude + delta_lat
    if min_lat <= MIN_LATITUDE or max_lat >= MAX_LATITUDE:
        return None, max(min_lat, MIN_LATITUDE), None, min(max_lat, MAX_LATITUDE)

    ratio = math.sin(radius_m / EARTH_RADIUS_M) / math.cos(math.radians(latitude))
    if ratio >= 1:
        return None, min_lat, None, max_lat
    delta_lng = math.degrees(math.asin(ratio))
    min_lon = longitude - delta_lng
    max_lon = longitude + delta_lng
    if min_lon < MIN_LONGITUDE or max_lon > MAX_LONGITUDE:
        return None, min_lat, None, max_lat
    return min_lon, min_lat, max_lon, max_lat
