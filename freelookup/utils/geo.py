"""Coordinate validation and great-circle distance."""

import math

from freelookup.domain.errors import InvalidQueryError

EARTH_RADIUS_KM = 6371.0088  # IUGG mean radius


def validate_coordinates(lat: float, lon: float) -> None:
    """Raises InvalidQueryError unless -90 <= lat <= 90 and -180 <= lon <= 180."""
    if lat is None or lon is None or math.isnan(lat) or math.isnan(lon):
        raise InvalidQueryError("Latitude and longitude are required")
    if not -90.0 <= lat <= 90.0:
        raise InvalidQueryError(f"Latitude {lat} out of range [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidQueryError(f"Longitude {lon} out of range [-180, 180]")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    validate_coordinates(lat1, lon1)
    validate_coordinates(lat2, lon2)
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # min() guards against a > 1 from floating point error on antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))
