"""
Geolocation utilities for geofenced attendance
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any

from app.core.exceptions import InvalidConfigurationError, InvalidCoordinateError

# Mean Earth radius
EARTH_RADIUS_METERS = 6371000.0

LATITUDE_LIMIT = 90
LONGITUDE_LIMIT = 180


def is_valid_degrees(value: Any, limit: float) -> bool:
    """Finite real number within [-limit, limit]"""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value) and -limit <= value <= limit


def _validate_coordinate(latitude: Any, longitude: Any) -> None:
    """Reject non-numeric, NaN, infinite or out-of-range coordinates"""
    if not is_valid_degrees(latitude, LATITUDE_LIMIT) or not is_valid_degrees(longitude, LONGITUDE_LIMIT):
        raise InvalidCoordinateError(latitude=latitude, longitude=longitude)


def coordinate_message(key: str, limit: float) -> str:
    axis = "Latitude" if "latitude" in key else "Longitude"
    return f"{axis} must be a number between -{limit} and {limit}"


@dataclass(frozen=True)
class GeoPoint:
    """Geographic point with latitude and longitude"""
    latitude: float
    longitude: float

    def __post_init__(self):
        _validate_coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class GeofenceConfig:
    """Circular geofence around the hostel"""
    center_latitude: float
    center_longitude: float
    radius_meters: float
    label: str = "Main Hostel Building"

    def __post_init__(self):
        for key, value, limit in (
            ("center_latitude", self.center_latitude, LATITUDE_LIMIT),
            ("center_longitude", self.center_longitude, LONGITUDE_LIMIT),
        ):
            if not is_valid_degrees(value, limit):
                raise InvalidConfigurationError(key, value, coordinate_message(key, limit))
        if (
            isinstance(self.radius_meters, bool)
            or not isinstance(self.radius_meters, Real)
            or not math.isfinite(self.radius_meters)
            or self.radius_meters <= 0
        ):
            raise InvalidConfigurationError(
                "geofence_radius_meters",
                self.radius_meters,
                "Geofence radius must be a positive number of meters"
            )

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(self.center_latitude, self.center_longitude)


@dataclass(frozen=True)
class GeofenceResult:
    """Outcome of a containment check"""
    within_geofence: bool
    distance_meters: float


def haversine_distance(point1: GeoPoint, point2: GeoPoint) -> float:
    """Great-circle distance between two points in meters (Haversine formula)"""
    lat1, lon1 = math.radians(point1.latitude), math.radians(point1.longitude)
    lat2, lon2 = math.radians(point2.latitude), math.radians(point2.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    # Guard against tiny floating point overshoot above 1.0
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_METERS


def is_within_geofence(point: GeoPoint, fence: GeofenceConfig) -> GeofenceResult:
    """
    Check whether a point lies inside a circular geofence.

    The boundary is inclusive: a point exactly ``radius_meters`` away from
    the center counts as inside.

    Raises:
        InvalidCoordinateError: if the point is malformed
    """
    if not isinstance(point, GeoPoint):
        raise InvalidCoordinateError()
    distance = haversine_distance(point, fence.center)
    return GeofenceResult(
        within_geofence=distance <= fence.radius_meters,
        distance_meters=distance,
    )


def destination_point(start: GeoPoint, bearing_degrees: float, distance_meters: float) -> GeoPoint:
    """Point reached by travelling ``distance_meters`` from ``start`` along a bearing"""
    angular = distance_meters / EARTH_RADIUS_METERS
    bearing = math.radians(bearing_degrees)
    lat1 = math.radians(start.latitude)
    lon1 = math.radians(start.longitude)

    lat2 = math.asin(math.sin(lat1) * math.cos(angular) +
                     math.cos(lat1) * math.sin(angular) * math.cos(bearing))
    lon2 = lon1 + math.atan2(math.sin(bearing) * math.sin(angular) * math.cos(lat1),
                             math.cos(angular) - math.sin(lat1) * math.sin(lat2))

    # Normalize longitude to [-180, 180]
    lon2 = (lon2 + 3 * math.pi) % (2 * math.pi) - math.pi

    return GeoPoint(math.degrees(lat2), math.degrees(lon2))


__all__ = [
    "EARTH_RADIUS_METERS",
    "GeoPoint",
    "GeofenceConfig",
    "GeofenceResult",
    "haversine_distance",
    "is_within_geofence",
    "destination_point",
]
