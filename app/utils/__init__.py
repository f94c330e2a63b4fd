"""
Utility package initialization and exports
"""

# DateTime utilities
from .datetime_utils import (
    DateTimeHelper,
    DateRangeCalculator,
    coerce_utc,
)

# Location utilities
from .geo_utils import (
    GeoPoint,
    GeofenceConfig,
    GeofenceResult,
    haversine_distance,
    is_within_geofence,
)

__all__ = [
    # DateTime
    'DateTimeHelper', 'DateRangeCalculator', 'coerce_utc',

    # Location
    'GeoPoint', 'GeofenceConfig', 'GeofenceResult',
    'haversine_distance', 'is_within_geofence',
]
