import math

import pytest

from app.core.exceptions import InvalidConfigurationError, InvalidCoordinateError
from app.utils.geo_utils import (
    GeoPoint,
    GeofenceConfig,
    destination_point,
    haversine_distance,
    is_within_geofence,
)

from tests.conftest import HOSTEL_LAT, HOSTEL_LON

HOSTEL = GeoPoint(HOSTEL_LAT, HOSTEL_LON)


def test_distance_to_self_is_zero():
    assert haversine_distance(HOSTEL, HOSTEL) == 0


@pytest.mark.parametrize(
    "other",
    [
        GeoPoint(28.987, 77.153),
        GeoPoint(-33.8688, 151.2093),
        GeoPoint(51.5074, -0.1278),
    ],
)
def test_distance_is_symmetric(other):
    assert math.isclose(haversine_distance(HOSTEL, other), haversine_distance(other, HOSTEL))


def test_known_distance_between_cities():
    delhi = GeoPoint(28.6139, 77.2090)
    mumbai = GeoPoint(19.0760, 72.8777)
    assert haversine_distance(delhi, mumbai) == pytest.approx(1_148_000, rel=0.01)


def test_point_on_boundary_counts_as_inside():
    edge = destination_point(HOSTEL, 90, 50)
    fence = GeofenceConfig(HOSTEL_LAT, HOSTEL_LON, radius_meters=haversine_distance(HOSTEL, edge))

    result = is_within_geofence(edge, fence)

    assert result.within_geofence
    assert result.distance_meters == fence.radius_meters


def test_point_just_outside_is_rejected():
    fence = GeofenceConfig(HOSTEL_LAT, HOSTEL_LON, radius_meters=50)

    inside = is_within_geofence(destination_point(HOSTEL, 45, 49), fence)
    outside = is_within_geofence(destination_point(HOSTEL, 45, 51), fence)

    assert inside.within_geofence
    assert not outside.within_geofence
    assert outside.distance_meters == pytest.approx(51, abs=0.1)


@pytest.mark.parametrize(
    "latitude,longitude",
    [
        (90.5, 0),
        (-91, 0),
        (0, 180.01),
        (float("nan"), 0),
        (0, float("inf")),
        ("28.9", 77.1),
        (None, 77.1),
        (True, 77.1),
    ],
)
def test_malformed_coordinates_are_rejected(latitude, longitude):
    with pytest.raises(InvalidCoordinateError):
        GeoPoint(latitude, longitude)


def test_extreme_valid_coordinates_are_accepted():
    assert haversine_distance(GeoPoint(90, 180), GeoPoint(-90, -180)) == pytest.approx(
        math.pi * 6371000.0
    )


@pytest.mark.parametrize("radius", [0, -5, float("nan"), "50"])
def test_geofence_rejects_bad_radius(radius):
    with pytest.raises(InvalidConfigurationError):
        GeofenceConfig(HOSTEL_LAT, HOSTEL_LON, radius_meters=radius)


@pytest.mark.parametrize(
    "latitude,longitude,key",
    [
        (95, HOSTEL_LON, "center_latitude"),
        (HOSTEL_LAT, 181, "center_longitude"),
        (HOSTEL_LAT, float("nan"), "center_longitude"),
    ],
)
def test_geofence_rejects_bad_center(latitude, longitude, key):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        GeofenceConfig(latitude, longitude, radius_meters=50)
    assert exc_info.value.details["config_key"] == key
