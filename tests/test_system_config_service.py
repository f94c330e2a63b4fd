import pytest

from app.config.settings import settings
from app.core.exceptions import ValidationError
from app.models.system.system_config import SYSTEM_CONFIG_ID, SystemConfig
from app.services.system.system_config_service import SystemConfigService


def test_first_read_seeds_defaults(config_service, db):
    config = config_service.get_config()

    assert db.query(SystemConfig).count() == 1
    assert db.query(SystemConfig).one().id == SYSTEM_CONFIG_ID
    assert config.geofence.radius_meters == settings.DEFAULT_GEOFENCE_RADIUS_METERS
    assert config.window.start_hour == settings.DEFAULT_ATTENDANCE_START_HOUR
    assert config.window.timezone == settings.DEFAULT_ATTENDANCE_TIMEZONE
    assert config.limits.max_pending_passes == settings.DEFAULT_MAX_PENDING_PASSES


def test_repeated_reads_reuse_the_singleton(config_service, db):
    config_service.get_config()
    config_service.get_config()
    assert db.query(SystemConfig).count() == 1


def test_partial_update_keeps_other_fields(config_service):
    before = config_service.get_config()

    after = config_service.update_config(
        {"attendance_start_hour": 20, "max_gate_pass_days": 7},
        updated_by="admin-1",
    )

    assert after.window.start_hour == 20
    assert after.limits.max_gate_pass_days == 7
    assert after.window.end_hour == before.window.end_hour
    assert after.geofence == before.geofence
    assert after.updated_by == "admin-1"


def test_update_is_visible_to_other_sessions(config_service, session_factory):
    config_service.update_config({"geofence_radius_meters": 75.0})

    other = session_factory()
    try:
        assert SystemConfigService(other).get_config().geofence.radius_meters == 75.0
    finally:
        other.close()


@pytest.mark.parametrize(
    "patch,field",
    [
        ({"attendance_timezone": "Nowhere/Special"}, "attendance_timezone"),
        ({"attendance_start_hour": 25}, "attendance_start_hour"),
        ({"geofence_radius_meters": 0}, "geofence_radius_meters"),
        ({"hostel_latitude": 120.0}, "hostel_latitude"),
        ({"hostel_longitude": 200.0}, "hostel_longitude"),
        ({"attendance_grace_period": -1}, "attendance_grace_period"),
        ({"max_pending_passes": 0}, "max_pending_passes"),
        ({"hostel_name": "  "}, "hostel_name"),
    ],
)
def test_invalid_values_are_rejected_without_writing(config_service, patch, field):
    before = config_service.get_config()

    with pytest.raises(ValidationError) as exc_info:
        config_service.update_config(patch)

    assert field in exc_info.value.details["field_errors"]
    assert config_service.get_config() == before


def test_each_bad_coordinate_is_reported_on_its_own_field(config_service):
    with pytest.raises(ValidationError) as exc_info:
        config_service.update_config({"hostel_longitude": -181.0})
    field_errors = exc_info.value.details["field_errors"]
    assert list(field_errors) == ["hostel_longitude"]
    assert field_errors["hostel_longitude"] == ["Longitude must be a number between -180 and 180"]

    with pytest.raises(ValidationError) as exc_info:
        config_service.update_config({"hostel_latitude": 91.0, "hostel_longitude": "east"})
    assert set(exc_info.value.details["field_errors"]) == {"hostel_latitude", "hostel_longitude"}


def test_unknown_fields_are_rejected(config_service):
    with pytest.raises(ValidationError) as exc_info:
        config_service.update_config({"max_gate_pass_days": 5, "wifi_password": "secret"})
    assert list(exc_info.value.details["field_errors"]) == ["wifi_password"]
    assert config_service.get_config().limits.max_gate_pass_days == settings.DEFAULT_MAX_GATE_PASS_DAYS
