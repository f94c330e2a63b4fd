"""
System configuration service.

Turns the persisted ``system-config`` row into the typed values the
attendance and gate pass services evaluate against, and applies admin
updates. The row is re-read on every call so an update is visible to
the very next operation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.config.settings import settings
from app.core.exceptions import InvalidConfigurationError, ValidationError
from app.models.system.system_config import SystemConfig
from app.repositories.system.system_config_repository import SystemConfigRepository
from app.services.attendance.attendance_window_policy import AttendanceWindowConfig
from app.services.base.base_service import BaseService
from app.services.gate_pass.gate_pass_state import GatePassLimits
from app.utils.geo_utils import (
    LATITUDE_LIMIT,
    LONGITUDE_LIMIT,
    GeofenceConfig,
    coordinate_message,
    is_valid_degrees,
)

# Keys reported by the config value objects, mapped to row columns
FIELD_FOR_CONFIG_KEY = {
    "center_latitude": "hostel_latitude",
    "center_longitude": "hostel_longitude",
    "start_hour": "attendance_start_hour",
    "end_hour": "attendance_end_hour",
    "grace_minutes": "attendance_grace_period",
    "timezone": "attendance_timezone",
}

UPDATABLE_FIELDS = (
    "hostel_name",
    "hostel_latitude",
    "hostel_longitude",
    "geofence_radius_meters",
    "attendance_window_enabled",
    "attendance_start_hour",
    "attendance_end_hour",
    "attendance_timezone",
    "max_gate_pass_days",
    "max_pending_passes",
    "attendance_grace_period",
)


@dataclass(frozen=True)
class SystemConfigSnapshot:
    """Typed, immutable view of the system config at one point in time."""

    geofence: GeofenceConfig
    window: AttendanceWindowConfig
    limits: GatePassLimits
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: SystemConfig) -> "SystemConfigSnapshot":
        return cls(
            geofence=GeofenceConfig(
                center_latitude=row.hostel_latitude,
                center_longitude=row.hostel_longitude,
                radius_meters=row.geofence_radius_meters,
                label=row.hostel_name,
            ),
            window=AttendanceWindowConfig(
                enabled=row.attendance_window_enabled,
                start_hour=row.attendance_start_hour,
                end_hour=row.attendance_end_hour,
                grace_minutes=row.attendance_grace_period,
                timezone=row.attendance_timezone,
            ),
            limits=GatePassLimits(
                max_gate_pass_days=row.max_gate_pass_days,
                max_pending_passes=row.max_pending_passes,
            ),
            updated_at=row.updated_at,
            updated_by=row.updated_by,
        )


def default_config_values() -> Dict[str, Any]:
    """Seed values for the singleton row, taken from settings."""
    return {
        "hostel_name": settings.DEFAULT_HOSTEL_NAME,
        "hostel_latitude": settings.DEFAULT_HOSTEL_LATITUDE,
        "hostel_longitude": settings.DEFAULT_HOSTEL_LONGITUDE,
        "geofence_radius_meters": settings.DEFAULT_GEOFENCE_RADIUS_METERS,
        "attendance_window_enabled": settings.DEFAULT_ATTENDANCE_WINDOW_ENABLED,
        "attendance_start_hour": settings.DEFAULT_ATTENDANCE_START_HOUR,
        "attendance_end_hour": settings.DEFAULT_ATTENDANCE_END_HOUR,
        "attendance_timezone": settings.DEFAULT_ATTENDANCE_TIMEZONE,
        "max_gate_pass_days": settings.DEFAULT_MAX_GATE_PASS_DAYS,
        "max_pending_passes": settings.DEFAULT_MAX_PENDING_PASSES,
        "attendance_grace_period": settings.DEFAULT_ATTENDANCE_GRACE_MINUTES,
    }


class SystemConfigService(BaseService):
    """
    Read and update the hostel's runtime configuration.
    """

    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.repository = SystemConfigRepository(db_session)

    def get_row(self) -> SystemConfig:
        return self.repository.get_or_create(default_config_values())

    def get_config(self) -> SystemConfigSnapshot:
        """Current configuration, read fresh from the database."""
        return SystemConfigSnapshot.from_row(self.get_row())

    def update_config(self, patch: Dict[str, Any], updated_by: Optional[str] = None) -> SystemConfigSnapshot:
        """
        Apply a partial update.

        Unknown keys and values that would produce an invalid geofence,
        window or limit are rejected as a whole; nothing is written.

        Raises:
            ValidationError: If the patch is invalid
        """
        unknown = sorted(set(patch) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(
                "Unknown configuration fields",
                field_errors={key: ["Field is not configurable"] for key in unknown},
            )

        row = self.get_row()
        merged = {key: getattr(row, key) for key in UPDATABLE_FIELDS}
        merged.update(patch)

        field_errors = self._validate(merged)
        if field_errors:
            self._logger.warning(f"Rejected system config update: {field_errors}")
            raise ValidationError("Invalid configuration values", field_errors=field_errors)

        row.updated_by = updated_by
        row = self.repository.apply_update(row, dict(patch))

        self._logger.info(f"System config updated by {updated_by}: fields={sorted(patch)}")
        self._audit.info(
            "system_config_updated",
            updated_by=updated_by,
            fields=sorted(patch),
        )
        return SystemConfigSnapshot.from_row(row)

    def _validate(self, values: Dict[str, Any]) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}

        name = values.get("hostel_name")
        if not isinstance(name, str) or not name.strip():
            errors.setdefault("hostel_name", []).append("Hostel name must not be empty")

        if not isinstance(values.get("attendance_window_enabled"), bool):
            errors.setdefault("attendance_window_enabled", []).append("Must be a boolean")

        # Per field, so each bad coordinate is reported against its own column
        for key, limit in (("hostel_latitude", LATITUDE_LIMIT), ("hostel_longitude", LONGITUDE_LIMIT)):
            if not is_valid_degrees(values.get(key), limit):
                errors.setdefault(key, []).append(coordinate_message(key, limit))

        builders = (
            lambda: GeofenceConfig(
                center_latitude=values["hostel_latitude"],
                center_longitude=values["hostel_longitude"],
                radius_meters=values["geofence_radius_meters"],
                label=values["hostel_name"],
            ),
            lambda: AttendanceWindowConfig(
                enabled=bool(values["attendance_window_enabled"]),
                start_hour=values["attendance_start_hour"],
                end_hour=values["attendance_end_hour"],
                grace_minutes=values["attendance_grace_period"],
                timezone=values["attendance_timezone"],
            ),
            lambda: GatePassLimits(
                max_gate_pass_days=values["max_gate_pass_days"],
                max_pending_passes=values["max_pending_passes"],
            ),
        )
        for build in builders:
            try:
                build()
            except InvalidConfigurationError as e:
                config_key = e.details.get("config_key", "config")
                key = FIELD_FOR_CONFIG_KEY.get(config_key, config_key)
                if e.message not in errors.get(key, []):
                    errors.setdefault(key, []).append(e.message)
        return errors
