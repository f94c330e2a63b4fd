# app/models/system/system_config.py
"""
System configuration singleton.

A single row (id ``system-config``) holds the values administrators tune
at runtime: hostel location, geofence radius, attendance window and gate
pass limits. Services read it fresh on every operation.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.models.base.base_model import BaseModel

SYSTEM_CONFIG_ID = "system-config"

__all__ = [
    "SystemConfig",
    "SYSTEM_CONFIG_ID",
]


class SystemConfig(BaseModel):
    """
    Runtime-tunable hostel settings.
    """

    __tablename__ = "system_config"
    __table_args__ = (
        CheckConstraint("geofence_radius_meters > 0", name="ck_system_config_radius_positive"),
        CheckConstraint(
            "attendance_start_hour >= 0 AND attendance_start_hour <= 23",
            name="ck_system_config_start_hour",
        ),
        CheckConstraint(
            "attendance_end_hour >= 0 AND attendance_end_hour <= 23",
            name="ck_system_config_end_hour",
        ),
        CheckConstraint("max_gate_pass_days > 0", name="ck_system_config_max_days"),
        CheckConstraint("max_pending_passes > 0", name="ck_system_config_max_pending"),
        CheckConstraint("attendance_grace_period >= 0", name="ck_system_config_grace"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=SYSTEM_CONFIG_ID,
    )

    # Hostel location
    hostel_name: Mapped[str] = mapped_column(String(255), nullable=False)
    hostel_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    hostel_longitude: Mapped[float] = mapped_column(Float, nullable=False)
    geofence_radius_meters: Mapped[float] = mapped_column(Float, nullable=False)

    # Attendance window
    attendance_window_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    attendance_start_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance_end_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance_timezone: Mapped[str] = mapped_column(String(64), nullable=False)

    # App limits
    max_gate_pass_days: Mapped[int] = mapped_column(Integer, nullable=False)
    max_pending_passes: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance_grace_period: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Minutes after the window closes that still permit attendance",
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        server_default=func.now(),
        onupdate=func.now(),
    )
    updated_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<SystemConfig(hostel={self.hostel_name}, radius={self.geofence_radius_meters})>"
