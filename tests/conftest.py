"""
Shared fixtures: an in-memory SQLite database per test, services bound
to it, an explicit configuration and helpers for hostel-local times.
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_hostel.db")

from datetime import datetime

import pytest
import pytz
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.init_db import drop_db, init_db
from app.db.session import build_engine
from app.models.base.enums import ParentRelationship
from app.services.attendance.attendance_service import AttendanceService
from app.services.attendance.attendance_window_policy import AttendanceWindowConfig
from app.services.gate_pass.gate_pass_ledger_service import GatePassLedgerService
from app.services.gate_pass.gate_pass_service import GatePassService
from app.services.gate_pass.gate_pass_state import GatePassLimits
from app.services.student.parent_link_service import ParentLinkService
from app.services.system.system_config_service import SystemConfigService, SystemConfigSnapshot
from app.utils.geo_utils import GeofenceConfig

HOSTEL_TZ = "Asia/Kolkata"
HOSTEL_LAT = 28.986701
HOSTEL_LON = 77.152050


def local_time(year, month, day, hour=0, minute=0, second=0, tz_name=HOSTEL_TZ) -> datetime:
    """Aware datetime for a wall-clock time in ``tz_name``."""
    return pytz.timezone(tz_name).localize(datetime(year, month, day, hour, minute, second))


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=pytz.UTC)


def make_config(
    enabled=True,
    start_hour=19,
    end_hour=22,
    grace_minutes=5,
    radius_meters=50.0,
    max_gate_pass_days=14,
    max_pending_passes=3,
) -> SystemConfigSnapshot:
    return SystemConfigSnapshot(
        geofence=GeofenceConfig(
            center_latitude=HOSTEL_LAT,
            center_longitude=HOSTEL_LON,
            radius_meters=radius_meters,
        ),
        window=AttendanceWindowConfig(
            enabled=enabled,
            start_hour=start_hour,
            end_hour=end_hour,
            grace_minutes=grace_minutes,
            timezone=HOSTEL_TZ,
        ),
        limits=GatePassLimits(
            max_gate_pass_days=max_gate_pass_days,
            max_pending_passes=max_pending_passes,
        ),
    )


def link_parent(session, parent_id, student_id, relationship=ParentRelationship.GUARDIAN):
    """Actively link ``parent_id`` to ``student_id`` unless already linked."""
    service = ParentLinkService(session)
    if not service.is_linked(parent_id, student_id):
        service.link(parent_id, student_id, relationship, linked_by="admin-1")


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    drop_db(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def config() -> SystemConfigSnapshot:
    return make_config()


@pytest.fixture
def config_service(db):
    return SystemConfigService(db)


@pytest.fixture
def attendance_service(db, config_service):
    return AttendanceService(db, config_service)


@pytest.fixture
def gate_pass_service(db, config_service):
    return GatePassService(db, config_service)


@pytest.fixture
def ledger_service(db, config_service):
    return GatePassLedgerService(db, config_service)


@pytest.fixture
def approved_pass(gate_pass_service):
    """Pass valid 2026-03-10 10:00 to 2026-03-12 18:00 UTC, approved by parent and warden."""
    link_parent(gate_pass_service.db, "parent-1", "student-1")
    gate_pass = gate_pass_service.create_pass(
        "student-1",
        "Family function at home",
        utc(2026, 3, 10, 10),
        utc(2026, 3, 12, 18),
    )
    gate_pass_service.parent_decide(gate_pass.id, True, decided_by="parent-1")
    return gate_pass_service.warden_decide(gate_pass.id, True, decided_by="warden-1")
