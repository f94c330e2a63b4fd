# models/__init__.py
from .base import Base, BaseModel, TimestampModel, UserRole, GatePassStatus, GatePassAction, ParentRelationship
from .attendance import AttendanceRecord
from .gate_pass import GatePass, GatePassLog
from .student import ParentStudentLink
from .system import SystemConfig, SYSTEM_CONFIG_ID

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "UserRole",
    "GatePassStatus",
    "GatePassAction",
    "ParentRelationship",
    "AttendanceRecord",
    "GatePass",
    "GatePassLog",
    "ParentStudentLink",
    "SystemConfig",
    "SYSTEM_CONFIG_ID",
]
