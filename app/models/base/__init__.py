"""
Base models package.

Provides the declarative base, abstract base classes and enums for all
database models.
"""

from app.models.base.base_model import (
    Base,
    BaseModel,
    TimestampModel,
)

from app.models.base.enums import (
    UserRole,
    GatePassStatus,
    GatePassAction,
    ParentRelationship,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "UserRole",
    "GatePassStatus",
    "GatePassAction",
    "ParentRelationship",
]
