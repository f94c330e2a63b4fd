"""
Database enums.

Gate pass statuses use their upper-case names as stored values so rows
read the same in every client.
"""

import enum


class UserRole(str, enum.Enum):
    """Roles that act on attendance and gate passes."""
    STUDENT = "student"
    PARENT = "parent"
    WARDEN = "warden"
    GUARD = "guard"
    ADMIN = "admin"


class GatePassStatus(str, enum.Enum):
    """Persisted gate pass status."""
    PENDING_PARENT = "PENDING_PARENT"
    PENDING_WARDEN = "PENDING_WARDEN"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CLOSED = "CLOSED"

    @classmethod
    def pending(cls) -> tuple:
        return (cls.PENDING_PARENT, cls.PENDING_WARDEN)

    @property
    def is_terminal(self) -> bool:
        return self in (GatePassStatus.REJECTED, GatePassStatus.CLOSED)


class GatePassAction(str, enum.Enum):
    """Guard-observed gate events."""
    EXIT = "EXIT"
    ENTRY = "ENTRY"


class ParentRelationship(str, enum.Enum):
    """How a linked parent account relates to the student."""
    FATHER = "Father"
    MOTHER = "Mother"
    GUARDIAN = "Guardian"
