"""
Parent-student link model.

Ties a parent account to a student it may act for. Links are created by
an administrator and deactivated rather than deleted, so past decisions
keep a traceable relationship.
"""

from typing import Optional

from sqlalchemy import Boolean, Enum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base.base_model import TimestampModel
from app.models.base.enums import ParentRelationship

__all__ = [
    "ParentStudentLink",
]


class ParentStudentLink(TimestampModel):
    """
    Parent to student relationship.

    A parent may be linked to several students and a student to several
    parents; each pair appears at most once.
    """

    __tablename__ = "parent_student_links"

    parent_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Parent user identifier",
    )
    student_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Student user identifier",
    )
    relationship: Mapped[ParentRelationship] = mapped_column(
        Enum(ParentRelationship, name="parent_relationship_enum"),
        nullable=False,
    )
    linked_by: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Administrator who created the link",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("parent_id", "student_id", name="uq_parent_student_link"),
    )

    def __repr__(self) -> str:
        return (
            f"<ParentStudentLink(parent_id={self.parent_id}, student_id={self.student_id}, "
            f"active={self.is_active})>"
        )
