"""
Parent-student link repository.

Only active links grant a parent access to a student; inactive rows are
kept for history and can be reactivated.
"""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import handle_database_exception
from app.models.student.parent_student_link import ParentStudentLink
from app.repositories.base.base_repository import BaseRepository


class ParentStudentLinkRepository(BaseRepository[ParentStudentLink]):
    """
    Repository for parent-student links.
    """

    def __init__(self, session: Session):
        super().__init__(ParentStudentLink, session)

    def find_pair(self, parent_id: str, student_id: str) -> Optional[ParentStudentLink]:
        """Link for the pair, active or not."""
        try:
            return (
                self.db.query(ParentStudentLink)
                .filter(
                    ParentStudentLink.parent_id == parent_id,
                    ParentStudentLink.student_id == student_id,
                )
                .first()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_parent_link") from e

    def is_linked(self, parent_id: str, student_id: str) -> bool:
        try:
            return (
                self.db.query(ParentStudentLink.id)
                .filter(
                    ParentStudentLink.parent_id == parent_id,
                    ParentStudentLink.student_id == student_id,
                    ParentStudentLink.is_active.is_(True),
                )
                .first()
            ) is not None
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "is_linked") from e

    def student_ids_for_parent(self, parent_id: str) -> List[str]:
        """Students the parent is actively linked to."""
        try:
            rows = (
                self.db.query(ParentStudentLink.student_id)
                .filter(
                    ParentStudentLink.parent_id == parent_id,
                    ParentStudentLink.is_active.is_(True),
                )
                .order_by(ParentStudentLink.student_id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "student_ids_for_parent") from e
        return [row.student_id for row in rows]

    def list_active(self, skip: int = 0, limit: int = 20) -> List[ParentStudentLink]:
        """Active links, newest first."""
        try:
            return (
                self.db.query(ParentStudentLink)
                .filter(ParentStudentLink.is_active.is_(True))
                .order_by(ParentStudentLink.created_at.desc(), ParentStudentLink.id.asc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "list_active_links") from e

    def set_active(self, link: ParentStudentLink, active: bool) -> ParentStudentLink:
        """Flip the link's active flag and commit."""
        try:
            link.is_active = active
            self.db.commit()
            self.db.refresh(link)
            return link
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_exception(e, "set_link_active") from e
