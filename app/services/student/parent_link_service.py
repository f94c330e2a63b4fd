"""
Parent-student links.

Administrators link parent accounts to students. A parent may only decide
on, and read the records of, students it is actively linked to.
"""

import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import AuthorizationError, DuplicateEntityError, ValidationError
from app.models.base.enums import ParentRelationship
from app.models.student.parent_student_link import ParentStudentLink
from app.repositories.student import ParentStudentLinkRepository
from app.services.base.base_service import BaseService


class ParentLinkService(BaseService):
    """
    Creates, deactivates and checks parent-student links.
    """

    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.repository = ParentStudentLinkRepository(db_session)

    def link(
        self,
        parent_id: str,
        student_id: str,
        relationship: ParentRelationship,
        linked_by: Optional[str] = None,
    ) -> ParentStudentLink:
        """
        Link a parent to a student.

        A previously deactivated link for the same pair is reactivated.

        Raises:
            ValidationError: Missing ids, or parent and student are the same account
            DuplicateEntityError: The pair is already actively linked
        """
        parent_id = (parent_id or "").strip()
        student_id = (student_id or "").strip()
        if not parent_id or not student_id or parent_id == student_id:
            raise ValidationError(
                "Invalid parent-student link",
                field_errors={"parent_id": ["Parent and student must be two different accounts"]},
            )

        existing = self.repository.find_pair(parent_id, student_id)
        if existing is not None and existing.is_active:
            raise DuplicateEntityError(
                "This parent-student relationship already exists",
                table=ParentStudentLink.__tablename__,
            )

        if existing is not None:
            existing.relationship = ParentRelationship(relationship)
            existing.linked_by = linked_by
            link = self.repository.set_active(existing, True)
            self._logger.info(f"link: reactivated parent_id={parent_id}, student_id={student_id}")
        else:
            link = self.repository.create(ParentStudentLink(
                parent_id=parent_id,
                student_id=student_id,
                relationship=ParentRelationship(relationship),
                linked_by=linked_by,
                is_active=True,
            ))

        self._audit.info(
            "parent_linked",
            link_id=link.id,
            parent_id=parent_id,
            student_id=student_id,
            linked_by=linked_by,
        )
        return link

    def unlink(self, link_id: str, unlinked_by: Optional[str] = None) -> ParentStudentLink:
        """Deactivate a link. The row is kept."""
        link = self.repository.get_by_id(link_id)
        if link.is_active:
            link = self.repository.set_active(link, False)
            self._audit.info(
                "parent_unlinked",
                link_id=link.id,
                parent_id=link.parent_id,
                student_id=link.student_id,
                unlinked_by=unlinked_by,
            )
        return link

    def list_links(self, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """Active links, newest first."""
        page = max(1, page)
        page_size = max(1, min(page_size, 100))
        total = self.repository.count({"is_active": True})
        items = self.repository.list_active(skip=(page - 1) * page_size, limit=page_size)
        return {
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }

    def children_of(self, parent_id: str) -> List[str]:
        return self.repository.student_ids_for_parent(parent_id)

    def is_linked(self, parent_id: str, student_id: str) -> bool:
        return self.repository.is_linked(parent_id, student_id)

    def ensure_linked(self, parent_id: Optional[str], student_id: str) -> None:
        """
        Raises:
            AuthorizationError: ``parent_id`` is not actively linked to ``student_id``
        """
        if not parent_id or not self.repository.is_linked(parent_id, student_id):
            self._logger.warning(f"ensure_linked: parent_id={parent_id} is not linked to student_id={student_id}")
            raise AuthorizationError("You are not linked to this student")
