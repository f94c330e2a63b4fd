from app.repositories.student.parent_student_link_repository import ParentStudentLinkRepository

__all__ = ["ParentStudentLinkRepository"]
