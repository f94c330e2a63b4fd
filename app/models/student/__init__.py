from app.models.student.parent_student_link import ParentStudentLink

__all__ = ["ParentStudentLink"]
