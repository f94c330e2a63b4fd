# app/api/deps.py
"""
Plain callables that routers use as FastAPI dependencies.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from app.api import deps

    router = APIRouter()

    @router.get("/me")
    def read_me(current_user = Depends(deps.get_current_user)):
        return current_user
"""

from typing import Optional

from app.core.exceptions import AuthorizationError
from app.dependencies import (
    CurrentUser,
    get_attendance_service,
    get_current_user,
    get_gate_pass_ledger_service,
    get_gate_pass_service,
    get_parent_link_service,
    get_system_config_service,
    require_roles,
)
from app.models.base.enums import UserRole
from app.services.student.parent_link_service import ParentLinkService

# --- Role guards ---------------------------------------------------------------

require_student = require_roles(UserRole.STUDENT)
require_parent = require_roles(UserRole.PARENT)
require_warden = require_roles(UserRole.WARDEN)
require_guard = require_roles(UserRole.GUARD)
require_staff = require_roles(UserRole.WARDEN, UserRole.GUARD)
require_admin = require_roles()


# --- Record access ---------------------------------------------------------------

def resolve_student_id(
    current_user: CurrentUser,
    student_id: Optional[str],
    link_service: ParentLinkService,
) -> str:
    """
    Student whose records the caller may read.

    Students read their own; parents must name a linked student; staff
    must name the student.
    """
    if current_user.role == UserRole.STUDENT:
        if student_id and student_id != current_user.id:
            raise AuthorizationError("Students can only view their own records")
        return current_user.id
    if not student_id:
        raise AuthorizationError("student_id is required for this lookup")
    if current_user.role == UserRole.PARENT:
        link_service.ensure_linked(current_user.id, student_id)
    return student_id


__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_attendance_service",
    "get_gate_pass_service",
    "get_gate_pass_ledger_service",
    "get_parent_link_service",
    "get_system_config_service",
    "resolve_student_id",
    "require_roles",
    "require_student",
    "require_parent",
    "require_warden",
    "require_guard",
    "require_staff",
    "require_admin",
]
