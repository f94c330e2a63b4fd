# app/dependencies.py
from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.db.session import get_db
from app.models.base.enums import UserRole
from app.services.attendance.attendance_service import AttendanceService
from app.services.gate_pass.gate_pass_ledger_service import GatePassLedgerService
from app.services.gate_pass.gate_pass_service import GatePassService
from app.services.student.parent_link_service import ParentLinkService
from app.services.system.system_config_service import SystemConfigService


# ------------------------------------------------------------------ #
# Current user
# ------------------------------------------------------------------ #
class CurrentUser:
    """
    Acting user as identified by the calling gateway.

    Authentication itself happens upstream; this service only needs the
    id and role to attribute and authorize actions.
    """

    def __init__(self, user_id: str, role: UserRole):
        self.id = user_id
        self.role = role

    def __repr__(self) -> str:
        return f"CurrentUser(id={self.id!r}, role={self.role.value!r})"


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> CurrentUser:
    """
    Build the CurrentUser from ``X-User-Id`` / ``X-User-Role`` headers.

    Raises 401 when either header is missing or the role is unknown.
    """
    if not x_user_id or not x_user_role:
        raise AuthenticationError("X-User-Id and X-User-Role headers are required")

    try:
        role = UserRole(x_user_role.strip().lower())
    except ValueError as e:
        raise AuthenticationError(f"Unknown role '{x_user_role}'") from e

    return CurrentUser(user_id=x_user_id.strip(), role=role)


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """
    Dependency factory restricting a route to the given roles.

    Admins are always allowed.
    """
    allowed = set(roles) | {UserRole.ADMIN}

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"Role '{current_user.role.value}' may not perform this action",
                required_roles=sorted(role.value for role in allowed),
            )
        return current_user

    return dependency


# ------------------------------------------------------------------ #
# Service factories
# ------------------------------------------------------------------ #
def get_system_config_service(db: Session = Depends(get_db)) -> SystemConfigService:
    return SystemConfigService(db)


def get_attendance_service(
    db: Session = Depends(get_db),
    config_service: SystemConfigService = Depends(get_system_config_service),
) -> AttendanceService:
    return AttendanceService(db, config_service)


def get_parent_link_service(db: Session = Depends(get_db)) -> ParentLinkService:
    return ParentLinkService(db)


def get_gate_pass_service(
    db: Session = Depends(get_db),
    config_service: SystemConfigService = Depends(get_system_config_service),
    link_service: ParentLinkService = Depends(get_parent_link_service),
) -> GatePassService:
    return GatePassService(db, config_service, link_service)


def get_gate_pass_ledger_service(
    db: Session = Depends(get_db),
    config_service: SystemConfigService = Depends(get_system_config_service),
) -> GatePassLedgerService:
    return GatePassLedgerService(db, config_service)
