"""
Gate pass endpoints.

Students request passes, parents then wardens decide, guards record the
exit and the return. Guards and wardens also read the entry/exit ledger.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api import deps
from app.core.exceptions import AuthorizationError, ValidationError
from app.models.base.enums import GatePassStatus, UserRole
from app.models.gate_pass.gate_pass import GatePass
from app.schemas.common import PaginatedResponse
from app.schemas.gate_pass import (
    GatePassCreate,
    GatePassDecision,
    GatePassLogResponse,
    GatePassMovement,
    GatePassResponse,
    LateReturnResponse,
    QrValidationRequest,
    QrValidationResponse,
    StudentOutResponse,
)
from app.services.gate_pass.gate_pass_ledger_service import GatePassLedgerService
from app.services.gate_pass.gate_pass_service import GatePassService
from app.services.student.parent_link_service import ParentLinkService
from app.utils.datetime_utils import DateTimeHelper

router = APIRouter(prefix="/gatepass", tags=["Gate Passes"])


def _to_response(gate_pass: Optional[GatePass]) -> Optional[GatePassResponse]:
    return GatePassResponse.model_validate(gate_pass) if gate_pass is not None else None


# ==================== Student ====================

@router.post(
    "",
    response_model=GatePassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a gate pass",
)
def create_gate_pass(
    payload: GatePassCreate,
    current_user: deps.CurrentUser = Depends(deps.require_student),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> GatePassResponse:
    gate_pass = service.create_pass(
        current_user.id,
        payload.reason,
        payload.from_date,
        payload.to_date,
    )
    return _to_response(gate_pass)


@router.get(
    "",
    response_model=PaginatedResponse[GatePassResponse],
    summary="Gate passes of a student, newest first",
)
def list_gate_passes(
    student_id: Optional[str] = Query(None, description="Required for parents and staff"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: deps.CurrentUser = Depends(deps.get_current_user),
    service: GatePassService = Depends(deps.get_gate_pass_service),
    link_service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> PaginatedResponse[GatePassResponse]:
    student_id = deps.resolve_student_id(current_user, student_id, link_service)

    result = service.list_for_student(student_id, page=page, page_size=page_size)
    return PaginatedResponse[GatePassResponse].create(
        items=[_to_response(p) for p in result["items"]],
        total_items=result["total"],
        page=result["page"],
        page_size=result["page_size"],
    )


@router.get(
    "/current",
    response_model=Optional[GatePassResponse],
    summary="Approved pass the student is out on or may use now",
)
def get_current_pass(
    current_user: deps.CurrentUser = Depends(deps.require_student),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> Optional[GatePassResponse]:
    return _to_response(service.get_current_pass(current_user.id))


# ==================== Approvals ====================

@router.get(
    "/pending",
    response_model=List[GatePassResponse],
    summary="Approval queue for the caller's role",
)
def list_pending(
    queue: Optional[GatePassStatus] = Query(None, alias="status", description="Admin only"),
    current_user: deps.CurrentUser = Depends(deps.require_roles(UserRole.PARENT, UserRole.WARDEN)),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> List[GatePassResponse]:
    if current_user.role == UserRole.PARENT:
        return [_to_response(p) for p in service.list_pending_for_parent(current_user.id)]
    if current_user.role == UserRole.WARDEN:
        queue = GatePassStatus.PENDING_WARDEN
    return [_to_response(p) for p in service.list_pending(queue or GatePassStatus.PENDING_WARDEN)]


@router.put(
    "/{pass_id}/parent-decision",
    response_model=GatePassResponse,
    summary="Parent approves or rejects",
)
def parent_decision(
    pass_id: str,
    payload: GatePassDecision,
    current_user: deps.CurrentUser = Depends(deps.require_parent),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> GatePassResponse:
    gate_pass = service.parent_decide(
        pass_id,
        payload.approved,
        payload.reason,
        decided_by=current_user.id,
        enforce_link=current_user.role != UserRole.ADMIN,
    )
    return _to_response(gate_pass)


@router.put(
    "/{pass_id}/warden-decision",
    response_model=GatePassResponse,
    summary="Warden approves or rejects",
)
def warden_decision(
    pass_id: str,
    payload: GatePassDecision,
    current_user: deps.CurrentUser = Depends(deps.require_warden),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> GatePassResponse:
    gate_pass = service.warden_decide(pass_id, payload.approved, payload.reason, decided_by=current_user.id)
    return _to_response(gate_pass)


# ==================== Gate ====================

@router.put(
    "/{pass_id}/exit",
    response_model=GatePassResponse,
    summary="Record the student leaving",
)
def record_exit(
    pass_id: str,
    payload: Optional[GatePassMovement] = None,
    current_user: deps.CurrentUser = Depends(deps.require_staff),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> GatePassResponse:
    timestamp = payload.timestamp if payload else None
    return _to_response(service.record_exit(pass_id, timestamp, marked_by=current_user.id))


@router.put(
    "/{pass_id}/entry",
    response_model=GatePassResponse,
    summary="Record the student's return",
)
def record_entry(
    pass_id: str,
    payload: Optional[GatePassMovement] = None,
    current_user: deps.CurrentUser = Depends(deps.require_staff),
    service: GatePassService = Depends(deps.get_gate_pass_service),
) -> GatePassResponse:
    timestamp = payload.timestamp if payload else None
    return _to_response(service.record_entry(pass_id, timestamp, marked_by=current_user.id))


@router.post(
    "/validate",
    response_model=QrValidationResponse,
    summary="Check a scanned pass code",
)
def validate_qr(
    payload: QrValidationRequest,
    _: deps.CurrentUser = Depends(deps.require_staff),
    ledger: GatePassLedgerService = Depends(deps.get_gate_pass_ledger_service),
) -> QrValidationResponse:
    result = ledger.validate_qr(payload.qr_value)
    return QrValidationResponse(
        valid=result.valid,
        status=result.status.value,
        message=result.message,
        is_student_outside=result.is_student_outside,
        gate_pass=_to_response(result.gate_pass),
    )


# ==================== Ledger ====================

@router.get(
    "/students-out",
    response_model=List[StudentOutResponse],
    summary="Students currently outside",
)
def students_out(
    _: deps.CurrentUser = Depends(deps.require_staff),
    ledger: GatePassLedgerService = Depends(deps.get_gate_pass_ledger_service),
) -> List[StudentOutResponse]:
    return [
        StudentOutResponse(
            gate_pass=_to_response(entry.gate_pass),
            exit_time=entry.exit_time,
            is_expired=entry.is_expired,
        )
        for entry in ledger.students_out()
    ]


@router.get(
    "/late-returns",
    response_model=List[LateReturnResponse],
    summary="Passes closed after their return time",
)
def late_returns(
    limit: int = Query(100, ge=1, le=500),
    _: deps.CurrentUser = Depends(deps.require_staff),
    ledger: GatePassLedgerService = Depends(deps.get_gate_pass_ledger_service),
) -> List[LateReturnResponse]:
    return [
        LateReturnResponse(
            gate_pass=_to_response(entry.gate_pass),
            late_minutes=int(entry.late_duration.total_seconds() // 60),
            late_label=entry.late_label,
        )
        for entry in ledger.late_returns(limit=limit)
    ]


@router.get(
    "/recent-entries",
    response_model=List[GatePassResponse],
    summary="Returns recorded since a point in time (default: local midnight)",
)
def recent_entries(
    since: Optional[str] = Query(None, description="Any common date/time format; naive means UTC"),
    limit: int = Query(100, ge=1, le=500),
    _: deps.CurrentUser = Depends(deps.require_staff),
    ledger: GatePassLedgerService = Depends(deps.get_gate_pass_ledger_service),
) -> List[GatePassResponse]:
    since_at = None
    if since:
        try:
            since_at = DateTimeHelper.parse_datetime(since)
        except ValueError as e:
            raise ValidationError("Invalid since value", field_errors={"since": [str(e)]}) from e
    return [_to_response(p) for p in ledger.recent_entries(since=since_at, limit=limit)]


@router.get(
    "/logs",
    response_model=PaginatedResponse[GatePassLogResponse],
    summary="Gate activity, newest first",
)
def activity_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    _: deps.CurrentUser = Depends(deps.require_staff),
    ledger: GatePassLedgerService = Depends(deps.get_gate_pass_ledger_service),
) -> PaginatedResponse[GatePassLogResponse]:
    result = ledger.activity_logs(page=page, page_size=page_size)
    return PaginatedResponse[GatePassLogResponse].create(
        items=[GatePassLogResponse.model_validate(log) for log in result["items"]],
        total_items=result["total"],
        page=result["page"],
        page_size=result["page_size"],
    )


# ==================== Single pass ====================

@router.get(
    "/{pass_id}",
    response_model=GatePassResponse,
    summary="Gate pass details",
)
def get_gate_pass(
    pass_id: str,
    current_user: deps.CurrentUser = Depends(deps.get_current_user),
    service: GatePassService = Depends(deps.get_gate_pass_service),
    link_service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> GatePassResponse:
    gate_pass = service.get_pass(pass_id)
    if current_user.role == UserRole.STUDENT and gate_pass.student_id != current_user.id:
        raise AuthorizationError("Students can only view their own gate passes")
    if current_user.role == UserRole.PARENT:
        link_service.ensure_linked(current_user.id, gate_pass.student_id)
    return _to_response(gate_pass)
