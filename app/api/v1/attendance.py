"""
Attendance endpoints: geofenced self-marking, warden overrides and
attendance summaries.
"""
from datetime import date as Date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api import deps
from app.schemas.attendance import (
    AttendanceRecordResponse,
    AttendanceStatsResponse,
    ManualAttendanceRequest,
    MarkAttendanceRequest,
    TodayAttendanceResponse,
)
from app.schemas.common import PaginatedResponse
from app.services.attendance.attendance_service import AttendanceService
from app.services.student.parent_link_service import ParentLinkService

router = APIRouter(prefix="/attendance", tags=["Attendance Management"])


@router.post(
    "/mark",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Mark attendance from the device location",
)
def mark_attendance(
    payload: MarkAttendanceRequest,
    current_user: deps.CurrentUser = Depends(deps.require_student),
    service: AttendanceService = Depends(deps.get_attendance_service),
) -> AttendanceRecordResponse:
    record = service.mark_attendance(current_user.id, payload.latitude, payload.longitude)
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "",
    response_model=PaginatedResponse[AttendanceRecordResponse],
    summary="Attendance history, newest first",
)
def get_history(
    student_id: Optional[str] = Query(None, description="Required for parents and staff"),
    page: int = Query(1, ge=1),
    page_size: int = Query(30, ge=1, le=100),
    current_user: deps.CurrentUser = Depends(deps.get_current_user),
    service: AttendanceService = Depends(deps.get_attendance_service),
    link_service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> PaginatedResponse[AttendanceRecordResponse]:
    student_id = deps.resolve_student_id(current_user, student_id, link_service)
    result = service.get_history(student_id, page=page, page_size=page_size)
    return PaginatedResponse[AttendanceRecordResponse].create(
        items=[AttendanceRecordResponse.model_validate(r) for r in result["items"]],
        total_items=result["total"],
        page=result["page"],
        page_size=result["page_size"],
    )


@router.get(
    "/today",
    response_model=TodayAttendanceResponse,
    summary="Today's attendance status and window details",
)
def get_today_status(
    current_user: deps.CurrentUser = Depends(deps.require_student),
    service: AttendanceService = Depends(deps.get_attendance_service),
) -> TodayAttendanceResponse:
    return TodayAttendanceResponse.model_validate(service.get_today_status(current_user.id))


@router.get(
    "/stats",
    response_model=AttendanceStatsResponse,
    summary="Attendance for the current month",
)
def get_monthly_stats(
    student_id: Optional[str] = Query(None, description="Required for parents and staff"),
    current_user: deps.CurrentUser = Depends(deps.get_current_user),
    service: AttendanceService = Depends(deps.get_attendance_service),
    link_service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> AttendanceStatsResponse:
    stats = service.get_monthly_stats(deps.resolve_student_id(current_user, student_id, link_service))
    return AttendanceStatsResponse.model_validate(stats)


@router.post(
    "/manual",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Warden override without window or geofence checks",
)
def mark_manual_attendance(
    payload: ManualAttendanceRequest,
    current_user: deps.CurrentUser = Depends(deps.require_warden),
    service: AttendanceService = Depends(deps.get_attendance_service),
) -> AttendanceRecordResponse:
    record = service.mark_manual_attendance(
        payload.student_id,
        marked_by=current_user.id,
        notes=payload.notes,
    )
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "/by-date",
    response_model=List[AttendanceRecordResponse],
    summary="Everyone who marked for an attendance day",
)
def list_for_date(
    attendance_date: Date = Query(..., alias="date"),
    _: deps.CurrentUser = Depends(deps.require_staff),
    service: AttendanceService = Depends(deps.get_attendance_service),
) -> List[AttendanceRecordResponse]:
    return [AttendanceRecordResponse.model_validate(r) for r in service.list_for_date(attendance_date)]
