from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.attendance_service import DEFAULT_PAGE_SIZE, AttendanceService
from ....core.dependencies import get_attendance_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_reviewer
from ...api.schemas.attendance import AttendanceUpdatePayload, MarkAttendancePayload
from ...api.serializers import (
    envelope,
    serialize_attendance,
    serialize_event,
    serialize_member_summary,
    serialize_schedule,
)

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


def _counts(counts: Dict[str, int]) -> Dict[str, int]:
    return {"present": counts["present"], "absent": counts["absent"], "excused": counts["excused"], "late": counts["late"]}


@router.post("/mark", status_code=status.HTTP_201_CREATED)
def mark_attendance(
    payload: MarkAttendancePayload,
    marker: Member = Depends(require_reviewer),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    record = service.mark(
        marker,
        member_id=payload.member_id,
        status=payload.status,
        event_id=payload.event_id,
        schedule_id=payload.schedule_id,
        comments=payload.comments,
    )
    return envelope(serialize_attendance(record), message="Attendance marked successfully.")


@router.get("/list")
def list_attendance(
    event_id: Optional[int] = Query(default=None, alias="eventId"),
    schedule_id: Optional[int] = Query(default=None, alias="scheduleId"),
    member_id: Optional[int] = Query(default=None, alias="memberId"),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=500),
    _: Member = Depends(require_reviewer),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    result = service.list_attendance(
        event_id=event_id,
        schedule_id=schedule_id,
        member_id=member_id,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return envelope(
        [serialize_attendance(record) for record in result["records"]],
        pagination=result["pagination"],
    )


@router.get("/event/{event_id}")
def event_attendance(
    event_id: int,
    _: Member = Depends(require_reviewer),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    summary = service.event_summary(event_id)
    return envelope(
        {
            "event": serialize_event(summary["event"]),
            "attendance": [
                {
                    "member": serialize_member_summary(entry["member"]),
                    "memberId": entry["member_id"],
                    "attendance": serialize_attendance(entry["attendance"]) if entry["attendance"] else None,
                }
                for entry in summary["registered"]
            ],
            "stats": {"totalRegistered": summary["total_registered"], **_counts(summary["counts"])},
        }
    )


@router.get("/schedule/{schedule_id}")
def schedule_attendance(
    schedule_id: int,
    _: Member = Depends(require_reviewer),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    summary = service.schedule_summary(schedule_id)
    return envelope(
        {
            "schedule": serialize_schedule(summary["schedule"]),
            "attendance": [serialize_attendance(record) for record in summary["records"]],
            "stats": {"total": summary["total"], **_counts(summary["counts"])},
        }
    )


@router.get("/member/{member_id}")
def member_attendance_history(
    member_id: int,
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=500),
    viewer: Member = Depends(get_current_member),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    history = service.member_history(
        viewer, member_id, start_date=start_date, end_date=end_date, page=page, limit=limit
    )
    return envelope(
        {
            "member": serialize_member_summary(history["member"]),
            "records": [serialize_attendance(record) for record in history["records"]],
            "stats": _counts(history["counts"]),
        },
        pagination=history["pagination"],
    )


@router.put("/{attendance_id}")
def update_attendance(
    attendance_id: int,
    payload: AttendanceUpdatePayload,
    marker: Member = Depends(require_reviewer),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    record = service.update(attendance_id, marker, payload.model_dump(exclude_unset=True))
    return envelope(serialize_attendance(record), message="Attendance updated successfully.")


@router.delete("/{attendance_id}")
def delete_attendance(
    attendance_id: int,
    _: Member = Depends(require_reviewer),
    service: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    service.delete(attendance_id)
    return envelope(message="Attendance record deleted successfully.")
