from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.attendance_service import AttendanceService
from ....application.services.event_service import ScheduleService
from ....core.dependencies import get_attendance_service, get_schedule_service
from ....domain.models import Member
from ...api.dependencies import require_reviewer
from ...api.schemas.attendance import MarkAttendancePayload
from ...api.schemas.events import SchedulePayload
from ...api.serializers import envelope, serialize_attendance, serialize_schedule

router = APIRouter(prefix="/api/schedules", tags=["Practice Schedules"])


def _flatten(payload: SchedulePayload) -> Dict[str, Any]:
    changes = payload.model_dump(exclude_unset=True, exclude={"time_period", "location"})
    if payload.time_period is not None:
        changes["start_time"] = payload.time_period.start_time
        changes["end_time"] = payload.time_period.end_time
    if payload.location is not None:
        changes["lecture_hall_id"] = payload.location.lecture_hall_id
    return changes


@router.post("", status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: SchedulePayload,
    actor: Member = Depends(require_reviewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> Dict[str, Any]:
    fields = _flatten(payload)
    schedule = service.create_schedule(
        actor,
        title=fields.get("title"),
        schedule_date=fields.get("date"),
        start_time=fields.get("start_time"),
        end_time=fields.get("end_time"),
        lecture_hall_id=fields.get("lecture_hall_id"),
        description=fields.get("description"),
    )
    return envelope(serialize_schedule(schedule), message="Practice schedule created successfully.")


@router.get("")
def list_schedules(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    service: ScheduleService = Depends(get_schedule_service),
) -> Dict[str, Any]:
    schedules = service.list_schedules(status=status_filter, start_date=start_date, end_date=end_date)
    return envelope([serialize_schedule(item) for item in schedules], count=len(schedules))


@router.get("/{schedule_id}")
def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)) -> Dict[str, Any]:
    return envelope(serialize_schedule(service.get_schedule(schedule_id)))


@router.put("/{schedule_id}")
def update_schedule(
    schedule_id: int,
    payload: SchedulePayload,
    _: Member = Depends(require_reviewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> Dict[str, Any]:
    schedule = service.update_schedule(schedule_id, _flatten(payload))
    return envelope(serialize_schedule(schedule), message="Practice schedule updated successfully.")


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: int,
    _: Member = Depends(require_reviewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> Dict[str, Any]:
    service.delete_schedule(schedule_id)
    return envelope(message="Practice schedule deleted successfully.")


@router.post("/{schedule_id}/attendance")
def mark_schedule_attendance(
    schedule_id: int,
    payload: MarkAttendancePayload,
    marker: Member = Depends(require_reviewer),
    attendance: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    record = attendance.mark(
        marker,
        member_id=payload.member_id,
        status=payload.status,
        schedule_id=schedule_id,
        comments=payload.comments,
    )
    return envelope(serialize_attendance(record), message="Attendance marked successfully.")


@router.get("/{schedule_id}/attendance")
def schedule_attendance(
    schedule_id: int,
    attendance: AttendanceService = Depends(get_attendance_service),
) -> Dict[str, Any]:
    summary = attendance.schedule_summary(schedule_id)
    return envelope([serialize_attendance(record) for record in summary["records"]])
