from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from ...domain.clock import utc_now
from ...domain.errors import ForbiddenError, NotFoundError, ValidationError
from ...domain.models import Attendance, AttendanceStatus, Member
from ...domain.ports.persistence import (
    AttendanceRepository,
    EventRepository,
    MemberRepository,
    ScheduleRepository,
)
from ..validation import parse_enum

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def count_by_status(records: Iterable[Attendance]) -> Dict[str, int]:
    counts = Counter(record.status for record in records)
    return {status.value: counts.get(status.value, 0) for status in AttendanceStatus}


def _day_start(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time.min, tzinfo=timezone.utc) if value else None


def _day_end(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time.max, tzinfo=timezone.utc) if value else None


def _pagination(total: int, page: int, limit: int) -> Dict[str, int]:
    return {"total": total, "page": page, "limit": limit, "pages": math.ceil(total / limit) if limit else 0}


class AttendanceService:
    """Attendance marks for events and practice sessions, one per member and session."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        members: MemberRepository,
        events: EventRepository,
        schedules: ScheduleRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._attendance = attendance
        self._members = members
        self._events = events
        self._schedules = schedules
        self._clock = clock

    def mark(
        self,
        marker: Member,
        *,
        member_id: Optional[int],
        status: Optional[str],
        event_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        comments: Optional[str] = None,
    ) -> Attendance:
        if not member_id or not status:
            raise ValidationError("Missing required fields: memberId and status.")
        if not event_id and not schedule_id:
            raise ValidationError("Either eventId or scheduleId must be provided.")
        if event_id and schedule_id:
            raise ValidationError("Provide either eventId or scheduleId, not both.")
        mark_status = parse_enum(AttendanceStatus, status, "Status")
        if self._members.get_member_by_id(member_id) is None:
            raise NotFoundError("Member not found.")
        if event_id and self._events.get_event(event_id) is None:
            raise NotFoundError("Event not found.")
        if schedule_id and self._schedules.get_schedule(schedule_id) is None:
            raise NotFoundError("Practice schedule not found.")

        record = self._attendance.upsert_attendance(
            member_id=member_id,
            event_id=event_id or None,
            schedule_id=schedule_id or None,
            status=mark_status.value,
            marked_by=marker.id,
            marked_at=self._clock(),
            comments=comments,
        )
        logger.info("Attendance for member %s marked %s by %s", member_id, mark_status.value, marker.id)
        return record

    def list_attendance(
        self,
        *,
        event_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        member_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page, limit = max(page, 1), max(limit, 1)
        records, total = self._attendance.list_attendance(
            event_id=event_id,
            schedule_id=schedule_id,
            member_id=member_id,
            status=status,
            marked_from=_day_start(start_date),
            marked_to=_day_end(end_date),
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {"records": records, "pagination": _pagination(total, page, limit)}

    def event_summary(self, event_id: int) -> Dict[str, Any]:
        """Registered members of an event next to their attendance mark, if any."""
        event = self._events.get_event(event_id)
        if event is None:
            raise NotFoundError("Event not found.")
        records, _ = self._attendance.list_attendance(event_id=event_id)
        by_member = {record.member_id: record for record in records}
        registered = []
        for registration in event.registrations:
            member = self._members.get_member_by_id(registration.member_id)
            registered.append(
                {
                    "member": member,
                    "member_id": registration.member_id,
                    "attendance": by_member.get(registration.member_id),
                }
            )
        return {
            "event": event,
            "registered": registered,
            "total_registered": len(event.registrations),
            "counts": count_by_status(records),
        }

    def schedule_summary(self, schedule_id: int) -> Dict[str, Any]:
        schedule = self._schedules.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError("Practice schedule not found.")
        records, total = self._attendance.list_attendance(schedule_id=schedule_id)
        return {"schedule": schedule, "records": records, "total": total, "counts": count_by_status(records)}

    def member_history(
        self,
        viewer: Member,
        member_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        if viewer.id != member_id and not viewer.is_reviewer:
            raise ForbiddenError("Not authorized to view this attendance history.")
        member = self._members.get_member_by_id(member_id)
        if member is None:
            raise NotFoundError("Member not found.")
        page, limit = max(page, 1), max(limit, 1)
        records, total = self._attendance.list_attendance(
            member_id=member_id,
            marked_from=_day_start(start_date),
            marked_to=_day_end(end_date),
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {
            "member": member,
            "records": records,
            "counts": count_by_status(records),
            "pagination": _pagination(total, page, limit),
        }

    def update(self, attendance_id: int, marker: Member, changes: Dict[str, Any]) -> Attendance:
        if self._attendance.get_attendance(attendance_id) is None:
            raise NotFoundError("Attendance record not found.")
        fields: Dict[str, Any] = {}
        if changes.get("status"):
            fields["status"] = parse_enum(AttendanceStatus, changes["status"], "Status").value
        if changes.get("comments") is not None:
            fields["comments"] = changes["comments"]
        if fields:
            fields["marked_by"] = marker.id
            fields["marked_at"] = self._clock()
        return self._attendance.update_attendance(attendance_id, fields)

    def delete(self, attendance_id: int) -> None:
        if not self._attendance.delete_attendance(attendance_id):
            raise NotFoundError("Attendance record not found.")
