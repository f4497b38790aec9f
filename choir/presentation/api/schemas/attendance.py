from typing import Optional

from .base import CamelPayload


class MarkAttendancePayload(CamelPayload):
    member_id: Optional[int] = None
    status: Optional[str] = None
    event_id: Optional[int] = None
    schedule_id: Optional[int] = None
    comments: Optional[str] = None


class AttendanceUpdatePayload(CamelPayload):
    status: Optional[str] = None
    comments: Optional[str] = None
