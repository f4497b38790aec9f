from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"
    LATE = "late"


@dataclass(slots=True)
class Attendance:
    id: int
    member_id: int
    event_id: Optional[int]
    schedule_id: Optional[int]
    status: str
    marked_by: int
    marked_at: datetime
    comments: Optional[str]
    created_at: datetime
    updated_at: datetime
