from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(slots=True)
class PracticeSchedule:
    id: int
    title: str
    description: Optional[str]
    date: date
    start_time: str
    end_time: str
    lecture_hall_id: str
    status: str
    notes: Optional[str]
    created_by: int
    created_at: datetime
    updated_at: datetime
