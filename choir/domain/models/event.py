from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class EventType(str, Enum):
    PERFORMANCE = "performance"
    PRACTICE = "practice"
    CHARITY = "charity"
    COMPETITION = "competition"
    OTHER = "other"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class EventRegistration:
    member_id: int
    registered_at: datetime
    status: str = "registered"


@dataclass(slots=True)
class Event:
    id: int
    title: str
    description: str
    date: date
    time: str
    location: str
    event_type: str
    image: Optional[str]
    capacity: Optional[int]
    status: str
    created_by: int
    created_at: datetime
    updated_at: datetime
    registrations: List[EventRegistration] = field(default_factory=list)
