from typing import Optional

from .base import CamelPayload


class EventPayload(CamelPayload):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    event_type: Optional[str] = None
    capacity: Optional[int] = None
    image: Optional[str] = None
    status: Optional[str] = None


class TimePeriod(CamelPayload):
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class HallLocation(CamelPayload):
    lecture_hall_id: Optional[str] = None


class SchedulePayload(CamelPayload):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time_period: Optional[TimePeriod] = None
    location: Optional[HallLocation] = None
    status: Optional[str] = None
    notes: Optional[str] = None
