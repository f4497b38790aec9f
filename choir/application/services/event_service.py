from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from ...domain.clock import utc_now
from ...domain.errors import NotFoundError, ValidationError
from ...domain.models import Event, EventStatus, EventType, Member, PracticeSchedule
from ...domain.ports.persistence import EventRepository, RegistrationOutcome, ScheduleRepository
from ..validation import clean_text, parse_date, parse_enum

logger = logging.getLogger(__name__)

DEFAULT_EVENT_CAPACITY = 100
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _parse_capacity(value: Any) -> int:
    try:
        capacity = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Capacity must be a whole number.") from exc
    if capacity < 1:
        raise ValidationError("Capacity must be at least 1.")
    return capacity


class EventService:
    """Choir events and member registrations."""

    def __init__(self, events: EventRepository, clock: Callable[[], datetime] = utc_now) -> None:
        self._events = events
        self._clock = clock

    def create_event(
        self,
        actor: Member,
        *,
        title: Optional[str],
        event_date: Any,
        event_type: Optional[str],
        description: Optional[str] = None,
        time: Optional[str] = None,
        location: Optional[str] = None,
        capacity: Any = None,
        image: Optional[str] = None,
    ) -> Event:
        if not clean_text(title) or not event_date or not event_type:
            raise ValidationError("Missing required fields: title, date and eventType.")
        event = self._events.create_event(
            title=clean_text(title),
            description=clean_text(description),
            event_date=parse_date(event_date, "Date"),
            time=clean_text(time),
            location=clean_text(location),
            event_type=parse_enum(EventType, event_type, "Event type").value,
            capacity=DEFAULT_EVENT_CAPACITY if capacity is None else _parse_capacity(capacity),
            image=image,
            created_by=actor.id,
        )
        logger.info("Event %s created by member %s", event.id, actor.id)
        return event

    def list_events(
        self,
        *,
        status: Optional[str] = None,
        event_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Event]:
        return self._events.list_events(
            status=status, event_type=event_type, date_from=start_date, date_to=end_date
        )

    def get_event(self, event_id: int) -> Event:
        event = self._events.get_event(event_id)
        if event is None:
            raise NotFoundError("Event not found.")
        return event

    def update_event(self, event_id: int, changes: Dict[str, Any]) -> Event:
        self.get_event(event_id)
        fields: Dict[str, Any] = {}
        for key, value in changes.items():
            if value is None:
                continue
            if key == "title":
                if not clean_text(value):
                    raise ValidationError("Title cannot be empty.")
                fields["title"] = clean_text(value)
            elif key in ("description", "time", "location", "image"):
                fields[key] = value
            elif key == "date":
                fields["event_date"] = parse_date(value, "Date")
            elif key == "event_type":
                fields["event_type"] = parse_enum(EventType, value, "Event type").value
            elif key == "status":
                fields["status"] = parse_enum(EventStatus, value, "Status").value
            elif key == "capacity":
                fields["capacity"] = _parse_capacity(value)
        return self._events.update_event(event_id, fields)

    def delete_event(self, event_id: int) -> None:
        if not self._events.delete_event(event_id):
            raise NotFoundError("Event not found.")
        logger.info("Event %s deleted", event_id)

    def register(self, event_id: int, member: Member) -> Event:
        outcome = self._events.add_registration(event_id, member.id, self._clock())
        if outcome is RegistrationOutcome.MISSING_EVENT:
            raise NotFoundError("Event not found.")
        if outcome is RegistrationOutcome.ALREADY_REGISTERED:
            raise ValidationError("Already registered for this event.")
        if outcome is RegistrationOutcome.FULL:
            raise ValidationError("Event is at capacity.")
        logger.info("Member %s registered for event %s", member.id, event_id)
        return self.get_event(event_id)

    def unregister(self, event_id: int, member: Member) -> Event:
        self.get_event(event_id)
        self._events.remove_registration(event_id, member.id)
        return self.get_event(event_id)


class ScheduleService:
    """Practice sessions held in lecture halls."""

    def __init__(self, schedules: ScheduleRepository) -> None:
        self._schedules = schedules

    def create_schedule(
        self,
        actor: Member,
        *,
        title: Optional[str],
        schedule_date: Any,
        start_time: Optional[str],
        end_time: Optional[str],
        lecture_hall_id: Optional[str],
        description: Optional[str] = None,
    ) -> PracticeSchedule:
        if not clean_text(title) or not schedule_date or not start_time or not end_time or not clean_text(lecture_hall_id):
            raise ValidationError(
                "Missing required fields: title, date, timePeriod (startTime, endTime), "
                "and location (lectureHallId)."
            )
        self._check_time_period(start_time, end_time)
        schedule = self._schedules.create_schedule(
            title=clean_text(title),
            description=clean_text(description) or None,
            schedule_date=parse_date(schedule_date, "Date"),
            start_time=start_time,
            end_time=end_time,
            lecture_hall_id=clean_text(lecture_hall_id).upper(),
            created_by=actor.id,
        )
        logger.info("Practice schedule %s created by member %s", schedule.id, actor.id)
        return schedule

    def list_schedules(
        self,
        *,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[PracticeSchedule]:
        return self._schedules.list_schedules(status=status, date_from=start_date, date_to=end_date)

    def get_schedule(self, schedule_id: int) -> PracticeSchedule:
        schedule = self._schedules.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError("Practice schedule not found.")
        return schedule

    def update_schedule(self, schedule_id: int, changes: Dict[str, Any]) -> PracticeSchedule:
        schedule = self.get_schedule(schedule_id)
        fields: Dict[str, Any] = {}
        if clean_text(changes.get("title")):
            fields["title"] = clean_text(changes["title"])
        if "description" in changes and changes["description"] is not None:
            fields["description"] = changes["description"]
        if changes.get("date"):
            fields["schedule_date"] = parse_date(changes["date"], "Date")
        start = changes.get("start_time") or schedule.start_time
        end = changes.get("end_time") or schedule.end_time
        if changes.get("start_time") or changes.get("end_time"):
            self._check_time_period(start, end)
            fields["start_time"] = start
            fields["end_time"] = end
        if clean_text(changes.get("lecture_hall_id")):
            fields["lecture_hall_id"] = clean_text(changes["lecture_hall_id"]).upper()
        if changes.get("status"):
            fields["status"] = parse_enum(EventStatus, changes["status"], "Status").value
        if changes.get("notes") is not None:
            fields["notes"] = changes["notes"]
        return self._schedules.update_schedule(schedule_id, fields)

    def delete_schedule(self, schedule_id: int) -> None:
        if not self._schedules.delete_schedule(schedule_id):
            raise NotFoundError("Practice schedule not found.")
        logger.info("Practice schedule %s deleted", schedule_id)

    @staticmethod
    def _check_time_period(start_time: str, end_time: str) -> None:
        if not TIME_PATTERN.match(start_time) or not TIME_PATTERN.match(end_time):
            raise ValidationError("Times must use the HH:MM format.")
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time.")
