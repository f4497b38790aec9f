"""Repositories for events and practice schedules."""

import sqlite3
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ...domain.errors import NotFoundError
from ...domain.models import Event, EventRegistration, EventStatus, PracticeSchedule
from ...domain.ports.persistence import RegistrationOutcome
from ..persistence.sqlite import SQLiteDatabase

_EVENT_COLUMNS = (
    "title",
    "description",
    "event_date",
    "time",
    "location",
    "event_type",
    "image",
    "capacity",
    "status",
)

_SCHEDULE_COLUMNS = (
    "title",
    "description",
    "schedule_date",
    "start_time",
    "end_time",
    "lecture_hall_id",
    "status",
    "notes",
)


class EventRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_event(
        self,
        *,
        title: str,
        description: str,
        event_date: date,
        time: str,
        location: str,
        event_type: str,
        capacity: Optional[int],
        image: Optional[str],
        created_by: int,
    ) -> Event:
        now = self._db.now()
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO events (
                    title, description, event_date, time, location, event_type, image,
                    capacity, status, created_by, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    event_date.isoformat(),
                    time,
                    location,
                    event_type,
                    image,
                    capacity,
                    EventStatus.UPCOMING.value,
                    created_by,
                    now,
                    now,
                ),
            )
            event_id = cursor.lastrowid
        return self._require(event_id)

    def get_event(self, event_id: int) -> Optional[Event]:
        row = self._db.fetchone("SELECT * FROM events WHERE id = ?", (event_id,))
        if not row:
            return None
        registrations = self._db.fetchall(
            "SELECT * FROM event_registrations WHERE event_id = ? ORDER BY registered_at, id",
            (event_id,),
        )
        return self._row_to_event(row, registrations)

    def list_events(
        self,
        *,
        status: Optional[str] = None,
        event_type: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Event]:
        clauses = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if event_type:
            clauses.append("event_type = ?")
            params.append(event_type)
        if date_from:
            clauses.append("event_date >= ?")
            params.append(date_from.isoformat())
        if date_to:
            clauses.append("event_date <= ?")
            params.append(date_to.isoformat())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(f"SELECT * FROM events {where} ORDER BY event_date, id", params)
        registrations: Dict[int, List[sqlite3.Row]] = {}
        for reg in self._db.fetchall("SELECT * FROM event_registrations ORDER BY registered_at, id"):
            registrations.setdefault(reg["event_id"], []).append(reg)
        return [self._row_to_event(row, registrations.get(row["id"], [])) for row in rows]

    def update_event(self, event_id: int, fields: Dict[str, Any]) -> Event:
        self._db.update_fields("events", event_id, fields, allowed=_EVENT_COLUMNS)
        return self._require(event_id)

    def delete_event(self, event_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
        return cursor.rowcount > 0

    def add_registration(
        self, event_id: int, member_id: int, registered_at: datetime
    ) -> RegistrationOutcome:
        """Check capacity and insert the registration inside a single locked transaction."""
        with self._db.transaction() as conn:
            event = conn.execute("SELECT capacity FROM events WHERE id = ?", (event_id,)).fetchone()
            if event is None:
                return RegistrationOutcome.MISSING_EVENT
            existing = conn.execute(
                "SELECT 1 FROM event_registrations WHERE event_id = ? AND member_id = ?",
                (event_id, member_id),
            ).fetchone()
            if existing:
                return RegistrationOutcome.ALREADY_REGISTERED
            if event["capacity"] is not None:
                taken = conn.execute(
                    "SELECT COUNT(*) FROM event_registrations WHERE event_id = ? AND status != 'cancelled'",
                    (event_id,),
                ).fetchone()[0]
                if taken >= event["capacity"]:
                    return RegistrationOutcome.FULL
            conn.execute(
                """
                INSERT INTO event_registrations (event_id, member_id, status, registered_at)
                VALUES (?, ?, 'registered', ?)
                """,
                (event_id, member_id, self._db.to_iso(registered_at)),
            )
        return RegistrationOutcome.REGISTERED

    def remove_registration(self, event_id: int, member_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM event_registrations WHERE event_id = ? AND member_id = ?",
                (event_id, member_id),
            )
        return cursor.rowcount > 0

    def _require(self, event_id: int) -> Event:
        event = self.get_event(event_id)
        if event is None:
            raise NotFoundError("Event not found.")
        return event

    def _row_to_event(self, row: sqlite3.Row, registrations: List[sqlite3.Row]) -> Event:
        return Event(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            date=self._db.parse_date(row["event_date"]),
            time=row["time"],
            location=row["location"],
            event_type=row["event_type"],
            image=row["image"],
            capacity=row["capacity"],
            status=row["status"],
            created_by=row["created_by"],
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
            registrations=[
                EventRegistration(
                    member_id=reg["member_id"],
                    registered_at=self._db.parse_datetime(reg["registered_at"]),
                    status=reg["status"],
                )
                for reg in registrations
            ],
        )


class ScheduleRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_schedule(
        self,
        *,
        title: str,
        description: Optional[str],
        schedule_date: date,
        start_time: str,
        end_time: str,
        lecture_hall_id: str,
        created_by: int,
    ) -> PracticeSchedule:
        now = self._db.now()
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO practice_schedules (
                    title, description, schedule_date, start_time, end_time, lecture_hall_id,
                    status, created_by, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    schedule_date.isoformat(),
                    start_time,
                    end_time,
                    lecture_hall_id,
                    EventStatus.UPCOMING.value,
                    created_by,
                    now,
                    now,
                ),
            )
            schedule_id = cursor.lastrowid
        return self._require(schedule_id)

    def get_schedule(self, schedule_id: int) -> Optional[PracticeSchedule]:
        row = self._db.fetchone("SELECT * FROM practice_schedules WHERE id = ?", (schedule_id,))
        return self._row_to_schedule(row) if row else None

    def list_schedules(
        self,
        *,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[PracticeSchedule]:
        clauses = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if date_from:
            clauses.append("schedule_date >= ?")
            params.append(date_from.isoformat())
        if date_to:
            clauses.append("schedule_date <= ?")
            params.append(date_to.isoformat())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(
            f"SELECT * FROM practice_schedules {where} ORDER BY schedule_date, start_time, id", params
        )
        return [self._row_to_schedule(row) for row in rows]

    def update_schedule(self, schedule_id: int, fields: Dict[str, Any]) -> PracticeSchedule:
        self._db.update_fields("practice_schedules", schedule_id, fields, allowed=_SCHEDULE_COLUMNS)
        return self._require(schedule_id)

    def delete_schedule(self, schedule_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM practice_schedules WHERE id = ?", (schedule_id,))
        return cursor.rowcount > 0

    def _require(self, schedule_id: int) -> PracticeSchedule:
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError("Practice schedule not found.")
        return schedule

    def _row_to_schedule(self, row: sqlite3.Row) -> PracticeSchedule:
        return PracticeSchedule(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            date=self._db.parse_date(row["schedule_date"]),
            start_time=row["start_time"],
            end_time=row["end_time"],
            lecture_hall_id=row["lecture_hall_id"],
            status=row["status"],
            notes=row["notes"],
            created_by=row["created_by"],
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )
