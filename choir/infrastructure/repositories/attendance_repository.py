"""Repository for attendance marks on events and practice sessions."""

import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import NotFoundError
from ...domain.models import Attendance
from ..persistence.sqlite import SQLiteDatabase

_UPDATABLE_COLUMNS = ("status", "comments", "marked_by", "marked_at")


class AttendanceRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def upsert_attendance(
        self,
        *,
        member_id: int,
        event_id: Optional[int],
        schedule_id: Optional[int],
        status: str,
        marked_by: int,
        marked_at: datetime,
        comments: Optional[str],
    ) -> Attendance:
        """Create the mark for member + session or overwrite the existing one."""
        now = self._db.now()
        marked = self._db.to_iso(marked_at)
        with self._db.transaction() as conn:
            existing = conn.execute(
                """
                SELECT id FROM attendance
                WHERE member_id = ? AND event_id IS ? AND schedule_id IS ?
                """,
                (member_id, event_id, schedule_id),
            ).fetchone()
            if existing:
                attendance_id = existing["id"]
                conn.execute(
                    """
                    UPDATE attendance
                    SET status = ?, marked_by = ?, marked_at = ?, comments = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (status, marked_by, marked, comments, now, attendance_id),
                )
            else:
                cursor = conn.execute(
                    """
                    INSERT INTO attendance (
                        member_id, event_id, schedule_id, status, marked_by, marked_at,
                        comments, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (member_id, event_id, schedule_id, status, marked_by, marked, comments, now, now),
                )
                attendance_id = cursor.lastrowid
        return self._require(attendance_id)

    def get_attendance(self, attendance_id: int) -> Optional[Attendance]:
        row = self._db.fetchone("SELECT * FROM attendance WHERE id = ?", (attendance_id,))
        return self._row_to_attendance(row) if row else None

    def list_attendance(
        self,
        *,
        event_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        member_id: Optional[int] = None,
        status: Optional[str] = None,
        marked_from: Optional[datetime] = None,
        marked_to: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Attendance], int]:
        """Return one page of marks together with the unpaginated total."""
        clauses = []
        params: List[Any] = []
        if event_id is not None:
            clauses.append("event_id = ?")
            params.append(event_id)
        if schedule_id is not None:
            clauses.append("schedule_id = ?")
            params.append(schedule_id)
        if member_id is not None:
            clauses.append("member_id = ?")
            params.append(member_id)
        if status:
            clauses.append("status = ?")
            params.append(status)
        if marked_from:
            clauses.append("marked_at >= ?")
            params.append(self._db.to_iso(marked_from))
        if marked_to:
            clauses.append("marked_at <= ?")
            params.append(self._db.to_iso(marked_to))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        total_row = self._db.fetchone(f"SELECT COUNT(*) AS total FROM attendance {where}", params)
        query = f"SELECT * FROM attendance {where} ORDER BY marked_at DESC, id DESC"
        page_params = list(params)
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            page_params.extend([limit, offset])
        rows = self._db.fetchall(query, page_params)
        return [self._row_to_attendance(row) for row in rows], total_row["total"]

    def update_attendance(self, attendance_id: int, fields: Dict[str, Any]) -> Attendance:
        self._db.update_fields("attendance", attendance_id, fields, allowed=_UPDATABLE_COLUMNS)
        return self._require(attendance_id)

    def delete_attendance(self, attendance_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM attendance WHERE id = ?", (attendance_id,))
        return cursor.rowcount > 0

    def _require(self, attendance_id: int) -> Attendance:
        attendance = self.get_attendance(attendance_id)
        if attendance is None:
            raise NotFoundError("Attendance record not found.")
        return attendance

    def _row_to_attendance(self, row: sqlite3.Row) -> Attendance:
        return Attendance(
            id=row["id"],
            member_id=row["member_id"],
            event_id=row["event_id"],
            schedule_id=row["schedule_id"],
            status=row["status"],
            marked_by=row["marked_by"],
            marked_at=self._db.parse_datetime(row["marked_at"]),
            comments=row["comments"],
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )
