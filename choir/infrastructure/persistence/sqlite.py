import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

SCHEMA = """
CREATE TABLE IF NOT EXISTS members (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    student_id TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'member',
    status TEXT NOT NULL DEFAULT 'inactive',
    email_verified INTEGER NOT NULL DEFAULT 0,
    verification_code_hash TEXT,
    verification_expires_at TEXT,
    password_reset_code_hash TEXT,
    password_reset_expires_at TEXT,
    last_login_at TEXT,
    phone_number TEXT,
    bio TEXT NOT NULL DEFAULT '',
    avatar TEXT,
    member_since TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS merchandise (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    price REAL NOT NULL,
    image TEXT,
    sizes TEXT NOT NULL,
    stock INTEGER NOT NULL DEFAULT 0,
    category TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'available',
    created_by INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS orders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    member_id INTEGER NOT NULL,
    items TEXT NOT NULL,
    total_amount REAL NOT NULL,
    receipt_url TEXT NOT NULL,
    receipt_blob_id TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    reason TEXT,
    reviewed_by INTEGER,
    reviewed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_orders_member ON orders(member_id);
CREATE INDEX IF NOT EXISTS idx_orders_status ON orders(status);

CREATE TABLE IF NOT EXISTS resource_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    song_title TEXT NOT NULL,
    description TEXT NOT NULL,
    resource_type TEXT NOT NULL,
    content_kind TEXT NOT NULL,
    file_url TEXT NOT NULL,
    file_type TEXT,
    file_size INTEGER,
    blob_id TEXT,
    visibility TEXT NOT NULL,
    requested_by INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    reason TEXT,
    reviewed_by INTEGER,
    reviewed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_resource_requests_requested_by ON resource_requests(requested_by);
CREATE INDEX IF NOT EXISTS idx_resource_requests_status ON resource_requests(status);

CREATE TABLE IF NOT EXISTS resources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    song_title TEXT NOT NULL,
    description TEXT NOT NULL,
    resource_type TEXT NOT NULL,
    content_kind TEXT NOT NULL,
    file_url TEXT NOT NULL,
    file_type TEXT,
    file_size INTEGER,
    blob_id TEXT,
    visibility TEXT NOT NULL,
    uploaded_by INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'active',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_resources_song_title ON resources(song_title);

CREATE TABLE IF NOT EXISTS favorites (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    member_id INTEGER NOT NULL,
    resource_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE(member_id, resource_id),
    FOREIGN KEY(resource_id) REFERENCES resources(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    event_date TEXT NOT NULL,
    time TEXT NOT NULL DEFAULT '',
    location TEXT NOT NULL DEFAULT '',
    event_type TEXT NOT NULL,
    image TEXT,
    capacity INTEGER,
    status TEXT NOT NULL DEFAULT 'upcoming',
    created_by INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS event_registrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id INTEGER NOT NULL,
    member_id INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'registered',
    registered_at TEXT NOT NULL,
    UNIQUE(event_id, member_id),
    FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS practice_schedules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    schedule_date TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    lecture_hall_id TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'upcoming',
    notes TEXT,
    created_by INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS attendance (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    member_id INTEGER NOT NULL,
    event_id INTEGER,
    schedule_id INTEGER,
    status TEXT NOT NULL,
    marked_by INTEGER NOT NULL,
    marked_at TEXT NOT NULL,
    comments TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_attendance_member ON attendance(member_id);
CREATE INDEX IF NOT EXISTS idx_attendance_event ON attendance(event_id, member_id);
CREATE INDEX IF NOT EXISTS idx_attendance_schedule ON attendance(schedule_id, member_id);

CREATE TABLE IF NOT EXISTS donations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    donor_name TEXT NOT NULL,
    donor_email TEXT NOT NULL,
    amount REAL NOT NULL,
    currency TEXT NOT NULL DEFAULT 'USD',
    tier TEXT NOT NULL DEFAULT 'supporter',
    payment_method TEXT NOT NULL DEFAULT 'credit_card',
    transaction_id TEXT NOT NULL UNIQUE,
    status TEXT NOT NULL DEFAULT 'pending',
    message TEXT NOT NULL DEFAULT '',
    is_anonymous INTEGER NOT NULL DEFAULT 0,
    member_id INTEGER,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class SQLiteDatabase:
    """Shared SQLite connection used by every repository.

    All statements run under one lock, so a single conditional UPDATE or
    DELETE is atomic with respect to every other request in the process.
    """

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._lock, self._conn:
            self._conn.executescript(SCHEMA)

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock, self._conn:
            yield self._conn

    def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            cur = self._conn.execute(query, params)
            return cur.fetchone()

    def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            cur = self._conn.execute(query, params)
            return cur.fetchall()

    def update_fields(
        self, table: str, row_id: int, fields: Dict[str, Any], *, allowed: Iterable[str]
    ) -> None:
        allowed_columns = set(allowed)
        updates = []
        params: List[Any] = []
        for column, value in fields.items():
            if column not in allowed_columns:
                raise ValueError(f"Column {column} cannot be updated on {table}.")
            updates.append(f"{column} = ?")
            params.append(self.to_db_value(value))
        if not updates:
            return
        updates.append("updated_at = ?")
        params.append(self.now())
        params.append(row_id)
        statement = f"UPDATE {table} SET {', '.join(updates)} WHERE id = ?"
        with self.transaction() as conn:
            conn.execute(statement, params)

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    @staticmethod
    def to_iso(value: Optional[datetime], *, timespec: str = "seconds") -> Optional[str]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec=timespec)

    @classmethod
    def to_db_value(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return cls.to_iso(value)
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (list, dict)):
            return json.dumps(value, ensure_ascii=False)
        if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
            return value.value
        return value

    @staticmethod
    def parse_datetime(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    @staticmethod
    def parse_date(value: str) -> date:
        return date.fromisoformat(value[:10])
