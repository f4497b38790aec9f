"""Repository for Member persistence."""

import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import ConflictError, NotFoundError
from ...domain.models import Member, MemberRole, MemberStatus
from ...domain.ports.persistence import ChallengePurpose
from ..persistence.sqlite import SQLiteDatabase

_CHALLENGE_COLUMNS = {
    ChallengePurpose.EMAIL_VERIFICATION: ("verification_code_hash", "verification_expires_at"),
    ChallengePurpose.PASSWORD_RESET: ("password_reset_code_hash", "password_reset_expires_at"),
}

_PROFILE_COLUMNS = ("first_name", "last_name", "phone_number", "bio", "avatar")


class MemberRepository:
    """Repository for managing Member records in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_member(
        self,
        *,
        first_name: str,
        last_name: str,
        student_id: str,
        email: str,
        password_hash: str,
        role: MemberRole = MemberRole.MEMBER,
        status: MemberStatus = MemberStatus.INACTIVE,
        email_verified: bool = False,
    ) -> Member:
        """Insert a new member; unique student id and email are enforced by the table."""
        now = self._db.now()
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO members (
                        first_name, last_name, student_id, email, password_hash,
                        role, status, email_verified, member_since, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        first_name,
                        last_name,
                        student_id,
                        email,
                        password_hash,
                        MemberRole(role).value,
                        MemberStatus(status).value,
                        int(email_verified),
                        now,
                        now,
                        now,
                    ),
                )
                member_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            message = str(exc)
            if "student_id" in message:
                raise ConflictError("A member with this student ID already exists.") from exc
            if "email" in message:
                raise ConflictError("A member with this email already exists.") from exc
            raise
        return self._require(member_id)

    def get_member_by_id(self, member_id: int) -> Optional[Member]:
        row = self._db.fetchone("SELECT * FROM members WHERE id = ?", (member_id,))
        return self._row_to_member(row) if row else None

    def get_member_by_student_id(self, student_id: str) -> Optional[Member]:
        row = self._db.fetchone("SELECT * FROM members WHERE student_id = ?", (student_id,))
        return self._row_to_member(row) if row else None

    def get_member_by_email(self, email: str) -> Optional[Member]:
        row = self._db.fetchone("SELECT * FROM members WHERE email = ?", (email,))
        return self._row_to_member(row) if row else None

    def list_members(self) -> List[Member]:
        rows = self._db.fetchall("SELECT * FROM members ORDER BY created_at DESC, id DESC")
        return [self._row_to_member(row) for row in rows]

    def mark_email_verified(self, member_id: int) -> Member:
        """Flip the member to verified and active in one statement."""
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE members
                SET email_verified = 1, status = ?, verification_code_hash = NULL,
                    verification_expires_at = NULL, updated_at = ?
                WHERE id = ?
                """,
                (MemberStatus.ACTIVE.value, self._db.now(), member_id),
            )
        return self._require(member_id)

    def record_login(self, member_id: int, logged_in_at: datetime) -> Member:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE members SET last_login_at = ? WHERE id = ?",
                (self._db.to_iso(logged_in_at), member_id),
            )
        return self._require(member_id)

    def update_password(self, member_id: int, password_hash: str) -> Member:
        self._db.update_fields(
            "members", member_id, {"password_hash": password_hash}, allowed=("password_hash",)
        )
        return self._require(member_id)

    def update_profile(self, member_id: int, fields: Dict[str, Any]) -> Member:
        self._db.update_fields("members", member_id, fields, allowed=_PROFILE_COLUMNS)
        return self._require(member_id)

    def update_status(self, member_id: int, status: MemberStatus) -> Member:
        self._db.update_fields("members", member_id, {"status": status}, allowed=("status",))
        return self._require(member_id)

    def delete_member(self, member_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM members WHERE id = ?", (member_id,))
        return cursor.rowcount > 0

    # Challenge API ----------------------------------------------------------
    def store_challenge(
        self, member_id: int, purpose: ChallengePurpose, code_hash: str, expires_at: datetime
    ) -> None:
        hash_column, expiry_column = _CHALLENGE_COLUMNS[purpose]
        expiry = self._db.to_iso(expires_at, timespec="microseconds")
        with self._db.transaction() as conn:
            conn.execute(
                f"UPDATE members SET {hash_column} = ?, {expiry_column} = ?, updated_at = ? WHERE id = ?",
                (code_hash, expiry, self._db.now(), member_id),
            )

    def get_challenge(
        self, member_id: int, purpose: ChallengePurpose
    ) -> Optional[Tuple[str, datetime]]:
        hash_column, expiry_column = _CHALLENGE_COLUMNS[purpose]
        row = self._db.fetchone(
            f"SELECT {hash_column} AS code_hash, {expiry_column} AS expires_at FROM members WHERE id = ?",
            (member_id,),
        )
        if not row or not row["code_hash"] or not row["expires_at"]:
            return None
        return row["code_hash"], self._db.parse_datetime(row["expires_at"])

    def consume_challenge(self, member_id: int, purpose: ChallengePurpose, code_hash: str) -> bool:
        hash_column, expiry_column = _CHALLENGE_COLUMNS[purpose]
        with self._db.transaction() as conn:
            cursor = conn.execute(
                f"""
                UPDATE members SET {hash_column} = NULL, {expiry_column} = NULL, updated_at = ?
                WHERE id = ? AND {hash_column} = ?
                """,
                (self._db.now(), member_id, code_hash),
            )
        return cursor.rowcount == 1

    def clear_challenge(self, member_id: int, purpose: ChallengePurpose) -> None:
        hash_column, expiry_column = _CHALLENGE_COLUMNS[purpose]
        with self._db.transaction() as conn:
            conn.execute(
                f"UPDATE members SET {hash_column} = NULL, {expiry_column} = NULL, updated_at = ? WHERE id = ?",
                (self._db.now(), member_id),
            )

    def _require(self, member_id: int) -> Member:
        member = self.get_member_by_id(member_id)
        if member is None:
            raise NotFoundError("Member not found.")
        return member

    def _row_to_member(self, row: sqlite3.Row) -> Member:
        return Member(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            student_id=row["student_id"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=MemberRole(row["role"]),
            status=MemberStatus(row["status"]),
            email_verified=bool(row["email_verified"]),
            verification_code_hash=row["verification_code_hash"],
            verification_expires_at=self._db.parse_datetime(row["verification_expires_at"]),
            password_reset_code_hash=row["password_reset_code_hash"],
            password_reset_expires_at=self._db.parse_datetime(row["password_reset_expires_at"]),
            last_login_at=self._db.parse_datetime(row["last_login_at"]),
            phone_number=row["phone_number"],
            bio=row["bio"] or "",
            avatar=row["avatar"],
            member_since=self._db.parse_datetime(row["member_since"]),
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )
