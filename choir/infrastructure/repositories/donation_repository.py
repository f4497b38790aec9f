"""Repository for donations."""

import sqlite3
from datetime import datetime
from typing import Any, List, Optional

from ...domain.errors import NotFoundError
from ...domain.models import Donation, DonationStatus
from ..persistence.sqlite import SQLiteDatabase


class DonationRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_donation(
        self,
        *,
        donor_name: str,
        donor_email: str,
        amount: float,
        currency: str,
        tier: str,
        payment_method: str,
        transaction_id: str,
        message: str,
        is_anonymous: bool,
        member_id: Optional[int],
    ) -> Donation:
        now = self._db.now()
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO donations (
                    donor_name, donor_email, amount, currency, tier, payment_method,
                    transaction_id, status, message, is_anonymous, member_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    donor_name,
                    donor_email,
                    amount,
                    currency,
                    tier,
                    payment_method,
                    transaction_id,
                    DonationStatus.PENDING.value,
                    message,
                    int(is_anonymous),
                    member_id,
                    now,
                    now,
                ),
            )
            donation_id = cursor.lastrowid
        donation = self.get_donation(donation_id)
        if donation is None:
            raise NotFoundError("Donation not found.")
        return donation

    def get_donation(self, donation_id: int) -> Optional[Donation]:
        row = self._db.fetchone("SELECT * FROM donations WHERE id = ?", (donation_id,))
        return self._row_to_donation(row) if row else None

    def list_donations(
        self,
        *,
        status: Optional[str] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> List[Donation]:
        clauses = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if min_amount is not None:
            clauses.append("amount >= ?")
            params.append(min_amount)
        if max_amount is not None:
            clauses.append("amount <= ?")
            params.append(max_amount)
        if created_from:
            clauses.append("created_at >= ?")
            params.append(self._db.to_iso(created_from))
        if created_to:
            clauses.append("created_at <= ?")
            params.append(self._db.to_iso(created_to))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(
            f"SELECT * FROM donations {where} ORDER BY created_at DESC, id DESC", params
        )
        return [self._row_to_donation(row) for row in rows]

    def update_donation_status(self, donation_id: int, status: str) -> Optional[Donation]:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "UPDATE donations SET status = ?, updated_at = ? WHERE id = ?",
                (status, self._db.now(), donation_id),
            )
        if cursor.rowcount == 0:
            return None
        return self.get_donation(donation_id)

    def delete_donation(self, donation_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM donations WHERE id = ?", (donation_id,))
        return cursor.rowcount > 0

    def _row_to_donation(self, row: sqlite3.Row) -> Donation:
        return Donation(
            id=row["id"],
            donor_name=row["donor_name"],
            donor_email=row["donor_email"],
            amount=row["amount"],
            currency=row["currency"],
            tier=row["tier"],
            payment_method=row["payment_method"],
            transaction_id=row["transaction_id"],
            status=row["status"],
            message=row["message"],
            is_anonymous=bool(row["is_anonymous"]),
            member_id=row["member_id"],
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )
