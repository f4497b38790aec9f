"""Repository for merchandise orders and their review state."""

import json
import sqlite3
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...domain.errors import NotFoundError
from ...domain.models import Order, OrderItem, OrderStatus
from ...domain.models.review import PENDING
from ..persistence.sqlite import SQLiteDatabase


class OrderRepository:
    """Orders keep their line items as a JSON snapshot of the catalogue."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_order(
        self,
        *,
        member_id: int,
        items: List[OrderItem],
        total_amount: float,
        receipt_url: str,
        receipt_blob_id: Optional[str],
    ) -> Order:
        now = self._db.now()
        payload = json.dumps([asdict(item) for item in items], ensure_ascii=False)
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO orders (
                    member_id, items, total_amount, receipt_url, receipt_blob_id, status,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (member_id, payload, total_amount, receipt_url, receipt_blob_id, PENDING, now, now),
            )
            order_id = cursor.lastrowid
        order = self.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found.")
        return order

    def get_order(self, order_id: int) -> Optional[Order]:
        row = self._db.fetchone("SELECT * FROM orders WHERE id = ?", (order_id,))
        return self._row_to_order(row) if row else None

    def list_orders(
        self,
        *,
        status: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        member_id: Optional[int] = None,
    ) -> List[Order]:
        clauses = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if created_from:
            clauses.append("created_at >= ?")
            params.append(self._db.to_iso(created_from))
        if created_to:
            clauses.append("created_at <= ?")
            params.append(self._db.to_iso(created_to))
        if member_id is not None:
            clauses.append("member_id = ?")
            params.append(member_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(f"SELECT * FROM orders {where} ORDER BY created_at DESC, id DESC", params)
        return [self._row_to_order(row) for row in rows]

    def delete_order(self, order_id: int, *, only_pending: bool = False) -> bool:
        statement = "DELETE FROM orders WHERE id = ?"
        params: List[Any] = [order_id]
        if only_pending:
            statement += " AND status = ?"
            params.append(PENDING)
        with self._db.transaction() as conn:
            cursor = conn.execute(statement, params)
        return cursor.rowcount > 0

    def count_orders_by_status(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in OrderStatus}
        rows = self._db.fetchall("SELECT status, COUNT(*) AS total FROM orders GROUP BY status")
        for row in rows:
            counts[row["status"]] = row["total"]
        return counts

    def confirmed_revenue(self) -> float:
        row = self._db.fetchone(
            "SELECT COALESCE(SUM(total_amount), 0) AS revenue FROM orders WHERE status = ?",
            (OrderStatus.CONFIRMED.value,),
        )
        return float(row["revenue"]) if row else 0.0

    # Review API -------------------------------------------------------------
    def get_reviewable(self, entity_id: int) -> Optional[Order]:
        return self.get_order(entity_id)

    def settle_review(
        self,
        entity_id: int,
        *,
        status: str,
        reviewer_id: int,
        reviewed_at: datetime,
        reason: Optional[str],
    ) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE orders
                SET status = ?, reviewed_by = ?, reviewed_at = ?, reason = ?, updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (status, reviewer_id, self._db.to_iso(reviewed_at), reason, self._db.now(), entity_id, PENDING),
            )
        return cursor.rowcount == 1

    def reopen_review(self, entity_id: int, *, status: str, reviewer_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE orders
                SET status = ?, reviewed_by = NULL, reviewed_at = NULL, reason = NULL, updated_at = ?
                WHERE id = ? AND status = ? AND reviewed_by = ?
                """,
                (PENDING, self._db.now(), entity_id, status, reviewer_id),
            )
        return cursor.rowcount == 1

    def _row_to_order(self, row: sqlite3.Row) -> Order:
        items = [OrderItem(**item) for item in json.loads(row["items"])]
        return Order(
            id=row["id"],
            member_id=row["member_id"],
            items=items,
            total_amount=row["total_amount"],
            receipt_url=row["receipt_url"],
            receipt_blob_id=row["receipt_blob_id"],
            status=row["status"],
            reason=row["reason"],
            reviewed_by=row["reviewed_by"],
            reviewed_at=self._db.parse_datetime(row["reviewed_at"]),
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )
