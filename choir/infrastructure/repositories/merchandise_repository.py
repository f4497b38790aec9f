"""Repository for the merchandise catalogue."""

import json
import sqlite3
from typing import Any, Dict, List, Optional

from ...domain.errors import NotFoundError
from ...domain.models import Merchandise
from ..persistence.sqlite import SQLiteDatabase

_UPDATABLE_COLUMNS = ("name", "description", "price", "image", "sizes", "stock", "category", "status")


class MerchandiseRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_merchandise(
        self,
        *,
        name: str,
        description: str,
        price: float,
        image: Optional[str],
        sizes: List[str],
        stock: int,
        category: str,
        status: str,
        created_by: int,
    ) -> Merchandise:
        now = self._db.now()
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO merchandise (
                    name, description, price, image, sizes, stock, category, status,
                    created_by, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (name, description, price, image, json.dumps(sizes), stock, category, status, created_by, now, now),
            )
            merchandise_id = cursor.lastrowid
        return self._require(merchandise_id)

    def get_merchandise(self, merchandise_id: int) -> Optional[Merchandise]:
        row = self._db.fetchone("SELECT * FROM merchandise WHERE id = ?", (merchandise_id,))
        return self._row_to_merchandise(row) if row else None

    def list_merchandise(
        self, *, category: Optional[str] = None, status: Optional[str] = None
    ) -> List[Merchandise]:
        clauses = []
        params: List[Any] = []
        if category:
            clauses.append("category = ?")
            params.append(category)
        if status:
            clauses.append("status = ?")
            params.append(status)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(
            f"SELECT * FROM merchandise {where} ORDER BY created_at DESC, id DESC", params
        )
        return [self._row_to_merchandise(row) for row in rows]

    def update_merchandise(self, merchandise_id: int, fields: Dict[str, Any]) -> Merchandise:
        self._db.update_fields("merchandise", merchandise_id, fields, allowed=_UPDATABLE_COLUMNS)
        return self._require(merchandise_id)

    def delete_merchandise(self, merchandise_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM merchandise WHERE id = ?", (merchandise_id,))
        return cursor.rowcount > 0

    def _require(self, merchandise_id: int) -> Merchandise:
        item = self.get_merchandise(merchandise_id)
        if item is None:
            raise NotFoundError("Merchandise not found.")
        return item

    def _row_to_merchandise(self, row: sqlite3.Row) -> Merchandise:
        return Merchandise(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            price=row["price"],
            image=row["image"],
            sizes=json.loads(row["sizes"]),
            stock=row["stock"],
            category=row["category"],
            status=row["status"],
            created_by=row["created_by"],
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )
