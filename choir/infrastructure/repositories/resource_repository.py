"""Repositories for shared resources, resource requests and favourites."""

import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import NotFoundError
from ...domain.models import (
    ExternalLink,
    Favorite,
    Resource,
    ResourceContent,
    ResourceRequest,
    ResourceType,
    UploadedFile,
    Visibility,
)
from ...domain.models.review import PENDING
from ..persistence.sqlite import SQLiteDatabase

_FILE = "file"
_LINK = "link"

_RESOURCE_COLUMNS = ("song_title", "description", "visibility", "status", "file_url")


def _content_columns(content: ResourceContent) -> Tuple[str, str, Optional[str], Optional[int], Optional[str]]:
    if isinstance(content, UploadedFile):
        return _FILE, content.url, content.file_type, content.file_size, content.blob_id
    return _LINK, content.url, content.kind, None, None


def _row_to_content(row: sqlite3.Row) -> ResourceContent:
    if row["content_kind"] == _FILE:
        return UploadedFile(
            url=row["file_url"],
            file_type=row["file_type"],
            file_size=row["file_size"],
            blob_id=row["blob_id"],
        )
    return ExternalLink(url=row["file_url"], kind=row["file_type"] or row["resource_type"])


class ResourceRequestRepository:
    """Member proposals for new resources, settled by a moderator."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_request(
        self,
        *,
        song_title: str,
        description: str,
        resource_type: str,
        content: ResourceContent,
        visibility: str,
        requested_by: int,
    ) -> ResourceRequest:
        now = self._db.now()
        kind, url, file_type, file_size, blob_id = _content_columns(content)
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO resource_requests (
                    song_title, description, resource_type, content_kind, file_url, file_type,
                    file_size, blob_id, visibility, requested_by, status, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    song_title,
                    description,
                    resource_type,
                    kind,
                    url,
                    file_type,
                    file_size,
                    blob_id,
                    visibility,
                    requested_by,
                    PENDING,
                    now,
                    now,
                ),
            )
            request_id = cursor.lastrowid
        request = self.get_request(request_id)
        if request is None:
            raise NotFoundError("Resource request not found.")
        return request

    def get_request(self, request_id: int) -> Optional[ResourceRequest]:
        row = self._db.fetchone("SELECT * FROM resource_requests WHERE id = ?", (request_id,))
        return self._row_to_request(row) if row else None

    def list_requests(
        self, *, status: Optional[str] = None, requested_by: Optional[int] = None
    ) -> List[ResourceRequest]:
        clauses = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if requested_by is not None:
            clauses.append("requested_by = ?")
            params.append(requested_by)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(
            f"SELECT * FROM resource_requests {where} ORDER BY created_at DESC, id DESC", params
        )
        return [self._row_to_request(row) for row in rows]

    def delete_request(self, request_id: int, *, status: Optional[str] = None) -> bool:
        statement = "DELETE FROM resource_requests WHERE id = ?"
        params: List[Any] = [request_id]
        if status is not None:
            statement += " AND status = ?"
            params.append(status)
        with self._db.transaction() as conn:
            cursor = conn.execute(statement, params)
        return cursor.rowcount > 0

    # Review API -------------------------------------------------------------
    def get_reviewable(self, entity_id: int) -> Optional[ResourceRequest]:
        return self.get_request(entity_id)

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
                UPDATE resource_requests
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
                UPDATE resource_requests
                SET status = ?, reviewed_by = NULL, reviewed_at = NULL, reason = NULL, updated_at = ?
                WHERE id = ? AND status = ? AND reviewed_by = ?
                """,
                (PENDING, self._db.now(), entity_id, status, reviewer_id),
            )
        return cursor.rowcount == 1

    def _row_to_request(self, row: sqlite3.Row) -> ResourceRequest:
        return ResourceRequest(
            id=row["id"],
            song_title=row["song_title"],
            description=row["description"],
            resource_type=ResourceType(row["resource_type"]),
            content=_row_to_content(row),
            visibility=Visibility(row["visibility"]),
            requested_by=row["requested_by"],
            status=row["status"],
            reason=row["reason"],
            reviewed_by=row["reviewed_by"],
            reviewed_at=self._db.parse_datetime(row["reviewed_at"]),
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )


class ResourceRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create_resource(
        self,
        *,
        song_title: str,
        description: str,
        resource_type: str,
        content: ResourceContent,
        visibility: str,
        uploaded_by: int,
    ) -> Resource:
        now = self._db.now()
        kind, url, file_type, file_size, blob_id = _content_columns(content)
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO resources (
                    song_title, description, resource_type, content_kind, file_url, file_type,
                    file_size, blob_id, visibility, uploaded_by, status, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'active', ?, ?)
                """,
                (
                    song_title,
                    description,
                    resource_type,
                    kind,
                    url,
                    file_type,
                    file_size,
                    blob_id,
                    visibility,
                    uploaded_by,
                    now,
                    now,
                ),
            )
            resource_id = cursor.lastrowid
        return self._require(resource_id)

    def get_resource(self, resource_id: int) -> Optional[Resource]:
        row = self._db.fetchone("SELECT * FROM resources WHERE id = ?", (resource_id,))
        return self._row_to_resource(row) if row else None

    def list_resources(
        self,
        *,
        status: Optional[str] = None,
        resource_type: Optional[str] = None,
        visibility: Optional[str] = None,
        search: Optional[str] = None,
        visible_to_member: Optional[int] = None,
    ) -> List[Resource]:
        """List resources; ``visible_to_member`` limits rows to shared ones plus that member's uploads."""
        clauses = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if resource_type:
            clauses.append("resource_type = ?")
            params.append(resource_type)
        if visibility:
            clauses.append("visibility = ?")
            params.append(visibility)
        if search:
            clauses.append("(song_title LIKE ? OR description LIKE ?)")
            pattern = f"%{search}%"
            params.extend([pattern, pattern])
        if visible_to_member is not None:
            clauses.append("(visibility = ? OR uploaded_by = ?)")
            params.extend([Visibility.ALL_MEMBERS.value, visible_to_member])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._db.fetchall(
            f"SELECT * FROM resources {where} ORDER BY created_at DESC, id DESC", params
        )
        return [self._row_to_resource(row) for row in rows]

    def update_resource(self, resource_id: int, fields: Dict[str, Any]) -> Resource:
        self._db.update_fields("resources", resource_id, fields, allowed=_RESOURCE_COLUMNS)
        return self._require(resource_id)

    def delete_resource(self, resource_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM resources WHERE id = ?", (resource_id,))
        return cursor.rowcount > 0

    def _require(self, resource_id: int) -> Resource:
        resource = self.get_resource(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found.")
        return resource

    def _row_to_resource(self, row: sqlite3.Row) -> Resource:
        return Resource(
            id=row["id"],
            song_title=row["song_title"],
            description=row["description"],
            resource_type=ResourceType(row["resource_type"]),
            content=_row_to_content(row),
            visibility=Visibility(row["visibility"]),
            uploaded_by=row["uploaded_by"],
            status=row["status"],
            created_at=self._db.parse_datetime(row["created_at"]),
            updated_at=self._db.parse_datetime(row["updated_at"]),
        )


class FavoriteRepository:
    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def add_favorite(self, member_id: int, resource_id: int) -> Optional[Favorite]:
        now = self._db.now()
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO favorites (member_id, resource_id, created_at)
                VALUES (?, ?, ?)
                """,
                (member_id, resource_id, now),
            )
            if cursor.rowcount == 0:
                return None
            favorite_id = cursor.lastrowid
        return Favorite(
            id=favorite_id,
            member_id=member_id,
            resource_id=resource_id,
            created_at=self._db.parse_datetime(now),
        )

    def remove_favorite(self, member_id: int, resource_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM favorites WHERE member_id = ? AND resource_id = ?",
                (member_id, resource_id),
            )
        return cursor.rowcount > 0

    def list_favorites(self, member_id: int) -> List[Favorite]:
        rows = self._db.fetchall(
            "SELECT * FROM favorites WHERE member_id = ? ORDER BY created_at DESC, id DESC",
            (member_id,),
        )
        return [
            Favorite(
                id=row["id"],
                member_id=row["member_id"],
                resource_id=row["resource_id"],
                created_at=self._db.parse_datetime(row["created_at"]),
            )
            for row in rows
        ]

    def is_favorite(self, member_id: int, resource_id: int) -> bool:
        row = self._db.fetchone(
            "SELECT 1 FROM favorites WHERE member_id = ? AND resource_id = ?",
            (member_id, resource_id),
        )
        return row is not None
