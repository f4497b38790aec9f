from typing import Optional

from .base import CamelPayload


class ResourceUpdatePayload(CamelPayload):
    song_title: Optional[str] = None
    description: Optional[str] = None
    visibility: Optional[str] = None
    status: Optional[str] = None
    file_url: Optional[str] = None


class FavoritePayload(CamelPayload):
    resource_id: Optional[int] = None
