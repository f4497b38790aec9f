"""Shared sheet music and audio resources, and the requests that propose them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class ResourceType(str, Enum):
    SHEET_MUSIC = "sheet_music"
    AUDIO_SOPRANO = "audio_soprano"
    AUDIO_ALTO = "audio_alto"
    AUDIO_TENOR = "audio_tenor"
    AUDIO_BASS = "audio_bass"
    GOOGLE_DRIVE_LINK = "google_drive_link"
    YOUTUBE_LINK = "youtube_link"

    @property
    def is_link(self) -> bool:
        return self in (ResourceType.GOOGLE_DRIVE_LINK, ResourceType.YOUTUBE_LINK)

    @property
    def is_audio(self) -> bool:
        return self.value.startswith("audio_")

    @property
    def upload_folder(self) -> str:
        return "audio" if self.is_audio else "sheet_music"


class Visibility(str, Enum):
    ALL_MEMBERS = "all_members"
    ADMIN_MODERATOR_ONLY = "admin_moderator_only"


class ResourceRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ResourceStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """A file held by the blob store."""

    url: str
    file_type: Optional[str]
    file_size: Optional[int]
    blob_id: str


@dataclass(frozen=True, slots=True)
class ExternalLink:
    """A link to content hosted elsewhere (Google Drive, YouTube)."""

    url: str
    kind: str

    @property
    def file_type(self) -> str:
        return "link"


ResourceContent = Union[UploadedFile, ExternalLink]


def content_blob_id(content: ResourceContent) -> Optional[str]:
    return content.blob_id if isinstance(content, UploadedFile) else None


@dataclass(slots=True)
class ResourceRequest:
    id: int
    song_title: str
    description: str
    resource_type: ResourceType
    content: ResourceContent
    visibility: Visibility
    requested_by: int
    status: str
    reason: Optional[str]
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Resource:
    id: int
    song_title: str
    description: str
    resource_type: ResourceType
    content: ResourceContent
    visibility: Visibility
    uploaded_by: int
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Favorite:
    id: int
    member_id: int
    resource_id: int
    created_at: datetime
