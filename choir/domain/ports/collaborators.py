"""Outbound collaborators: mail delivery and blob storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class FileUpload:
    """An uploaded file already read into memory by the API layer."""

    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def subtype(self) -> str:
        return self.content_type.split("/")[-1] if self.content_type else ""


@dataclass(frozen=True, slots=True)
class StoredBlob:
    url: str
    blob_id: str


class BlobStore(Protocol):
    """Opaque object storage for receipts, sheet music and audio."""

    def upload(self, content: bytes, folder: str, *, content_type: str, filename: str) -> StoredBlob:
        ...

    def delete(self, blob_id: str) -> None:
        ...


class Mailer(Protocol):
    """Delivers one-time codes to a member's mailbox. Failures raise."""

    def send_verification_email(self, to_email: str, code: str, name: str) -> None:
        ...

    def send_password_reset_email(self, to_email: str, code: str, name: str) -> None:
        ...
