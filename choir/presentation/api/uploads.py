import json
from typing import Any, Optional

from fastapi import UploadFile

from ...domain.errors import ValidationError
from ...domain.ports.collaborators import FileUpload

MAX_UPLOAD_BYTES = 20 * 1024 * 1024
ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "application/pdf",
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/x-wav",
        "audio/ogg",
        "audio/webm",
    }
)


def read_upload(upload: Optional[UploadFile]) -> Optional[FileUpload]:
    """Read a multipart file into memory after checking its type and size."""
    if upload is None or not upload.filename:
        return None
    content_type = upload.content_type or "application/octet-stream"
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            "Invalid file type. Only JPEG, PNG, WebP, PDF, and audio files (MP3, WAV, OGG) are allowed."
        )
    content = upload.file.read(MAX_UPLOAD_BYTES + 1)
    if len(content) > MAX_UPLOAD_BYTES:
        raise ValidationError("File is too large. The limit is 20MB.")
    return FileUpload(content=content, filename=upload.filename, content_type=content_type)


def parse_json_field(raw: Optional[str], label: str) -> Any:
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{label} must be valid JSON.") from exc
