"""Blob storage for receipts, sheet music and audio uploads."""

import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from ...domain.errors import ChoirError
from ...domain.ports.collaborators import StoredBlob

logger = logging.getLogger(__name__)


def _object_key(folder: str, filename: str, content_type: str) -> str:
    suffix = Path(filename).suffix
    if not suffix and content_type:
        suffix = mimetypes.guess_extension(content_type) or ""
    return f"{folder.strip('/')}/{uuid.uuid4().hex}{suffix.lower()}"


class LocalBlobStore:
    """Keeps uploads on the local disk and serves them under ``public_base_url``."""

    def __init__(self, root: Path, public_base_url: str = "/uploads"):
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def upload(self, content: bytes, folder: str, *, content_type: str, filename: str) -> StoredBlob:
        key = _object_key(folder, filename, content_type)
        target = self.root / key
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info("Stored upload %s (%d bytes)", key, len(content))
        return StoredBlob(url=f"{self.public_base_url}/{key}", blob_id=key)

    def delete(self, blob_id: str) -> None:
        target = (self.root / blob_id).resolve()
        if self.root.resolve() not in target.parents:
            raise ChoirError(f"Refusing to delete blob outside of storage root: {blob_id}")
        target.unlink(missing_ok=True)
        logger.info("Deleted upload %s", blob_id)


class S3BlobStore:
    """Stores uploads in an S3 bucket; ``blob_id`` is the object key."""

    def __init__(
        self,
        bucket_name: str,
        region: str,
        aws_access_key: Optional[str] = None,
        aws_secret_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        self.bucket_name = bucket_name
        self.region = region
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id=aws_access_key,
            aws_secret_access_key=aws_secret_key,
            region_name=region,
        )
        self.public_base_url = (
            public_base_url or f"https://{bucket_name}.s3.{region}.amazonaws.com"
        ).rstrip("/")
        logger.info("S3BlobStore initialized with bucket: %s", bucket_name)

    def upload(self, content: bytes, folder: str, *, content_type: str, filename: str) -> StoredBlob:
        key = _object_key(folder, filename, content_type)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except ClientError as exc:
            raise ChoirError(f"Failed to upload file: {exc}") from exc
        return StoredBlob(url=f"{self.public_base_url}/{key}", blob_id=key)

    def delete(self, blob_id: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=blob_id)
        except ClientError as exc:
            raise ChoirError(f"Failed to delete file {blob_id}: {exc}") from exc
