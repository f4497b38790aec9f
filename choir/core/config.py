import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/choir.db")).resolve()
        self.jwt_secret = os.getenv("JWT_SECRET", "change-me")
        self.jwt_expire_minutes = self._get_int("JWT_EXPIRE_MINUTES", default=60 * 24 * 7)
        self.otp_ttl_minutes = self._get_int("OTP_TTL_MINUTES", default=15)
        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=12)
        self.student_email_domain = os.getenv("STUDENT_EMAIL_DOMAIN", "my.sliit.lk")

        self.smtp_host = os.getenv("SMTP_HOST")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL") or self.smtp_username
        self.smtp_from_name = os.getenv("SMTP_FROM_NAME", "University Choir")

        self.blob_storage = os.getenv("BLOB_STORAGE", "local").lower()
        if self.blob_storage not in ("local", "s3"):
            raise RuntimeError("BLOB_STORAGE must be either 'local' or 's3'")
        self.upload_dir = Path(os.getenv("UPLOAD_DIR", "data/uploads")).resolve()
        self.uploads_base_url = os.getenv("UPLOADS_BASE_URL", "/uploads")
        if self.blob_storage == "s3":
            self.s3_bucket_name = self._get("S3_BUCKET_NAME")
        else:
            self.s3_bucket_name = os.getenv("S3_BUCKET_NAME")
        self.s3_region = os.getenv("S3_REGION", "us-east-1")
        self.s3_access_key = os.getenv("S3_ACCESS_KEY_ID")
        self.s3_secret_key = os.getenv("S3_SECRET_ACCESS_KEY")
        self.s3_public_base_url = os.getenv("S3_PUBLIC_BASE_URL")

        self.admin_student_id = os.getenv("ADMIN_STUDENT_ID")
        self.admin_password = os.getenv("ADMIN_PASSWORD")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
