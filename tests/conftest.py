from datetime import datetime, timedelta, timezone
from typing import Dict, List, Tuple

import pytest
from faker import Faker
from fastapi.testclient import TestClient

from choir.core.app_factory import create_application
from choir.core.config import Settings
from choir.domain.errors import DeliveryError
from choir.domain.ports.collaborators import StoredBlob
from choir.infrastructure.persistence.sqlite import SQLiteDatabase
from choir.infrastructure.repositories.member_repository import MemberRepository
from choir.services.password_service import PasswordHasher

ADMIN_STUDENT_ID = "AD00000001"
ADMIN_PASSWORD = "admin-secret"
PASSWORD = "choir-pass"

fake = Faker()


class FakeMailer:
    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = False

    def send_verification_email(self, to_email: str, code: str, name: str) -> None:
        self._send("verification", to_email, code)

    def send_password_reset_email(self, to_email: str, code: str, name: str) -> None:
        self._send("password_reset", to_email, code)

    def _send(self, kind: str, to_email: str, code: str) -> None:
        if self.fail:
            raise DeliveryError("SMTP server unavailable.")
        self.sent.append((kind, to_email, code))

    def last_code(self, to_email: str, kind: str = "verification") -> str:
        for sent_kind, recipient, code in reversed(self.sent):
            if sent_kind == kind and recipient == to_email:
                return code
        raise AssertionError(f"No {kind} email sent to {to_email}")


class FakeBlobStore:
    def __init__(self) -> None:
        self.blobs: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_deletes = False
        self._counter = 0

    def upload(self, content: bytes, folder: str, *, content_type: str, filename: str) -> StoredBlob:
        self._counter += 1
        key = f"{folder}/{self._counter}-{filename}"
        self.blobs[key] = content
        return StoredBlob(url=f"https://blobs.test/{key}", blob_id=key)

    def delete(self, blob_id: str) -> None:
        self.deleted.append(blob_id)
        if self.fail_deletes:
            raise RuntimeError("blob store unavailable")
        self.blobs.pop(blob_id, None)


class MutableClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def database(tmp_path):
    db = SQLiteDatabase(tmp_path / "unit.db")
    yield db
    db.close()


@pytest.fixture
def members(database) -> MemberRepository:
    return MemberRepository(database)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "choir.db"))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("BLOB_STORAGE", "local")
    monkeypatch.setenv("ADMIN_STUDENT_ID", ADMIN_STUDENT_ID)
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.delenv("SMTP_HOST", raising=False)
    return Settings()


@pytest.fixture
def client(settings, mailer, blob_store):
    app = create_application(settings, mailer=mailer, blob_store=blob_store)
    with TestClient(app) as test_client:
        yield test_client


def student_id_for(index: int) -> str:
    return f"CS{index:08d}"


def register(client, student_id: str, password: str = PASSWORD):
    return client.post(
        "/api/auth/register",
        json={
            "firstName": fake.first_name(),
            "lastName": fake.last_name(),
            "studentId": student_id,
            "email": f"{student_id.lower()}@my.sliit.lk",
            "password": password,
            "confirmPassword": password,
        },
    )


def login_token(client, student_id: str, password: str) -> str:
    response = client.post("/api/auth/login", json={"studentId": student_id, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client) -> Dict[str, str]:
    return auth_header(login_token(client, ADMIN_STUDENT_ID, ADMIN_PASSWORD))


@pytest.fixture
def make_member(client, mailer):
    """Register and verify a member; returns (member id, auth headers)."""
    counter = {"next": 10000001}

    def _make(password: str = PASSWORD):
        student_id = student_id_for(counter["next"])
        counter["next"] += 1
        assert register(client, student_id, password).status_code == 201
        code = mailer.last_code(f"{student_id.lower()}@my.sliit.lk")
        response = client.post("/api/auth/verify-email", json={"studentId": student_id, "otp": code})
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        return data["member"]["id"], auth_header(data["token"])

    return _make
