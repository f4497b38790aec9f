from datetime import timedelta

import pytest

from choir.domain.clock import utc_now
from choir.domain.errors import AuthError
from choir.domain.models import MemberRole
from choir.services.token_service import TokenService


@pytest.fixture
def member(members, hasher):
    return members.create_member(
        first_name="Kasun",
        last_name="Silva",
        student_id="EN87654321",
        email="en87654321@my.sliit.lk",
        password_hash=hasher.hash("secret1"),
        role=MemberRole.MODERATOR,
    )


def test_token_round_trips_identity_claims(member):
    service = TokenService("unit-secret", expire_minutes=5)

    claims = service.validate(service.issue(member))

    assert claims["id"] == member.id
    assert claims["role"] == "moderator"
    assert claims["studentId"] == "EN87654321"
    assert claims["exp"] - claims["iat"] == 300


def test_token_signed_with_other_secret_is_rejected(member):
    token = TokenService("first-secret").issue(member)

    with pytest.raises(AuthError):
        TokenService("second-secret").validate(token)


def test_expired_token_is_rejected(member):
    issued_long_ago = TokenService("unit-secret", expire_minutes=1, clock=lambda: utc_now() - timedelta(hours=1))
    token = issued_long_ago.issue(member)

    with pytest.raises(AuthError):
        TokenService("unit-secret").validate(token)


def test_garbage_token_is_rejected():
    with pytest.raises(AuthError):
        TokenService("unit-secret").validate("not-a-jwt")


def test_empty_secret_is_refused():
    with pytest.raises(RuntimeError):
        TokenService("")
