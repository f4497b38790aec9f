import pytest

from choir.application.services.member_auth_service import MemberAuthService
from choir.domain.errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from choir.domain.models import MemberRole, MemberStatus
from choir.domain.ports.persistence import ChallengePurpose
from choir.services.otp_service import OtpService
from choir.services.token_service import TokenService

PASSWORD = "choir-pass"


@pytest.fixture
def service(members, hasher, mailer, clock):
    return MemberAuthService(
        members,
        OtpService(members, hasher, ttl_minutes=15, clock=clock),
        TokenService("unit-secret", clock=clock),
        hasher,
        mailer,
        clock=clock,
    )


def register(service, student_id="MA12345678", email=None):
    return service.register(
        "Dilani", "Jayasuriya", student_id, email or f"{student_id.lower()}@my.sliit.lk", PASSWORD, PASSWORD
    )


def test_register_stores_an_unverified_member_with_hashed_secrets(service, members, mailer):
    member = register(service, student_id="ma12345678")

    stored = members.get_member_by_id(member.id)
    assert stored.student_id == "MA12345678"
    assert stored.status is MemberStatus.INACTIVE
    assert stored.email_verified is False
    assert stored.password_hash != PASSWORD
    code = mailer.last_code("ma12345678@my.sliit.lk")
    code_hash, _ = members.get_challenge(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    assert code not in code_hash


def test_duplicate_email_is_reported_separately(service, members, hasher):
    members.create_member(
        first_name="Other",
        last_name="Person",
        student_id="XX00000000",
        email="ma12345678@my.sliit.lk",
        password_hash=hasher.hash(PASSWORD),
    )

    with pytest.raises(ConflictError) as excinfo:
        register(service)

    assert "email" in str(excinfo.value)


def test_expired_code_asks_the_student_to_register_again(service, mailer, clock):
    register(service)
    code = mailer.last_code("ma12345678@my.sliit.lk")
    clock.advance(minutes=20)

    with pytest.raises(ValidationError) as excinfo:
        service.verify_email("MA12345678", code)
    assert "expired" in str(excinfo.value)

    with pytest.raises(ValidationError) as excinfo:
        service.verify_email("MA12345678", code)
    assert "No pending verification code" in str(excinfo.value)


def test_verify_unknown_student(service):
    with pytest.raises(NotFoundError):
        service.verify_email("ZZ00000000", "123456")


def test_verification_activates_and_issues_a_token(service, mailer):
    register(service)

    result = service.verify_email("MA12345678", mailer.last_code("ma12345678@my.sliit.lk"))

    assert result.member.email_verified is True
    assert result.member.status is MemberStatus.ACTIVE
    assert result.token


def test_login_checks_credentials_before_verification(service):
    register(service)

    with pytest.raises(AuthError):
        service.login("MA12345678", "wrong-password")
    with pytest.raises(ForbiddenError):
        service.login("MA12345678", PASSWORD)


def test_login_records_last_login(service, mailer, clock):
    register(service)
    service.verify_email("MA12345678", mailer.last_code("ma12345678@my.sliit.lk"))

    result = service.login("ma12345678", PASSWORD)

    assert result.member.last_login_at == clock.now


def test_forgot_password_is_silent_for_unverified_members(service, mailer):
    register(service)

    service.forgot_password("MA12345678")

    assert [kind for kind, _, _ in mailer.sent] == ["verification"]


def test_reset_with_wrong_code_keeps_the_old_password(service, mailer, members, hasher):
    register(service)
    service.verify_email("MA12345678", mailer.last_code("ma12345678@my.sliit.lk"))
    service.forgot_password("MA12345678")
    code = mailer.last_code("ma12345678@my.sliit.lk", kind="password_reset")
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(ValidationError):
        service.reset_password("MA12345678", wrong, "brand-new", "brand-new")

    stored = members.get_member_by_student_id("MA12345678")
    assert hasher.verify(PASSWORD, stored.password_hash)


def test_default_admin_is_created_once(service, members):
    first = service.ensure_default_admin("ad99999999", "admin-pass")
    second = service.ensure_default_admin("AD99999999", "other-pass")

    assert first.id == second.id
    assert first.role is MemberRole.ADMIN
    assert first.email_verified is True
    assert service.ensure_default_admin(None, None) is None
    assert len(members.list_members()) == 1
