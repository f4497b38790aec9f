import pytest

from choir.domain.ports.persistence import ChallengePurpose
from choir.services.otp_service import OtpOutcome, OtpService


@pytest.fixture
def member(members, hasher):
    return members.create_member(
        first_name="Ada",
        last_name="Perera",
        student_id="IT12345678",
        email="it12345678@my.sliit.lk",
        password_hash=hasher.hash("secret1"),
    )


@pytest.fixture
def otp(members, hasher, clock):
    return OtpService(members, hasher, ttl_minutes=15, clock=clock)


def test_issued_code_is_six_digits_and_verifies_once(otp, member):
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)

    assert len(code) == 6 and code.isdigit()
    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK
    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.NONE_PENDING


def test_wrong_code_is_a_mismatch_and_keeps_the_challenge(otp, member):
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    wrong = "000000" if code != "000000" else "111111"

    assert otp.verify(member.id, wrong, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.MISMATCH
    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK


def test_expired_code_is_rejected_and_cleared(otp, member, clock):
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    clock.advance(minutes=16)

    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.EXPIRED
    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.NONE_PENDING


def test_code_still_valid_just_before_expiry(otp, member, clock):
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    clock.advance(minutes=14, seconds=59)

    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK


def test_reissue_replaces_previous_code(otp, member):
    first = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    second = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    if first == second:
        pytest.skip("random codes collided")

    assert otp.verify(member.id, first, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.MISMATCH
    assert otp.verify(member.id, second, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK


def test_purposes_are_independent(otp, member):
    verification = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)

    assert otp.verify(member.id, verification, ChallengePurpose.PASSWORD_RESET) is OtpOutcome.NONE_PENDING
    assert otp.verify(member.id, verification, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK


def test_only_the_hash_is_stored(otp, member, members):
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)

    stored_hash, _ = members.get_challenge(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    assert code not in stored_hash


def test_code_is_valid_at_exactly_the_expiry_instant(otp, member, clock):
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    clock.advance(minutes=15)

    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK


def test_sub_second_issue_time_is_not_rounded_away(otp, member, clock):
    clock.advance(microseconds=900000)
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    clock.advance(minutes=14, seconds=59, microseconds=600000)

    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.OK


def test_code_expires_one_microsecond_after_the_window(otp, member, clock):
    clock.advance(microseconds=900000)
    code = otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
    clock.advance(minutes=15, microseconds=1)

    assert otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION) is OtpOutcome.EXPIRED
