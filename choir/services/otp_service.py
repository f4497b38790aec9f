"""One-time code issuance and verification."""

import logging
import secrets
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from ..domain.clock import utc_now
from ..domain.ports.persistence import ChallengePurpose, ChallengeRepository
from .password_service import PasswordHasher

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


class OtpOutcome(str, Enum):
    OK = "ok"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    NONE_PENDING = "none_pending"


class OtpService:
    """Issues six-digit codes and checks them against the stored hash.

    Only the bcrypt hash and its expiry are persisted. Issuing a code for a
    purpose replaces any unconsumed code of that purpose; expiry is checked
    lazily when a code is presented.
    """

    def __init__(
        self,
        challenges: ChallengeRepository,
        hasher: PasswordHasher,
        ttl_minutes: int = 15,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._challenges = challenges
        self._hasher = hasher
        self._ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock

    def issue(self, member_id: int, purpose: ChallengePurpose) -> str:
        code = str(secrets.randbelow(OTP_MAX - OTP_MIN + 1) + OTP_MIN)
        expires_at = self._clock() + self._ttl
        self._challenges.store_challenge(member_id, purpose, self._hasher.hash(code), expires_at)
        logger.info("Issued %s code for member %s", purpose.value, member_id)
        return code

    def verify(self, member_id: int, code: str, purpose: ChallengePurpose) -> OtpOutcome:
        challenge = self._challenges.get_challenge(member_id, purpose)
        if challenge is None:
            return OtpOutcome.NONE_PENDING
        code_hash, expires_at = challenge
        if self._clock() > expires_at:
            self._challenges.clear_challenge(member_id, purpose)
            return OtpOutcome.EXPIRED
        if not self._hasher.verify(str(code).strip(), code_hash):
            return OtpOutcome.MISMATCH
        # A concurrent verify or re-issue may have replaced the hash since it was read.
        if not self._challenges.consume_challenge(member_id, purpose, code_hash):
            return OtpOutcome.NONE_PENDING
        return OtpOutcome.OK
