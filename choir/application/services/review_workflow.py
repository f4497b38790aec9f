"""Single pending -> terminal transition shared by orders and resource requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, Optional, TypeVar

from ...domain.clock import utc_now
from ...domain.errors import ConflictError, NotFoundError, ValidationError
from ...domain.models.review import PENDING, Reviewable
from ...domain.ports.persistence import ReviewRepository

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=Reviewable)


@dataclass(frozen=True, slots=True)
class ReviewPolicy:
    """Names and terminal statuses of one reviewable entity kind."""

    label: str
    approved_status: str
    rejected_status: str
    conflict_status_code: int = 400


@dataclass(frozen=True, slots=True)
class ReviewDecision(Generic[EntityT]):
    """The settled entity and whatever the post-transition hook produced."""

    entity: EntityT
    effect: Any = None


class ReviewWorkflow(Generic[EntityT]):
    """Moves a pending entity to exactly one terminal status.

    The status change is a conditional update on ``status = 'pending'``, so
    when two reviewers race only one of them settles the entity; the other
    receives a ConflictError naming the winning status.

    ``on_approved`` runs after an approval commits and its return value is
    handed back as ``ReviewDecision.effect``. If it raises, the approval is
    reverted to pending and the error propagates.
    ``on_rejected`` is cleanup: its errors are logged and the rejection stands.
    """

    def __init__(
        self,
        repository: ReviewRepository,
        policy: ReviewPolicy,
        *,
        on_approved: Optional[Callable[[EntityT], Any]] = None,
        on_rejected: Optional[Callable[[EntityT], None]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._policy = policy
        self._on_approved = on_approved
        self._on_rejected = on_rejected
        self._clock = clock

    @property
    def policy(self) -> ReviewPolicy:
        return self._policy

    def approve(self, entity_id: int, reviewer_id: int) -> ReviewDecision[EntityT]:
        self._require_pending(entity_id)
        entity = self._settle(entity_id, self._policy.approved_status, reviewer_id, None)
        logger.info(
            "%s %s %s by reviewer %s", self._policy.label, entity_id, entity.status, reviewer_id
        )
        if self._on_approved is None:
            return ReviewDecision(entity=entity)
        try:
            effect = self._on_approved(entity)
        except Exception:
            reopened = self._repository.reopen_review(
                entity_id, status=self._policy.approved_status, reviewer_id=reviewer_id
            )
            logger.error(
                "Approval of %s %s failed (reverted to pending: %s)",
                self._policy.label,
                entity_id,
                reopened,
                exc_info=True,
            )
            raise
        return ReviewDecision(entity=entity, effect=effect)

    def reject(self, entity_id: int, reviewer_id: int, reason: Optional[str]) -> ReviewDecision[EntityT]:
        cleaned = (reason or "").strip()
        if not cleaned:
            raise ValidationError(
                f"A reason is required to mark a {self._policy.label.lower()} "
                f"as {self._policy.rejected_status}."
            )
        self._require_pending(entity_id)
        entity = self._settle(entity_id, self._policy.rejected_status, reviewer_id, cleaned)
        logger.info(
            "%s %s %s by reviewer %s: %s", self._policy.label, entity_id, entity.status, reviewer_id, cleaned
        )
        if self._on_rejected is not None:
            try:
                self._on_rejected(entity)
            except Exception:
                logger.warning(
                    "Cleanup after rejecting %s %s failed", self._policy.label, entity_id, exc_info=True
                )
        return ReviewDecision(entity=entity)

    def _require_pending(self, entity_id: int) -> EntityT:
        entity = self._repository.get_reviewable(entity_id)
        if entity is None:
            raise NotFoundError(f"{self._policy.label} not found.")
        if entity.status != PENDING:
            raise self._already(entity.status)
        return entity

    def _settle(
        self, entity_id: int, status: str, reviewer_id: int, reason: Optional[str]
    ) -> EntityT:
        settled = self._repository.settle_review(
            entity_id,
            status=status,
            reviewer_id=reviewer_id,
            reviewed_at=self._clock(),
            reason=reason,
        )
        current = self._repository.get_reviewable(entity_id)
        if current is None:
            raise NotFoundError(f"{self._policy.label} not found.")
        if not settled:
            # Another reviewer (or the owner's delete) got there first.
            raise self._already(current.status)
        return current

    def _already(self, status: str) -> ConflictError:
        return ConflictError(
            f"{self._policy.label} is already {status}.",
            status_code=self._policy.conflict_status_code,
        )
