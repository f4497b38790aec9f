import threading

import pytest

from choir.application.services.review_workflow import ReviewPolicy, ReviewWorkflow
from choir.domain.errors import ConflictError, NotFoundError, ValidationError
from choir.domain.models import OrderItem
from choir.infrastructure.repositories.order_repository import OrderRepository

POLICY = ReviewPolicy(label="Order", approved_status="confirmed", rejected_status="declined")


@pytest.fixture
def orders(database):
    return OrderRepository(database)


@pytest.fixture
def order(orders):
    return orders.create_order(
        member_id=7,
        items=[OrderItem(merchandise_id=1, name="Choir Tee", size="M", quantity=2, price=1500.0)],
        total_amount=3000.0,
        receipt_url="https://blobs.test/receipts/1.png",
        receipt_blob_id="receipts/1.png",
    )


class CompetingReviewRepository:
    """Lets another reviewer settle the entity between the pending check and the update."""

    def __init__(self, inner: OrderRepository, competing_status: str) -> None:
        self._inner = inner
        self._competing_status = competing_status
        self._raced = False

    def get_reviewable(self, entity_id):
        entity = self._inner.get_reviewable(entity_id)
        if not self._raced:
            self._raced = True
            self._inner.settle_review(
                entity_id, status=self._competing_status, reviewer_id=99, reviewed_at=entity.created_at, reason="x"
            )
        return entity

    def settle_review(self, entity_id, **kwargs):
        return self._inner.settle_review(entity_id, **kwargs)


def test_approve_records_reviewer_and_runs_hook(orders, order):
    seen = []
    workflow = ReviewWorkflow(orders, POLICY, on_approved=lambda entity: seen.append(entity.id) or "published")

    decision = workflow.approve(order.id, reviewer_id=3)

    assert decision.entity.status == "confirmed"
    assert decision.entity.reviewed_by == 3
    assert decision.entity.reviewed_at is not None
    assert decision.entity.reason is None
    assert decision.effect == "published"
    assert seen == [order.id]


def test_reject_requires_a_reason(orders, order):
    workflow = ReviewWorkflow(orders, POLICY)

    with pytest.raises(ValidationError):
        workflow.reject(order.id, reviewer_id=3, reason="   ")

    assert orders.get_order(order.id).status == "pending"


def test_reject_stores_trimmed_reason(orders, order):
    decision = ReviewWorkflow(orders, POLICY).reject(order.id, reviewer_id=3, reason="  blurry receipt ")

    assert decision.entity.status == "declined"
    assert decision.entity.reason == "blurry receipt"


def test_settled_entity_cannot_be_reviewed_again(orders, order):
    workflow = ReviewWorkflow(orders, POLICY)
    workflow.reject(order.id, reviewer_id=3, reason="duplicate")

    with pytest.raises(ConflictError) as excinfo:
        workflow.approve(order.id, reviewer_id=4)

    assert excinfo.value.status_code == 400
    assert "already declined" in str(excinfo.value)
    assert orders.get_order(order.id).reviewed_by == 3


def test_missing_entity_is_not_found(orders):
    with pytest.raises(NotFoundError):
        ReviewWorkflow(orders, POLICY).approve(12345, reviewer_id=1)


def test_rejection_cleanup_failure_does_not_undo_rejection(orders, order):
    def failing_cleanup(entity):
        raise RuntimeError("blob store down")

    decision = ReviewWorkflow(orders, POLICY, on_rejected=failing_cleanup).reject(order.id, 3, "duplicate")

    assert decision.entity.status == "declined"
    assert orders.get_order(order.id).status == "declined"


def test_failed_approval_hook_returns_entity_to_pending(orders, order):
    def failing_publish(entity):
        raise RuntimeError("publish failed")

    with pytest.raises(RuntimeError):
        ReviewWorkflow(orders, POLICY, on_approved=failing_publish).approve(order.id, 3)

    reopened = orders.get_order(order.id)
    assert reopened.status == "pending"
    assert reopened.reviewed_by is None
    assert reopened.reviewed_at is None
    assert ReviewWorkflow(orders, POLICY).approve(order.id, 4).entity.status == "confirmed"


def test_losing_reviewer_sees_winning_status(orders, order):
    racing = CompetingReviewRepository(orders, competing_status="declined")
    hook_calls = []
    workflow = ReviewWorkflow(racing, POLICY, on_approved=hook_calls.append)

    with pytest.raises(ConflictError) as excinfo:
        workflow.approve(order.id, reviewer_id=3)

    assert "already declined" in str(excinfo.value)
    assert hook_calls == []
    assert orders.get_order(order.id).reviewed_by == 99


def test_concurrent_reviews_settle_exactly_once(orders, order):
    workflow = ReviewWorkflow(orders, POLICY)
    barrier = threading.Barrier(8)
    outcomes = []
    lock = threading.Lock()

    def review(index):
        barrier.wait()
        try:
            if index % 2:
                workflow.approve(order.id, reviewer_id=index)
            else:
                workflow.reject(order.id, reviewer_id=index, reason="checked")
            result = "won"
        except ConflictError:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=review, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("won") == 1
    assert outcomes.count("conflict") == 7
    assert orders.get_order(order.id).status in {"confirmed", "declined"}
