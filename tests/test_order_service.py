import pytest

from choir.application.services.order_service import OrderService
from choir.domain.ports.collaborators import FileUpload
from choir.infrastructure.repositories.merchandise_repository import MerchandiseRepository
from choir.infrastructure.repositories.order_repository import OrderRepository

RECEIPT = FileUpload(content=b"\x89PNG receipt", filename="slip.png", content_type="image/png")


class FailingOrderRepository(OrderRepository):
    def create_order(self, **kwargs):
        raise RuntimeError("database is locked")


@pytest.fixture
def buyer(members, hasher):
    return members.create_member(
        first_name="Sahan",
        last_name="Wijesinghe",
        student_id="EN30000001",
        email="en30000001@my.sliit.lk",
        password_hash=hasher.hash("secret1"),
    )


@pytest.fixture
def hoodie(database):
    return MerchandiseRepository(database).create_merchandise(
        name="Choir Hoodie",
        description="Navy, embroidered crest",
        price=4500.0,
        image=None,
        sizes=["M", "L"],
        stock=10,
        category="clothing",
        status="available",
        created_by=1,
    )


def test_receipt_is_removed_when_the_order_cannot_be_saved(database, blob_store, buyer, hoodie):
    service = OrderService(FailingOrderRepository(database), MerchandiseRepository(database), blob_store)
    items = [{"merchandiseId": hoodie.id, "size": "L", "quantity": 1}]

    with pytest.raises(RuntimeError):
        service.create_order(buyer, items, RECEIPT)

    assert blob_store.blobs == {}
    assert blob_store.deleted == ["receipts/1-slip.png"]


def test_failed_receipt_cleanup_keeps_the_original_error(database, blob_store, buyer, hoodie):
    blob_store.fail_deletes = True
    service = OrderService(FailingOrderRepository(database), MerchandiseRepository(database), blob_store)

    with pytest.raises(RuntimeError, match="database is locked"):
        service.create_order(buyer, [{"merchandiseId": hoodie.id, "size": "M", "quantity": 2}], RECEIPT)
