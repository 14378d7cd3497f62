"""
Integration tests for purchase order persistence and the create/list service.
"""
from datetime import datetime, timedelta, timezone

import pytest

from purchase_records.exceptions import PersistenceError, ValidationError
from purchase_records.models.purchase_order import PurchaseOrder
from purchase_records.services.order_repository import OrderRepository
from purchase_records.services.purchase_service import purchase_service


def make_order(order_number: str, created_at: datetime, **overrides) -> PurchaseOrder:
    values = dict(
        order_number=order_number,
        buyer_name="Buyer",
        email="buyer@example.com",
        purchase_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        platform="Flipkart",
        gst="No",
        products=[{"product_name": "Pen", "unit_price": 1.5, "quantity": 2, "total_price": 3.0}],
        grand_total=3,
        created_at=created_at,
        updated_at=created_at,
    )
    values.update(overrides)
    return PurchaseOrder(**values)


@pytest.mark.integration
class TestOrderRepository:

    def test_insert_populates_id(self, db_session):
        repo = OrderRepository(db_session)
        saved = repo.insert(make_order("BM-1-0001", datetime.now(timezone.utc)))

        assert saved.id is not None
        assert saved.created_at is not None
        assert repo.count_all() == 1

    def test_find_all_newest_first(self, db_session):
        repo = OrderRepository(db_session)
        base = datetime(2024, 6, 1, tzinfo=timezone.utc)
        for i in range(3):
            repo.insert(make_order(f"BM-{i}-000{i + 1}", base + timedelta(seconds=i)))

        numbers = [o.order_number for o in repo.find_all_sorted_by_creation_desc()]
        assert numbers == ["BM-2-0003", "BM-1-0002", "BM-0-0001"]

    def test_duplicate_order_number_is_persistence_error(self, db_session):
        repo = OrderRepository(db_session)
        now = datetime.now(timezone.utc)
        repo.insert(make_order("BM-1-0001", now))

        with pytest.raises(PersistenceError):
            repo.insert(make_order("BM-1-0001", now))
        assert repo.count_all() == 1

    def test_invalid_gst_is_refused_by_store(self, db_session):
        repo = OrderRepository(db_session)
        with pytest.raises(PersistenceError):
            repo.insert(make_order("BM-1-0001", datetime.now(timezone.utc), gst="Maybe"))
        assert repo.count_all() == 0

    def test_missing_purchase_date_is_refused_by_store(self, db_session):
        repo = OrderRepository(db_session)
        with pytest.raises(PersistenceError):
            repo.insert(make_order("BM-1-0001", datetime.now(timezone.utc), purchase_date=None))
        assert repo.count_all() == 0


@pytest.mark.integration
class TestPurchaseService:

    def test_create_assigns_sequence_from_count(self, db_session, purchase_form):
        repo = OrderRepository(db_session)

        first = purchase_service.create_purchase_order(purchase_form, repo)
        second = purchase_service.create_purchase_order(purchase_form, repo)

        assert first.order_number.endswith("-0001")
        assert second.order_number.endswith("-0002")
        assert first.order_number != second.order_number

    def test_rejected_submission_persists_nothing(self, db_session, purchase_form):
        repo = OrderRepository(db_session)
        del purchase_form["productName1"]

        with pytest.raises(ValidationError):
            purchase_service.create_purchase_order(purchase_form, repo)
        assert repo.count_all() == 0

    def test_list_returns_created_orders(self, db_session, purchase_form):
        repo = OrderRepository(db_session)
        created = [purchase_service.create_purchase_order(purchase_form, repo) for _ in range(3)]

        listed = purchase_service.list_purchase_orders(repo)
        assert [o.order_number for o in listed] == [o.order_number for o in reversed(created)]
