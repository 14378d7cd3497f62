import pytest

from scripts.reset_database import reset_database
from purchase_records.services.order_repository import OrderRepository
from purchase_records.services.purchase_service import purchase_service


@pytest.mark.integration
class TestResetDatabase:

    def test_reset_empties_store(self, test_engine, session_factory, purchase_form):
        session = session_factory()
        purchase_service.create_purchase_order(purchase_form, OrderRepository(session))
        session.close()

        assert reset_database(bind=test_engine, confirm=lambda prompt: "yes") is True

        session = session_factory()
        assert OrderRepository(session).count_all() == 0
        session.close()

    def test_abort_keeps_data(self, test_engine, session_factory, purchase_form):
        session = session_factory()
        purchase_service.create_purchase_order(purchase_form, OrderRepository(session))
        session.close()

        assert reset_database(bind=test_engine, confirm=lambda prompt: "no") is False

        session = session_factory()
        assert OrderRepository(session).count_all() == 1
        session.close()
