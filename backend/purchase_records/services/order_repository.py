import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from purchase_records.exceptions import PersistenceError
from purchase_records.models.purchase_order import PurchaseOrder

logger = logging.getLogger(__name__)


class OrderRepository:
    """Purchase order persistence over one SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, order: PurchaseOrder) -> PurchaseOrder:
        """
        Insert a new order and return it with id and timestamps populated.

        Raises:
            PersistenceError: constraint violation or store unavailable
        """
        try:
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to insert purchase order: {str(e)}")
            raise PersistenceError(str(e.orig) if getattr(e, "orig", None) else str(e)) from e
        return order

    def count_all(self) -> int:
        try:
            return self.db.query(func.count(PurchaseOrder.id)).scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(str(e)) from e

    def find_all_sorted_by_creation_desc(self) -> List[PurchaseOrder]:
        try:
            return (
                self.db.query(PurchaseOrder)
                .order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(str(e)) from e
