"""
Purchase Service - Create and list purchase orders

Creation runs validate -> number -> persist as explicit steps. The order count read
by numbering and the insert are separate statements (see order_numbering).
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from purchase_records.models.purchase_order import PurchaseOrder
from purchase_records.services.order_assembler import order_assembler
from purchase_records.services.order_numbering import assign_order_number
from purchase_records.services.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class PurchaseService:

    def create_purchase_order(
        self,
        fields: Mapping[str, str],
        repository: OrderRepository,
        bill_upload: Optional[Dict[str, Any]] = None,
    ) -> PurchaseOrder:
        order = order_assembler.assemble(fields, bill_upload)

        existing_count = repository.count_all()
        assign_order_number(order, existing_count)

        saved = repository.insert(order)
        logger.info(
            f"Purchase order {saved.order_number} saved for {saved.buyer_name} "
            f"({len(saved.products)} products, total {saved.grand_total})"
        )
        return saved

    def list_purchase_orders(self, repository: OrderRepository) -> List[PurchaseOrder]:
        return repository.find_all_sorted_by_creation_desc()


purchase_service = PurchaseService()
