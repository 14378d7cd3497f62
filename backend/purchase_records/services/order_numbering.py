"""
Order numbers: <prefix>-<creation epoch ms>-<sequence>, e.g. BM-1718000000000-0042.

The sequence is the current order count plus one, zero-padded to at least four digits.
Counting and inserting are two separate statements with no lock between them, so two
creations racing in the same millisecond can produce the same number; the unique index
on order_number then rejects the second insert. Uniqueness is best-effort only.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from purchase_records.config import settings

logger = logging.getLogger(__name__)


def format_order_number(created_at: datetime, existing_count: int,
                        prefix: Optional[str] = None, width: Optional[int] = None) -> str:
    prefix = prefix or settings.order_number_prefix
    width = width or settings.order_sequence_width
    millis = int(created_at.timestamp()) * 1000 + created_at.microsecond // 1000
    return f"{prefix}-{millis}-{str(existing_count + 1).zfill(width)}"


def assign_order_number(order, existing_count: int, now: Optional[datetime] = None) -> str:
    """
    Stamp a new, unsaved order with its number and creation instant.

    Raises:
        ValueError: the order already carries a number
    """
    if order.order_number:
        raise ValueError(f"Order already numbered: {order.order_number}")

    created_at = now or datetime.now(timezone.utc)
    order.created_at = created_at
    order.updated_at = created_at
    order.order_number = format_order_number(created_at, existing_count)
    logger.debug(f"Assigned order number {order.order_number} (existing orders: {existing_count})")
    return order.order_number
