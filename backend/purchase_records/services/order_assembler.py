"""
Order Assembler - Turns a flat purchase form submission into a PurchaseOrder aggregate

Product lines arrive as positionally indexed fields (productName1, unitPrice1, quantity1,
totalPrice1, productName2, ...). Scanning starts at index 1 and stops at the first index
with no productName field, so a gap ends the list even if later indices are present.
"""
import logging
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from dateutil import parser as date_parser

from purchase_records.exceptions import ValidationError
from purchase_records.models.purchase_order import PurchaseOrder

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Leading numeric prefix, so "12.50 USD" parses as 12.50 and "3 boxes" as 3
_DECIMAL_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INTEGER_PREFIX = re.compile(r"^\s*([+-]?\d+)")


class OrderAssembler:
    """Validates purchase form fields and builds an unsaved PurchaseOrder"""

    REQUIRED_FIELDS = ("buyerName", "email", "purchaseDate", "platform", "gst")

    DEFAULT_UNIT_PRICE = Decimal("0")
    DEFAULT_QUANTITY = 1

    @staticmethod
    def parse_decimal(value: Optional[str]) -> Optional[Decimal]:
        """Parse the leading decimal in value, None when there is none"""
        if value is None:
            return None
        match = _DECIMAL_PREFIX.match(str(value))
        if not match:
            return None
        try:
            return Decimal(match.group(1))
        except InvalidOperation:
            return None

    @staticmethod
    def parse_integer(value: Optional[str]) -> Optional[int]:
        """Parse the leading integer in value, None when there is none"""
        if value is None:
            return None
        match = _INTEGER_PREFIX.match(str(value))
        return int(match.group(1)) if match else None

    @staticmethod
    def parse_or_default(value: Optional[str], default: T, parser: Callable[[Optional[str]], Optional[T]]) -> T:
        """
        Parse value, falling back to default when it is missing, unparseable or zero.

        Zero counts as absent: an untouched quantity or line-total input posts 0.
        """
        parsed = parser(value)
        if parsed is None or parsed == 0:
            return default
        return parsed

    @staticmethod
    def parse_purchase_date(value: Optional[str]) -> Optional[datetime]:
        """
        Parse a date or datetime leniently: ISO-8601, "05/14/2024" (month first),
        "2024/05/14", "May 14, 2024" and similar. Naive results are taken as UTC.

        Returns None (the invalid-date marker) instead of raising; the store's
        NOT NULL constraint is what finally refuses it.
        """
        if not value:
            return None
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError):
            logger.warning(f"Unparseable purchaseDate passed through as invalid: {value!r}")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def check_required_fields(fields: Mapping[str, str]) -> None:
        missing = [name for name in OrderAssembler.REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            logger.warning(f"Purchase rejected, missing fields: {', '.join(missing)}")
            raise ValidationError("Missing required fields")

    @staticmethod
    def extract_products(fields: Mapping[str, str]) -> List[Dict[str, Any]]:
        """
        Read productName{i}/unitPrice{i}/quantity{i}/totalPrice{i} for i = 1, 2, ...

        Lines with an empty name or a unit price that is not positive are dropped.
        Amounts are returned as Decimal.
        """
        products = []
        index = 1

        while f"productName{index}" in fields:
            name = fields.get(f"productName{index}")
            unit_price = OrderAssembler.parse_or_default(
                fields.get(f"unitPrice{index}"), OrderAssembler.DEFAULT_UNIT_PRICE, OrderAssembler.parse_decimal
            )
            quantity = OrderAssembler.parse_or_default(
                fields.get(f"quantity{index}"), OrderAssembler.DEFAULT_QUANTITY, OrderAssembler.parse_integer
            )
            total_price = OrderAssembler.parse_or_default(
                fields.get(f"totalPrice{index}"), unit_price * quantity, OrderAssembler.parse_decimal
            )

            if name and unit_price > 0:
                products.append({
                    "product_name": name,
                    "unit_price": unit_price,
                    "quantity": quantity,
                    "total_price": total_price,
                })
            else:
                logger.debug(f"Dropping product line {index}: name={name!r}, unit_price={unit_price}")
            index += 1

        return products

    @staticmethod
    def compute_grand_total(fields: Mapping[str, str], products: List[Dict[str, Any]]) -> Decimal:
        """Submitted grandTotal when parseable, else the sum of line totals"""
        submitted = OrderAssembler.parse_decimal(fields.get("grandTotal"))
        if submitted is not None:
            return submitted
        return sum((p["total_price"] for p in products), Decimal("0"))

    @staticmethod
    def _to_json_line(product: Dict[str, Any]) -> Dict[str, Any]:
        """Decimals are not JSON serializable; embedded lines store floats"""
        return {
            key: float(value) if isinstance(value, Decimal) else value
            for key, value in product.items()
        }

    def assemble(self, fields: Mapping[str, str], bill_upload: Optional[Dict[str, Any]] = None) -> PurchaseOrder:
        """
        Build an unsaved PurchaseOrder from submitted form fields.

        Args:
            fields: Flat text fields of the submission
            bill_upload: Attachment metadata from the storage service, if a bill was sent

        Returns:
            Transient PurchaseOrder without an order number

        Raises:
            ValidationError: required field missing or no product line qualifies
        """
        self.check_required_fields(fields)

        products = self.extract_products(fields)
        if not products:
            logger.warning("Purchase rejected, no qualifying product lines")
            raise ValidationError("At least one product is required")

        grand_total = self.compute_grand_total(fields, products)

        return PurchaseOrder(
            buyer_name=fields["buyerName"],
            email=fields["email"],
            purchase_date=self.parse_purchase_date(fields["purchaseDate"]),
            platform=fields["platform"],
            gst=fields["gst"],
            invoice_number=fields.get("invoiceNumber"),
            notes=fields.get("notes"),
            products=[self._to_json_line(p) for p in products],
            grand_total=float(grand_total),
            bill_upload=bill_upload,
        )


# Singleton instance
order_assembler = OrderAssembler()
