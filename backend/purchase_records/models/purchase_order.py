from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, Enum
from purchase_records.database import Base


GST_OPTIONS = ("Yes", "No")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PurchaseOrder(Base):
    """
    Purchase order aggregate.

    Product lines and bill metadata are embedded as JSON and live and die with the row:
    products: [{"product_name": "...", "unit_price": 10.0, "quantity": 2, "total_price": 20.0}]
    bill_upload: {"filename": "...", "path": "uploads/...", "size": 1234, "mimetype": "image/png"}
    """
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False, index=True)  # Assigned once at creation

    buyer_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    purchase_date = Column(DateTime(timezone=True), nullable=False)
    platform = Column(String, nullable=False)
    gst = Column(Enum(*GST_OPTIONS, name="gst_option", native_enum=False, create_constraint=True), nullable=False)
    invoice_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    products = Column(JSON, nullable=False)
    grand_total = Column(Float, nullable=False)  # Stored as submitted or summed, never rounded
    bill_upload = Column(JSON, nullable=True)

    # Python-side defaults keep sub-second ordering on stores whose now() is second-resolution
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
