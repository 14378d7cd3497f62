from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ProductLine(CamelModel):
    product_name: str
    unit_price: float
    quantity: int
    total_price: float


class AttachmentMetadata(CamelModel):
    filename: str
    path: str
    size: int
    mimetype: str


class PurchaseOrderResponse(CamelModel):
    id: int
    order_number: str
    buyer_name: str
    email: str
    purchase_date: Optional[datetime]
    platform: str
    gst: str
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    products: List[ProductLine] = []
    grand_total: float
    bill_upload: Optional[AttachmentMetadata] = None
    created_at: datetime
    updated_at: datetime


class PurchaseCreatedResponse(CamelModel):
    success: bool = True
    message: str
    order_number: str


class PurchaseListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[PurchaseOrderResponse]


class ErrorResponse(CamelModel):
    success: bool = False
    error: str


class HealthResponse(CamelModel):
    status: str
    message: str
    timestamp: datetime
