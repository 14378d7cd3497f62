from purchase_records.schemas.purchase import (
    ProductLine,
    AttachmentMetadata,
    PurchaseOrderResponse,
    PurchaseCreatedResponse,
    PurchaseListResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ProductLine",
    "AttachmentMetadata",
    "PurchaseOrderResponse",
    "PurchaseCreatedResponse",
    "PurchaseListResponse",
    "ErrorResponse",
    "HealthResponse",
]
