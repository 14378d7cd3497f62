import json
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from purchase_records.config import settings
from purchase_records.database import get_db
from purchase_records.exceptions import PurchaseRecordsError
from purchase_records.schemas.purchase import (
    ErrorResponse,
    PurchaseCreatedResponse,
    PurchaseListResponse,
    PurchaseOrderResponse,
)
from purchase_records.services.order_repository import OrderRepository
from purchase_records.services.purchase_service import purchase_service
from purchase_records.services.storage_service import StorageService, get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/purchase", tags=["purchases"])


def _is_empty_upload(upload: UploadFile) -> bool:
    """Browsers send an empty, unnamed part for an untouched file input"""
    return not upload.filename and not upload.size


@router.post(
    "",
    status_code=201,
    response_model=PurchaseCreatedResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_purchase(
    request: Request,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """
    Record a purchase order from a multipart form.

    Text fields: buyerName, email, purchaseDate, platform, gst, invoiceNumber, notes,
    grandTotal, and productName{i}/unitPrice{i}/quantity{i}/totalPrice{i} for i = 1, 2, ...
    File field: billUpload (optional, JPG/PNG/GIF, 30 MiB max)
    """
    fields: Dict[str, str] = {}
    bill_upload: Optional[dict] = None

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.json()
        if not isinstance(body, dict):
            raise PurchaseRecordsError("Request body must be a JSON object")
        # Non-string values keep their JSON spelling: 10 -> "10", true -> "true"
        fields = {
            key: value if isinstance(value, str) else json.dumps(value)
            for key, value in body.items() if value is not None
        }
    else:
        async with request.form() as form:
            upload = None
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    if key != settings.upload_field_name:
                        raise PurchaseRecordsError(f"Unexpected field: {key}")
                    if upload is not None:
                        raise PurchaseRecordsError("Only one bill upload is allowed")
                    upload = value
                else:
                    fields[key] = value

            # Bill is stored before the order is validated
            if upload is not None and not _is_empty_upload(upload):
                bill_upload = await storage.store_upload(upload)

    order = purchase_service.create_purchase_order(fields, OrderRepository(db), bill_upload)

    return PurchaseCreatedResponse(
        message="Purchase order saved successfully",
        order_number=order.order_number,
    )


@router.get("", response_model=PurchaseListResponse)
def list_purchases(db: Session = Depends(get_db)):
    """List all purchase orders, newest first"""
    orders = purchase_service.list_purchase_orders(OrderRepository(db))
    return PurchaseListResponse(
        count=len(orders),
        data=[PurchaseOrderResponse.model_validate(order) for order in orders],
    )
