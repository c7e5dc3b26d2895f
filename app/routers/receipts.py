from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from structlog import get_logger

from app.dependencies.auth import get_current_user
from app.dependencies.receipts import get_receipt_issuer, get_receipt_store
from app.exceptions import ReceiptNotFound
from app.schemas.receipt import (
    ReceiptExistsResponse,
    ReceiptGeneratedResponse,
    ReceiptListResponse,
    ReceiptRecord,
    ReceiptRequest,
)
from app.services.receipts import ReceiptIssuer
from app.services.stores import ReceiptStore

logger = get_logger(__name__)
router = APIRouter(tags=["receipts"])


def _landlord_id(user: dict) -> UUID:
    try:
        return UUID(str(user.get("user_id") or user.get("id")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")


# /generate-receipt keeps the path the dashboard already calls
@router.options("/generate-receipt", include_in_schema=False)
@router.options("/api/v1/receipts/generate", include_in_schema=False)
async def generate_receipt_options() -> Response:
    return Response(status_code=200)


@router.post("/generate-receipt", response_model=None)
@router.post("/api/v1/receipts/generate", response_model=None)
async def generate_receipt(
    request: Optional[ReceiptRequest] = Body(default=None),
    user: dict = Depends(get_current_user),
    issuer: ReceiptIssuer = Depends(get_receipt_issuer),
) -> dict:
    # An absent body is the same mistake as an absent paymentId
    issue = await issuer.issue_receipt(request.payment_id if request else None)
    if issue.created:
        return ReceiptGeneratedResponse(message=issue.message, receipt=issue.receipt).model_dump(mode="json")
    return ReceiptExistsResponse(message=issue.message, receipt_id=issue.receipt.id).model_dump(
        mode="json", by_alias=True
    )


@router.get("/api/v1/receipts", response_model=ReceiptListResponse)
async def list_receipts(
    tenant_id: Optional[UUID] = None,
    user: dict = Depends(get_current_user),
    store: ReceiptStore = Depends(get_receipt_store),
):
    receipts = await store.list_receipts(user_id=_landlord_id(user), tenant_id=tenant_id)
    return ReceiptListResponse(receipts=receipts)


@router.get("/api/v1/receipts/{receipt_id}", response_model=ReceiptRecord)
async def get_receipt(
    receipt_id: UUID,
    user: dict = Depends(get_current_user),
    store: ReceiptStore = Depends(get_receipt_store),
):
    receipt = await store.get(receipt_id, user_id=_landlord_id(user))
    if receipt is None:
        raise ReceiptNotFound()
    return receipt
