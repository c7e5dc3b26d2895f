from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Amounts stay Decimal in Python but go over the wire as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class PropertySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    address: str


class TenantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    first_name: str
    last_name: str
    email: Optional[str] = None
    unit_number: Optional[str] = None
    property: Optional[PropertySummary] = None


class PaymentDetails(BaseModel):
    """A payment as read for receipting, with its tenant and property joined in."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    tenant_id: UUID
    amount: Money
    payment_method: str
    payment_date: date
    tenant: Optional[TenantSummary] = None


class ReceiptDraft(BaseModel):
    user_id: UUID
    payment_id: UUID
    tenant_id: UUID
    receipt_number: str
    amount: Money
    payment_method: str
    payment_date: date
    sent_to_email: Optional[str] = None


class ReceiptRecord(ReceiptDraft):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    issued_at: datetime
    sent_at: Optional[datetime] = None
    pdf_url: Optional[str] = None
    created_at: datetime


class ReceiptRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"paymentId": "0b5f7f0e-5c1e-4d53-9f57-2c1b0a6e9d41"}},
    )

    # Optional here so a missing id is reported as a 400 by the issuer, not a 422
    payment_id: Optional[str] = Field(default=None, alias="paymentId")


class ReceiptGeneratedResponse(BaseModel):
    message: str
    receipt: ReceiptRecord


class ReceiptExistsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    receipt_id: UUID = Field(alias="receiptId")


class ReceiptListResponse(BaseModel):
    receipts: List[ReceiptRecord]
