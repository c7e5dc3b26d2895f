from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union
from uuid import UUID

from structlog import get_logger

from app.exceptions import (
    DuplicateReceipt,
    InvalidRequest,
    PaymentNotFound,
    PersistenceError,
    StoreError,
)
from app.schemas.receipt import ReceiptDraft, ReceiptRecord
from app.services.stores import PaymentStore, ReceiptStore
from app.utils.currency import format_currency

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

RECEIPT_CREATED_MESSAGE = "Receipt generated successfully"
RECEIPT_EXISTS_MESSAGE = "Receipt already exists"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_receipt_number(now: datetime, prefix: str = "RCT") -> str:
    """Build a display number like ``RCT-2024-123456``.

    The suffix is the last six characters of the millisecond timestamp, with no
    padding. It is not unique and is never used to detect duplicates.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    timestamp = (now - EPOCH) // timedelta(milliseconds=1)
    return f"{prefix}-{now.year:04d}-{str(timestamp)[-6:]}"


@dataclass(frozen=True)
class ReceiptIssue:
    receipt: ReceiptRecord
    created: bool

    @property
    def message(self) -> str:
        return RECEIPT_CREATED_MESSAGE if self.created else RECEIPT_EXISTS_MESSAGE


class ReceiptIssuer:
    """Issues exactly one receipt per payment.

    Replaying a payment returns the receipt that already exists. Two callers
    racing on the same payment are settled by the receipt store's uniqueness
    guard: the loser gets the winner's receipt back.
    """

    def __init__(
        self,
        payments: PaymentStore,
        receipts: ReceiptStore,
        clock: Callable[[], datetime] = utcnow,
        prefix: str = "RCT",
    ):
        self.payments = payments
        self.receipts = receipts
        self.clock = clock
        self.prefix = prefix

    async def issue_receipt(self, payment_id: Union[str, UUID, None]) -> ReceiptIssue:
        payment_key = self._parse_payment_id(payment_id)

        try:
            payment = await self.payments.get_payment(payment_key)
        except StoreError as e:
            logger.error("Payment lookup failed", payment_id=str(payment_key), error=str(e))
            raise PaymentNotFound() from e
        if payment is None:
            logger.error("Payment not found", payment_id=str(payment_key))
            raise PaymentNotFound()

        existing = await self._find_existing(payment_key)
        if existing is not None:
            logger.info("Receipt already issued", receipt_id=str(existing.id), payment_id=str(payment_key))
            return ReceiptIssue(receipt=existing, created=False)

        draft = ReceiptDraft(
            user_id=payment.user_id,
            payment_id=payment_key,
            tenant_id=payment.tenant_id,
            receipt_number=generate_receipt_number(self.clock(), self.prefix),
            amount=payment.amount,
            payment_method=payment.payment_method,
            payment_date=payment.payment_date,
            sent_to_email=payment.tenant.email if payment.tenant else None,
        )

        try:
            receipt = await self.receipts.insert(draft)
        except DuplicateReceipt:
            return await self._resolve_conflict(payment_key)
        except StoreError as e:
            logger.error("Failed to create receipt", payment_id=str(payment_key), error=str(e))
            raise PersistenceError(cause=e) from e

        logger.info(
            "Receipt generated",
            receipt_number=receipt.receipt_number,
            payment_id=str(payment_key),
            amount=format_currency(receipt.amount, decimals=True),
        )
        return ReceiptIssue(receipt=receipt, created=True)

    def _parse_payment_id(self, payment_id: Union[str, UUID, None]) -> UUID:
        if isinstance(payment_id, UUID):
            return payment_id
        if payment_id is None or not str(payment_id).strip():
            raise InvalidRequest()
        try:
            return UUID(str(payment_id).strip())
        except ValueError:
            # Not an id any payment could have
            logger.warning("Malformed payment id", payment_id=payment_id)
            raise PaymentNotFound()

    async def _find_existing(self, payment_id: UUID) -> Optional[ReceiptRecord]:
        # A failed read falls through to the guarded insert
        try:
            return await self.receipts.find_by_payment(payment_id)
        except StoreError as e:
            logger.warning("Existing receipt lookup failed", payment_id=str(payment_id), error=str(e))
            return None

    async def _resolve_conflict(self, payment_id: UUID) -> ReceiptIssue:
        try:
            winner = await self.receipts.find_by_payment(payment_id)
        except StoreError as e:
            raise PersistenceError(cause=e) from e
        if winner is None:
            raise PersistenceError("Receipt conflict could not be resolved")
        logger.info("Receipt issued concurrently", receipt_id=str(winner.id), payment_id=str(payment_id))
        return ReceiptIssue(receipt=winner, created=False)
