from typing import List, Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from structlog import get_logger

from app.exceptions import DuplicateReceipt, StoreError
from app.models import Payment, Receipt, Tenant
from app.schemas.receipt import PaymentDetails, ReceiptDraft, ReceiptRecord

logger = get_logger(__name__)

PAYMENT_UNIQUE_MARKERS = ("uq_receipts_payment_id", "receipts.payment_id")


class PaymentStore(Protocol):
    async def get_payment(self, payment_id: UUID) -> Optional[PaymentDetails]:
        ...


class ReceiptStore(Protocol):
    async def find_by_payment(self, payment_id: UUID) -> Optional[ReceiptRecord]:
        ...

    async def insert(self, draft: ReceiptDraft) -> ReceiptRecord:
        ...

    async def get(self, receipt_id: UUID, user_id: Optional[UUID] = None) -> Optional[ReceiptRecord]:
        ...

    async def list_receipts(
        self, user_id: Optional[UUID] = None, tenant_id: Optional[UUID] = None
    ) -> List[ReceiptRecord]:
        ...


def _is_payment_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in PAYMENT_UNIQUE_MARKERS)


class SqlPaymentStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_payment(self, payment_id: UUID) -> Optional[PaymentDetails]:
        stmt = (
            select(Payment)
            .options(joinedload(Payment.tenant).joinedload(Tenant.property))
            .where(Payment.id == payment_id)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(str(e)) from e
        payment = result.scalar_one_or_none()
        if payment is None:
            return None
        return PaymentDetails.model_validate(payment)


class SqlReceiptStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _one(self, stmt) -> Optional[ReceiptRecord]:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            # Postgres aborts the transaction on a failed statement; later writes need a clean one
            await self.session.rollback()
            raise StoreError(str(e)) from e
        receipt = result.scalars().first()
        return ReceiptRecord.model_validate(receipt) if receipt else None

    async def find_by_payment(self, payment_id: UUID) -> Optional[ReceiptRecord]:
        return await self._one(select(Receipt).where(Receipt.payment_id == payment_id))

    async def get(self, receipt_id: UUID, user_id: Optional[UUID] = None) -> Optional[ReceiptRecord]:
        stmt = select(Receipt).where(Receipt.id == receipt_id)
        if user_id is not None:
            stmt = stmt.where(Receipt.user_id == user_id)
        return await self._one(stmt)

    async def list_receipts(
        self, user_id: Optional[UUID] = None, tenant_id: Optional[UUID] = None
    ) -> List[ReceiptRecord]:
        stmt = select(Receipt).order_by(Receipt.created_at.desc())
        if user_id is not None:
            stmt = stmt.where(Receipt.user_id == user_id)
        if tenant_id is not None:
            stmt = stmt.where(Receipt.tenant_id == tenant_id)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(str(e)) from e
        return [ReceiptRecord.model_validate(r) for r in result.scalars().all()]

    async def insert(self, draft: ReceiptDraft) -> ReceiptRecord:
        """Insert one receipt, relying on ``uq_receipts_payment_id`` to reject a second one."""
        receipt = Receipt(**draft.model_dump())
        self.session.add(receipt)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_payment_conflict(e):
                raise DuplicateReceipt(draft.payment_id) from e
            logger.error("Receipt insert rejected", payment_id=str(draft.payment_id), error=str(e.orig))
            raise StoreError(str(e.orig)) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Receipt insert failed", payment_id=str(draft.payment_id), error=str(e))
            raise StoreError(str(e)) from e
        await self.session.refresh(receipt)
        return ReceiptRecord.model_validate(receipt)
