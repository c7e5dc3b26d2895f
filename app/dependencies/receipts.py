from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_session
from app.services.receipts import ReceiptIssuer
from app.services.stores import SqlPaymentStore, SqlReceiptStore


def get_receipt_store(session: AsyncSession = Depends(get_session)) -> SqlReceiptStore:
    return SqlReceiptStore(session)


def get_receipt_issuer(
    session: AsyncSession = Depends(get_session),
) -> ReceiptIssuer:
    return ReceiptIssuer(
        payments=SqlPaymentStore(session),
        receipts=SqlReceiptStore(session),
        prefix=settings.RECEIPT_NUMBER_PREFIX,
    )
