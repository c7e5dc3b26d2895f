import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.dependencies.auth import get_current_user
from app.dependencies.receipts import get_receipt_issuer, get_receipt_store
from app.exceptions import DuplicateReceipt, StoreError
from app.main import app
from app.models import Base, Payment, Property, Tenant
from app.schemas.receipt import PaymentDetails, PropertySummary, ReceiptRecord, TenantSummary
from app.services.receipts import ReceiptIssuer

LANDLORD_ID = uuid4()
OTHER_LANDLORD_ID = uuid4()
FIXED_NOW = datetime(2024, 12, 10, 9, 30, 0, 123456, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


class InMemoryPaymentStore:
    def __init__(self, payments=()):
        self.payments = {p.id: p for p in payments}
        self.fail = False

    async def get_payment(self, payment_id):
        await asyncio.sleep(0)
        if self.fail:
            raise StoreError("connection refused")
        return self.payments.get(payment_id)


class InMemoryReceiptStore:
    """Receipt store fake that enforces one receipt per payment like the real table."""

    def __init__(self):
        self.rows = {}
        self.insert_attempts = 0
        self.fail_inserts = False
        self.fail_reads = False

    async def find_by_payment(self, payment_id):
        await asyncio.sleep(0)
        if self.fail_reads:
            raise StoreError("read timeout")
        return next((r for r in self.rows.values() if r.payment_id == payment_id), None)

    async def insert(self, draft):
        self.insert_attempts += 1
        await asyncio.sleep(0)
        if self.fail_inserts:
            raise StoreError("connection reset by peer")
        if any(r.payment_id == draft.payment_id for r in self.rows.values()):
            raise DuplicateReceipt(draft.payment_id)
        now = datetime.now(timezone.utc)
        record = ReceiptRecord(id=uuid4(), issued_at=now, created_at=now, **draft.model_dump())
        self.rows[record.id] = record
        return record

    async def get(self, receipt_id, user_id=None):
        record = self.rows.get(receipt_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            return None
        return record

    async def list_receipts(self, user_id=None, tenant_id=None):
        records = [
            r for r in self.rows.values()
            if (user_id is None or r.user_id == user_id)
            and (tenant_id is None or r.tenant_id == tenant_id)
        ]
        return sorted(records, key=lambda r: r.created_at, reverse=True)


def make_payment(
    amount="1450.00",
    payment_method="bank transfer",
    payment_date=date(2024, 12, 10),
    email="sarah@example.com",
    user_id=LANDLORD_ID,
    tenant_id=None,
):
    return PaymentDetails(
        id=uuid4(),
        user_id=user_id,
        tenant_id=tenant_id or uuid4(),
        amount=Decimal(amount),
        payment_method=payment_method,
        payment_date=payment_date,
        tenant=TenantSummary(
            first_name="Sarah",
            last_name="Wanjiku",
            email=email,
            unit_number="A4",
            property=PropertySummary(name="Kilimani Heights", address="14 Argwings Kodhek Rd"),
        ),
    )


@pytest.fixture
def payment():
    return make_payment()


@pytest.fixture
def payment_store(payment):
    return InMemoryPaymentStore([payment])


@pytest.fixture
def receipt_store():
    return InMemoryReceiptStore()


@pytest.fixture
def issuer(payment_store, receipt_store):
    return ReceiptIssuer(payment_store, receipt_store, clock=fixed_clock)


@pytest_asyncio.fixture
async def client(issuer, receipt_store):
    app.dependency_overrides[get_current_user] = lambda: {"user_id": str(LANDLORD_ID), "role": "Landlord"}
    app.dependency_overrides[get_receipt_issuer] = lambda: issuer
    app.dependency_overrides[get_receipt_store] = lambda: receipt_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def sqlite_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return async_sessionmaker(sqlite_engine, expire_on_commit=False)


async def seed_payment(session_factory, email="sarah@example.com", amount="1450.00", user_id=LANDLORD_ID):
    """Insert a property, tenant and payment; returns (payment_id, tenant_id)."""
    async with session_factory() as session:
        prop = Property(user_id=user_id, name="Kilimani Heights", address="14 Argwings Kodhek Rd")
        tenant = Tenant(
            user_id=user_id,
            property=prop,
            first_name="Sarah",
            last_name="Wanjiku",
            email=email,
            unit_number="A4",
            monthly_rent=Decimal("1450.00"),
            lease_start=date(2024, 1, 1),
            lease_end=date(2025, 12, 31),
        )
        payment = Payment(
            user_id=user_id,
            tenant=tenant,
            amount=Decimal(amount),
            payment_method="bank transfer",
            payment_date=date(2024, 12, 10),
        )
        session.add_all([prop, tenant, payment])
        await session.commit()
        return payment.id, tenant.id
