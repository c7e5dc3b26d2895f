import uuid
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class Receipt(Base):
    __tablename__ = "receipts"
    # One receipt per payment; concurrent issuers race on this constraint
    __table_args__ = (UniqueConstraint("payment_id", name="uq_receipts_payment_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    payment_id = Column(Uuid, ForeignKey("payments.id"), nullable=False)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    receipt_number = Column(String(32), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False)
    payment_date = Column(Date, nullable=False)
    issued_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    sent_to_email = Column(String(255))
    sent_at = Column(DateTime(timezone=True))
    pdf_url = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    payment = relationship("Payment")
    tenant = relationship("Tenant")
