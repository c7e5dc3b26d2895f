import uuid
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class Payment(Base):
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    invoice_id = Column(Uuid)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False, default="bank_transfer")
    payment_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="completed")
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="payments")
