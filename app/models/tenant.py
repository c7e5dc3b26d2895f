import uuid
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False)
    tenant_user_id = Column(Uuid)  # set once the tenant signs into the portal
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255))
    phone = Column(String(50))
    unit_number = Column(String(50), nullable=False)
    monthly_rent = Column(Numeric(10, 2), nullable=False, default=0)
    lease_start = Column(Date, nullable=False)
    lease_end = Column(Date, nullable=False)
    rent_status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    property = relationship("Property", back_populates="tenants")
    payments = relationship("Payment", back_populates="tenant")
