import uuid
from sqlalchemy import Column, String, Integer, DateTime, Uuid
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)  # landlord, owned by the auth service
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    status = Column(String, nullable=False, default="active")
    total_units = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    tenants = relationship("Tenant", back_populates="property")
