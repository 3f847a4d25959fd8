# backend/service_booking/models/service_catalog.py
"""
Service catalog models.

``Service`` holds the bookable offering and its current price.
``ProviderService`` records that a provider offers a service. The booking
engine only reads these tables; catalog management lives elsewhere.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Service(Base):
    """A priced service that customers can book."""

    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (CheckConstraint("price >= 0", name="check_service_price_non_negative"),)

    def __repr__(self) -> str:
        return f"<Service {self.name} price={self.price}>"


class ProviderService(Base):
    """Junction table: the provider offers the service."""

    __tablename__ = "provider_services"

    provider_id = Column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    service_id = Column(
        String(26), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
