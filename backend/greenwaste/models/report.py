"""
Report model: one waste-collection pickup event.
"""
from sqlalchemy import Column, String, Numeric, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from greenwaste.db.base import BaseModel


class Report(BaseModel):
    """Collection report. Historical record, never deleted through the API."""
    __tablename__ = "reports"

    settlement_id = Column(String(36), ForeignKey("settlements.id"), nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    container_type_id = Column(String(36), ForeignKey("container_types.id"), nullable=False, index=True)
    volume = Column(Numeric(10, 2), nullable=False)  # m³
    notes = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)
    image_public_id = Column(String(255), nullable=True)  # Storage path of the uploaded photo
    unit_price = Column(Numeric(12, 4), nullable=False)  # Per m³
    total_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="ILS")
    pricing_id = Column(String(36), ForeignKey("settlement_tank_pricing.id"), nullable=True, index=True)
    notification_sent = Column(Boolean, default=False, nullable=False)

    # Relationships
    settlement = relationship("Settlement", back_populates="reports")
    driver = relationship("User", back_populates="reports")
    container_type = relationship("ContainerType", back_populates="reports")
    pricing = relationship("SettlementTankPricing")
    notifications = relationship("Notification", back_populates="report", cascade="all, delete-orphan")
