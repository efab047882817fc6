"""
Pricing rule per settlement and container type.
"""
from sqlalchemy import Column, String, Numeric, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from greenwaste.db.base import BaseModel


class SettlementTankPricing(BaseModel):
    """
    Price of one full container of a given type for a given settlement.

    At most one row per (settlement_id, container_type_id) may be active.
    The pricing service enforces this under a lock on the settlement row.
    """
    __tablename__ = "settlement_tank_pricing"
    __table_args__ = (
        Index("ix_pricing_pair_active", "settlement_id", "container_type_id", "is_active"),
    )

    settlement_id = Column(String(36), ForeignKey("settlements.id"), nullable=False, index=True)
    container_type_id = Column(String(36), ForeignKey("container_types.id"), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="ILS")
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    settlement = relationship("Settlement", back_populates="pricing")
    container_type = relationship("ContainerType", back_populates="pricing")
