"""
Container type model: a class of bin/tank used as the pricing unit.
"""
from sqlalchemy import Column, String, Numeric
from sqlalchemy.orm import relationship
from greenwaste.db.base import BaseModel


class ContainerType(BaseModel):
    __tablename__ = "container_types"

    name = Column(String(255), nullable=False, index=True)
    size = Column(Numeric(10, 3), nullable=False)  # Capacity in cubic meters, always > 0
    unit = Column(String(10), nullable=False, default="m³")

    # Relationships
    pricing = relationship("SettlementTankPricing", back_populates="container_type")
    reports = relationship("Report", back_populates="container_type")
