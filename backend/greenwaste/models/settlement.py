"""
Settlement model: a locality that receives collection service.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from greenwaste.db.base import BaseModel


class Settlement(BaseModel):
    """Settlement billed per pickup."""
    __tablename__ = "settlements"

    name = Column(String(255), nullable=False, index=True)
    contact_person = Column(String(255), nullable=True)
    contact_phone = Column(String(20), nullable=True)  # WhatsApp destination for report notifications

    # Relationships
    users = relationship("User", back_populates="settlement")
    pricing = relationship("SettlementTankPricing", back_populates="settlement")
    reports = relationship("Report", back_populates="settlement")
