"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SettlementBase(BaseModel):
    """Base settlement schema."""
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=20)


class SettlementCreate(SettlementBase):
    """Schema for settlement creation."""
    pass


class SettlementUpdate(BaseModel):
    """Schema for settlement update."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=20)


class SettlementBrief(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class SettlementResponse(SettlementBase):
    """Schema for settlement response."""
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
