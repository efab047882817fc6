"""
Pydantic schemas for ContainerType entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ContainerTypeBase(BaseModel):
    """Base container type schema."""
    name: str = Field(..., min_length=1, max_length=255)
    size: Decimal = Field(..., gt=0, le=100)  # m³
    unit: str = Field("m³", max_length=10)


class ContainerTypeCreate(ContainerTypeBase):
    pass


class ContainerTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    size: Optional[Decimal] = Field(None, gt=0, le=100)
    unit: Optional[str] = Field(None, max_length=10)


class ContainerTypeBrief(BaseModel):
    id: str
    name: str
    size: Decimal
    unit: str

    class Config:
        from_attributes = True


class ContainerTypeResponse(ContainerTypeBase):
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
