"""
Pydantic schemas for settlement/container pricing.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from greenwaste.core.config import settings
from greenwaste.schemas.common import UUID_PATTERN
from greenwaste.schemas.settlement import SettlementBrief
from greenwaste.schemas.container_type import ContainerTypeBrief


def _check_price(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v > Decimal(str(settings.MAX_PRICE)):
        raise ValueError(f"מחיר גבוה מדי (מעל {settings.MAX_PRICE:,.0f})")
    return v


class PricingCreate(BaseModel):
    """Schema for pricing creation."""
    settlement_id: str = Field(..., pattern=UUID_PATTERN)
    container_type_id: str = Field(..., pattern=UUID_PATTERN)
    price: Decimal = Field(..., gt=0)
    currency: str = Field("ILS", min_length=3, max_length=3)
    is_active: bool = True
    supersede: bool = False  # Deactivate the current active price for the pair instead of failing

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return _check_price(v)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper()


class PricingUpdate(BaseModel):
    """Schema for pricing update."""
    settlement_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    container_type_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    price: Optional[Decimal] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    is_active: Optional[bool] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return _check_price(v)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper() if v else v


class PricingResponse(BaseModel):
    """Schema for pricing response."""
    id: str
    settlement_id: str
    container_type_id: str
    price: Decimal
    currency: str
    is_active: bool
    settlement: Optional[SettlementBrief] = None
    container_type: Optional[ContainerTypeBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PriceCalculationRequest(BaseModel):
    settlement_id: str = Field(..., pattern=UUID_PATTERN)
    container_type_id: str = Field(..., pattern=UUID_PATTERN)
    volume: Decimal = Field(..., decimal_places=2)  # Range is checked by the calculator


class PriceCalculationResponse(BaseModel):
    unit_price: Decimal  # Per m³
    total_price: Decimal
    currency: str
    pricing_id: str
