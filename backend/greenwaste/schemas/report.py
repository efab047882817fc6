"""
Pydantic schemas for Report entity.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from greenwaste.core.config import settings
from greenwaste.schemas.common import UUID_PATTERN
from greenwaste.schemas.settlement import SettlementBrief
from greenwaste.schemas.container_type import ContainerTypeBrief
from greenwaste.schemas.user import DriverBrief


def _check_volume_cap(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v > Decimal(str(settings.MAX_REPORT_VOLUME)):
        raise ValueError("נפח גדול מדי")
    return v


def _check_notes(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) > settings.MAX_NOTES_LENGTH:
        raise ValueError("הערות ארוכות מדי")
    return v


class ReportCreate(BaseModel):
    """
    Schema for report creation.

    Pricing fields are optional: when ``unit_price`` and ``total_price`` are
    not both supplied they are calculated from the active settlement pricing.
    Volume and supplied prices are limited to the precision they are stored
    with, so the saved record is exactly what was validated.
    ``tank_id`` is accepted as an alias for ``container_type_id``.
    """
    settlement_id: str = Field(..., pattern=UUID_PATTERN)
    driver_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    container_type_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    tank_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    volume: Decimal = Field(..., gt=0, decimal_places=2)  # m³, stored with 2 decimals
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024, pattern=r"^https?://")
    image_public_id: Optional[str] = Field(None, max_length=255)
    unit_price: Optional[Decimal] = Field(None, ge=0, decimal_places=4)
    total_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator("volume")
    @classmethod
    def validate_volume(cls, v):
        return _check_volume_cap(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return _check_notes(v)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper() if v else v

    @model_validator(mode="after")
    def resolve_container_type(self):
        if not self.container_type_id and self.tank_id:
            self.container_type_id = self.tank_id
        if not self.container_type_id:
            raise ValueError("מזהה סוג מכל נדרש")
        return self

    @property
    def has_complete_pricing(self) -> bool:
        return self.unit_price is not None and self.total_price is not None


class ReportUpdate(BaseModel):
    """Schema for report update (administrators only)."""
    settlement_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    driver_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    container_type_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    volume: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024, pattern=r"^https?://")
    image_public_id: Optional[str] = Field(None, max_length=255)
    unit_price: Optional[Decimal] = Field(None, ge=0, decimal_places=4)
    total_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    notification_sent: Optional[bool] = None

    @field_validator("volume")
    @classmethod
    def validate_volume(cls, v):
        return _check_volume_cap(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return _check_notes(v)


class ReportFilters(BaseModel):
    """Query filters for report listing. Role scope is applied before these."""
    page: int = Field(1, gt=0)
    limit: int = Field(10, gt=0, le=100)
    driver_id: Optional[str] = None
    settlement_id: Optional[str] = None
    container_type_id: Optional[str] = None
    report_date_from: Optional[date] = None
    report_date_to: Optional[date] = None


class ReportResponse(BaseModel):
    """Schema for report response."""
    id: str
    settlement_id: str
    driver_id: str
    container_type_id: str
    volume: Decimal
    notes: Optional[str] = None
    image_url: Optional[str] = None
    image_public_id: Optional[str] = None
    unit_price: Decimal
    total_price: Decimal
    currency: str
    pricing_id: Optional[str] = None
    notification_sent: bool
    settlement: Optional[SettlementBrief] = None
    driver: Optional[DriverBrief] = None
    container_type: Optional[ContainerTypeBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
