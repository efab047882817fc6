"""
Pydantic schemas for Notification entity and gateway callbacks.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from greenwaste.models.notification import NotificationStatus, NotificationType


class NotificationReportBrief(BaseModel):
    id: str
    settlement_id: str
    driver_id: str
    volume: Decimal
    total_price: Decimal
    currency: str

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: str
    report_id: str
    type: NotificationType
    status: NotificationStatus
    green_api_message_id: Optional[str] = None
    message: str
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    report: Optional[NotificationReportBrief] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationFilters(BaseModel):
    page: int = Field(1, gt=0)
    limit: int = Field(10, gt=0, le=100)
    status: Optional[NotificationStatus] = None
    settlement_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class GreenApiStatusWebhook(BaseModel):
    """Outgoing message status callback sent by Green API."""
    model_config = ConfigDict(extra="allow")

    typeWebhook: str
    idMessage: Optional[str] = None
    status: Optional[str] = None
    timestamp: Optional[int] = None
