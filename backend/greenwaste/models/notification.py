"""
Notification model for outbound WhatsApp messages about reports.
"""
from sqlalchemy import Column, String, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from greenwaste.db.base import BaseModel, Timestamp
import enum


class NotificationType(str, enum.Enum):
    WHATSAPP = "WHATSAPP"


class NotificationStatus(str, enum.Enum):
    """Delivery status: PENDING -> SENT/FAILED -> DELIVERED."""
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    DELIVERED = "DELIVERED"


class Notification(BaseModel):
    __tablename__ = "notifications"

    report_id = Column(String(36), ForeignKey("reports.id"), nullable=False, index=True)
    type = Column(SQLEnum(NotificationType), default=NotificationType.WHATSAPP, nullable=False)
    status = Column(SQLEnum(NotificationStatus), default=NotificationStatus.PENDING, nullable=False, index=True)
    green_api_message_id = Column(String(255), nullable=True, index=True)
    message = Column(Text, nullable=False)
    sent_at = Column(Timestamp, nullable=True)
    delivered_at = Column(Timestamp, nullable=True)

    # Relationships
    report = relationship("Report", back_populates="notifications")
