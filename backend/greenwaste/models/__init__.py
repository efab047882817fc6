"""Models package - Import all models for SQLAlchemy registration."""
from greenwaste.models.user import User, UserRole
from greenwaste.models.settlement import Settlement
from greenwaste.models.container_type import ContainerType
from greenwaste.models.pricing import SettlementTankPricing
from greenwaste.models.report import Report
from greenwaste.models.notification import Notification, NotificationType, NotificationStatus

__all__ = [
    "User",
    "UserRole",
    "Settlement",
    "ContainerType",
    "SettlementTankPricing",
    "Report",
    "Notification",
    "NotificationType",
    "NotificationStatus",
]
