"""
Notification service: renders report notifications, sends them over WhatsApp
and tracks their delivery status.
"""
import logging
from datetime import datetime, time
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from greenwaste.core.exceptions import DomainError
from greenwaste.core.utils import format_price
from greenwaste.models.notification import Notification, NotificationStatus, NotificationType
from greenwaste.models.report import Report
from greenwaste.models.user import User
from greenwaste.schemas.notification import NotificationFilters, GreenApiStatusWebhook
from greenwaste.services.access_scope import apply_scope, admin_filter
from greenwaste.services.whatsapp_service import GreenApiClient

logger = logging.getLogger(__name__)

# Green API outgoing message statuses mapped onto our lifecycle
DELIVERY_STATUS_MAP = {
    "sent": NotificationStatus.SENT,
    "delivered": NotificationStatus.DELIVERED,
    "read": NotificationStatus.DELIVERED,
    "failed": NotificationStatus.FAILED,
    "noAccount": NotificationStatus.FAILED,
    "notInGroup": NotificationStatus.FAILED,
}

STATUS_WEBHOOK_TYPES = ("outgoingMessageStatus", "outgoingAPIMessageStatus")


def render_report_message(settlement_name: str, volume, total_price, currency: str = "ILS") -> str:
    """Render the WhatsApp text sent to a settlement after a pickup."""
    lines = [
        f"🏘️ דוח איסוף חדש - {settlement_name}",
        "",
        f"📊 כמות: {volume} מ\"ק",
        f"💰 סכום: {format_price(total_price, currency)}",
        "",
        "תודה על השירות!",
    ]
    return "\n".join(lines)


def dispatch_report_notification(
    report: Report,
    db: Session,
    client: Optional[GreenApiClient] = None
) -> Notification:
    """
    Send the WhatsApp notification for a persisted report.

    A PENDING notification row is written first and then moved to SENT or
    FAILED. Gateway failures are recorded on the row, not raised.
    """
    client = client or GreenApiClient()
    settlement = report.settlement
    message = render_report_message(
        settlement.name if settlement else "",
        report.volume,
        report.total_price,
        report.currency
    )

    notification = Notification(
        report_id=report.id,
        type=NotificationType.WHATSAPP,
        status=NotificationStatus.PENDING,
        message=message
    )
    db.add(notification)
    db.commit()

    destination = settlement.contact_phone if settlement else None
    if not destination:
        logger.warning(f"Report {report.id}: settlement has no contact phone, notification not sent")
        notification.status = NotificationStatus.FAILED
        db.commit()
        db.refresh(notification)
        return notification

    try:
        if report.image_url:
            message_id = client.send_file_by_url(
                destination,
                report.image_url,
                f"report_{report.id}.jpg",
                caption=message
            )
        else:
            message_id = client.send_message(destination, message)
    except DomainError as e:
        logger.warning(f"Report {report.id}: WhatsApp notification failed: {e.message}")
        notification.status = NotificationStatus.FAILED
        db.commit()
        db.refresh(notification)
        return notification

    notification.status = NotificationStatus.SENT
    notification.green_api_message_id = message_id
    notification.sent_at = datetime.utcnow()
    report.notification_sent = True
    db.commit()
    db.refresh(notification)
    logger.info(f"Report {report.id}: WhatsApp notification sent ({message_id})")
    return notification


def apply_status_callback(payload: GreenApiStatusWebhook, db: Session) -> Optional[Notification]:
    """
    Update a notification from a Green API outgoing message status webhook.

    Returns the updated notification, or None when the callback is not a
    status update or refers to an unknown message.
    """
    if payload.typeWebhook not in STATUS_WEBHOOK_TYPES or not payload.idMessage:
        return None

    new_status = DELIVERY_STATUS_MAP.get(payload.status or "")
    if new_status is None:
        logger.debug(f"Ignoring Green API status '{payload.status}' for {payload.idMessage}")
        return None

    notification = db.query(Notification).filter(
        Notification.green_api_message_id == payload.idMessage
    ).first()
    if not notification:
        logger.warning(f"Status callback for unknown message {payload.idMessage}")
        return None

    # A delivered message never goes back to SENT
    if notification.status == NotificationStatus.DELIVERED and new_status == NotificationStatus.SENT:
        return notification

    notification.status = new_status
    if new_status == NotificationStatus.DELIVERED and not notification.delivered_at:
        notification.delivered_at = (
            datetime.utcfromtimestamp(payload.timestamp) if payload.timestamp else datetime.utcnow()
        )
    db.commit()
    db.refresh(notification)
    return notification


def list_notifications(
    user: User,
    filters: NotificationFilters,
    db: Session
) -> Tuple[List[Notification], int]:
    """List notifications visible to the user. Returns (items, total)."""
    query = db.query(Notification).join(Report, Notification.report_id == Report.id)
    query = apply_scope(query, Report, user)

    settlement_id = admin_filter(user, filters.settlement_id)
    if settlement_id:
        query = query.filter(Report.settlement_id == settlement_id)
    if filters.status:
        query = query.filter(Notification.status == filters.status)
    if filters.date_from:
        query = query.filter(Notification.created_at >= datetime.combine(filters.date_from, time.min))
    if filters.date_to:
        query = query.filter(Notification.created_at <= datetime.combine(filters.date_to, time.max))

    total = query.count()
    items = query.options(joinedload(Notification.report)).order_by(
        Notification.created_at.desc()
    ).offset((filters.page - 1) * filters.limit).limit(filters.limit).all()
    return items, total
