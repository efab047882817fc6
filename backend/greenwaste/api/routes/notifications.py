"""
Notification routes: listing and the Green API status webhook.
"""
import secrets
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from greenwaste.db.session import get_db
from greenwaste.models.notification import NotificationStatus
from greenwaste.models.user import User
from greenwaste.schemas.common import PaginatedResponse
from greenwaste.schemas.notification import GreenApiStatusWebhook, NotificationFilters, NotificationResponse
from greenwaste.core.config import settings
from greenwaste.core.utils import format_response, total_pages
from greenwaste.api.dependencies import get_current_user
from greenwaste.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


def verify_webhook_token(authorization: Optional[str] = Header(None)):
    """
    Check the ``Authorization`` header Green API sends with webhook calls.

    No check is made while ``GREEN_API_WEBHOOK_TOKEN`` is empty.
    """
    expected = settings.GREEN_API_WEBHOOK_TOKEN
    if not expected:
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token.strip(), expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook token",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.get("", response_model=PaginatedResponse[NotificationResponse])
async def list_notifications(
    page: int = 1,
    limit: int = 10,
    status: Optional[NotificationStatus] = None,
    settlement_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List notifications for reports visible to the current user."""
    filters = NotificationFilters(
        page=page,
        limit=limit,
        status=status,
        settlement_id=settlement_id,
        date_from=date_from,
        date_to=date_to
    )
    items, total = notification_service.list_notifications(current_user, filters, db)
    return {
        "data": items,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.post("/webhook", dependencies=[Depends(verify_webhook_token)])
async def green_api_webhook(payload: GreenApiStatusWebhook, db: Session = Depends(get_db)):
    """Receive Green API callbacks. Only outgoing message status updates are handled."""
    notification = notification_service.apply_status_callback(payload, db)
    if notification is None:
        return format_response(None, message="ignored")
    return format_response({"id": notification.id, "status": notification.status.value}, message="updated")
