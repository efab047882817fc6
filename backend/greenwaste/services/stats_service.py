"""
Dashboard statistics, scoped by the caller's role.
"""
from datetime import datetime, time
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session
from greenwaste.models.container_type import ContainerType
from greenwaste.models.notification import Notification, NotificationStatus
from greenwaste.models.report import Report
from greenwaste.models.settlement import Settlement
from greenwaste.models.user import User, UserRole
from greenwaste.schemas.stats import StatsResponse
from greenwaste.services.access_scope import apply_scope


def get_dashboard_stats(user: User, db: Session) -> StatsResponse:
    """Report totals visible to the user; master data counts for administrators."""
    reports = apply_scope(db.query(Report), Report, user)

    total_reports = reports.count()
    today_start = datetime.combine(datetime.utcnow().date(), time.min)
    today_reports = reports.filter(Report.created_at >= today_start).count()

    volume, revenue = apply_scope(
        db.query(
            func.coalesce(func.sum(Report.volume), 0),
            func.coalesce(func.sum(Report.total_price), 0)
        ),
        Report,
        user
    ).one()

    notifications_sent = apply_scope(
        db.query(Notification).join(Report, Notification.report_id == Report.id),
        Report,
        user
    ).filter(
        Notification.status.in_([NotificationStatus.SENT, NotificationStatus.DELIVERED])
    ).count()

    stats = StatsResponse(
        total_reports=total_reports,
        today_reports=today_reports,
        total_volume=Decimal(str(volume)),
        total_revenue=Decimal(str(revenue)),
        notifications_sent=notifications_sent
    )

    if user.role == UserRole.ADMIN:
        stats.settlements_count = db.query(func.count(Settlement.id)).scalar() or 0
        stats.drivers_count = db.query(func.count(User.id)).filter(User.role == UserRole.DRIVER).scalar() or 0
        stats.container_types_count = db.query(func.count(ContainerType.id)).scalar() or 0

    return stats
