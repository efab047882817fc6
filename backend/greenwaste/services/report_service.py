"""
Report service: intake pipeline for collection reports and scoped reads.
"""
import logging
from datetime import datetime, time
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from greenwaste.core.config import settings
from greenwaste.core.exceptions import DomainValidationError, NotFoundError, UpstreamError
from greenwaste.core.utils import round_money
from greenwaste.models.container_type import ContainerType
from greenwaste.models.report import Report
from greenwaste.models.settlement import Settlement
from greenwaste.models.user import User
from greenwaste.schemas.report import ReportCreate, ReportFilters, ReportUpdate
from greenwaste.services import notification_service, pricing_service
from greenwaste.services.access_scope import apply_scope, admin_filter
from greenwaste.services.whatsapp_service import GreenApiClient

logger = logging.getLogger(__name__)

UNIT_PRICE_PLACES = Decimal("0.0001")
NULLABLE_REPORT_FIELDS = {"notes", "image_url", "image_public_id"}


def _ensure_references(
    db: Session,
    settlement_id: Optional[str] = None,
    container_type_id: Optional[str] = None,
    driver_id: Optional[str] = None
):
    """Raise NotFoundError for any given id that does not exist."""
    if settlement_id and not db.query(Settlement.id).filter(Settlement.id == settlement_id).first():
        raise NotFoundError("יישוב לא נמצא")
    if container_type_id and not db.query(ContainerType.id).filter(ContainerType.id == container_type_id).first():
        raise NotFoundError("סוג מכל לא נמצא")
    if driver_id and not db.query(User.id).filter(User.id == driver_id).first():
        raise NotFoundError("נהג לא נמצא")


def create_report(
    data: ReportCreate,
    db: Session,
    driver_id: Optional[str] = None,
    notify: Optional[bool] = None,
    client: Optional[GreenApiClient] = None
) -> Report:
    """
    Validate, price and persist a collection report, then notify the settlement.

    Pricing is calculated from the active settlement pricing unless the caller
    supplied both ``unit_price`` and ``total_price``, which are then stored as
    given. A pricing failure aborts the whole operation. Notification failures
    are logged and never fail the report.

    Not idempotent: identical calls create separate reports.
    """
    driver_id = driver_id or data.driver_id
    if not driver_id:
        raise DomainValidationError("מזהה נהג נדרש", field="driver_id")

    _ensure_references(db, data.settlement_id, data.container_type_id, driver_id)

    if data.has_complete_pricing:
        unit_price = data.unit_price
        total_price = data.total_price
        currency = data.currency or settings.DEFAULT_CURRENCY
        pricing_id = None
        expected_total = round_money(data.volume * unit_price)
        if expected_total != round_money(total_price):
            logger.warning(
                f"Supplied total {total_price} differs from volume*unit_price {expected_total} "
                f"(settlement={data.settlement_id}, driver={driver_id})"
            )
    else:
        calculation = pricing_service.calculate_total_price(
            data.settlement_id,
            data.container_type_id,
            data.volume,
            db
        )
        unit_price = calculation.unit_price
        total_price = calculation.total_price
        currency = calculation.currency
        pricing_id = calculation.pricing_id

    report = Report(
        settlement_id=data.settlement_id,
        driver_id=driver_id,
        container_type_id=data.container_type_id,
        volume=data.volume,
        notes=data.notes,
        image_url=data.image_url,
        image_public_id=data.image_public_id,
        unit_price=Decimal(unit_price).quantize(UNIT_PRICE_PLACES),
        total_price=round_money(total_price),
        currency=currency,
        pricing_id=pricing_id,
        notification_sent=False
    )
    db.add(report)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Report insert rejected: {e.orig}")
        raise DomainValidationError("נתוני הדיווח אינם תואמים לנתונים קיימים")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Report insert failed: {e}", exc_info=True)
        raise UpstreamError("שגיאה ביצירת הדיווח")
    db.refresh(report)
    logger.info(
        f"Report {report.id} created: settlement={report.settlement_id} "
        f"volume={report.volume} total={report.total_price} {report.currency}"
    )

    if notify is None:
        notify = settings.NOTIFICATIONS_ENABLED
    if notify:
        try:
            notification_service.dispatch_report_notification(report, db, client)
        except Exception as e:
            db.rollback()
            logger.warning(f"Report {report.id}: notification dispatch failed: {e}", exc_info=True)
        db.refresh(report)

    return report


def get_report(report_id: str, user: User, db: Session) -> Report:
    """Get a report within the user's scope."""
    query = apply_scope(db.query(Report), Report, user)
    report = query.options(
        joinedload(Report.settlement),
        joinedload(Report.driver),
        joinedload(Report.container_type)
    ).filter(Report.id == report_id).first()
    if not report:
        raise NotFoundError("דיווח לא נמצא")
    return report


def list_reports(user: User, filters: ReportFilters, db: Session) -> Tuple[List[Report], int]:
    """
    List reports visible to the user, newest first. Returns (items, total).

    The role scope is applied first; ``driver_id`` and ``settlement_id``
    filters are honoured for administrators only.
    """
    query = apply_scope(db.query(Report), Report, user)

    driver_id = admin_filter(user, filters.driver_id)
    settlement_id = admin_filter(user, filters.settlement_id)
    if driver_id:
        query = query.filter(Report.driver_id == driver_id)
    if settlement_id:
        query = query.filter(Report.settlement_id == settlement_id)
    if filters.container_type_id:
        query = query.filter(Report.container_type_id == filters.container_type_id)
    if filters.report_date_from:
        query = query.filter(Report.created_at >= datetime.combine(filters.report_date_from, time.min))
    if filters.report_date_to:
        query = query.filter(Report.created_at <= datetime.combine(filters.report_date_to, time.max))

    total = query.count()
    items = query.options(
        joinedload(Report.settlement),
        joinedload(Report.driver),
        joinedload(Report.container_type)
    ).order_by(
        Report.created_at.desc()
    ).offset((filters.page - 1) * filters.limit).limit(filters.limit).all()
    return items, total


def update_report(report_id: str, data: ReportUpdate, db: Session) -> Report:
    """Update a report (administrators). Prices are stored as given."""
    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        raise NotFoundError("דיווח לא נמצא")

    changes = {
        field: value for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_REPORT_FIELDS
    }
    _ensure_references(
        db,
        changes.get("settlement_id"),
        changes.get("container_type_id"),
        changes.get("driver_id")
    )

    for field, value in changes.items():
        if field == "currency":
            value = value.upper()
        setattr(report, field, value)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Report {report_id} update rejected: {e.orig}")
        raise DomainValidationError("נתוני הדיווח אינם תואמים לנתונים קיימים")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Report {report_id} update failed: {e}", exc_info=True)
        raise UpstreamError("שגיאה בעדכון הדיווח")
    db.refresh(report)
    return report
