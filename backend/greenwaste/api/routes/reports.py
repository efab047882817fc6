"""
Collection report routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from greenwaste.db.session import get_db
from greenwaste.models.user import User, UserRole
from greenwaste.schemas.common import PaginatedResponse
from greenwaste.schemas.report import ReportCreate, ReportFilters, ReportResponse, ReportUpdate
from greenwaste.core.utils import total_pages
from greenwaste.api.dependencies import get_current_user, require_admin
from greenwaste.services import report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=PaginatedResponse[ReportResponse])
async def list_reports(
    page: int = 1,
    limit: int = 10,
    driver_id: Optional[str] = None,
    settlement_id: Optional[str] = None,
    container_type_id: Optional[str] = None,
    tank_id: Optional[str] = None,
    report_date_from: Optional[date] = None,
    report_date_to: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List reports visible to the current user.

    Drivers see their own reports, settlement users their settlement's,
    administrators everything (and may filter by driver or settlement).
    """
    filters = ReportFilters(
        page=page,
        limit=limit,
        driver_id=driver_id,
        settlement_id=settlement_id,
        container_type_id=container_type_id or tank_id,
        report_date_from=report_date_from,
        report_date_to=report_date_to
    )
    items, total = report_service.list_reports(current_user, filters, db)
    return {
        "data": items,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: ReportCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a collection report.

    Drivers always report as themselves; administrators may report on behalf
    of a driver by passing ``driver_id``.
    """
    if current_user.role == UserRole.DRIVER:
        driver_id = current_user.id
    elif current_user.role == UserRole.ADMIN:
        driver_id = report_data.driver_id
    else:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="רק נהגים יכולים ליצור דיווחים"
        )

    return report_service.create_report(report_data, db, driver_id=driver_id)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return report_service.get_report(report_id, current_user, db)


@router.put("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: str,
    report_data: ReportUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return report_service.update_report(report_id, report_data, db)
