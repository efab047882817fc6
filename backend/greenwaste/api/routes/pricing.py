"""
Pricing management routes and the price calculator endpoint.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from greenwaste.db.session import get_db
from greenwaste.models.user import User
from greenwaste.schemas.common import PaginatedResponse
from greenwaste.schemas.pricing import (
    PriceCalculationRequest, PriceCalculationResponse,
    PricingCreate, PricingResponse, PricingUpdate
)
from greenwaste.core.utils import total_pages
from greenwaste.api.dependencies import get_current_user, require_admin
from greenwaste.services import pricing_service

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("", response_model=PaginatedResponse[PricingResponse])
async def list_pricing(
    settlement_id: Optional[str] = None,
    container_type_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    currency: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List pricing rules with optional filters."""
    items, total = pricing_service.list_pricing(
        db,
        settlement_id=settlement_id,
        container_type_id=container_type_id,
        is_active=is_active,
        currency=currency,
        page=page,
        limit=limit
    )
    return {
        "data": items,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.post("", response_model=PricingResponse, status_code=status.HTTP_201_CREATED)
async def create_pricing(
    pricing_data: PricingCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create a pricing rule.

    Fails with 409 when the pair already has an active price, unless
    ``supersede`` is true.
    """
    return pricing_service.create_pricing(pricing_data, db)


@router.post("/calculate", response_model=PriceCalculationResponse)
async def calculate_price(
    request: PriceCalculationRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Preview the price of a pickup before submitting a report."""
    return pricing_service.calculate_total_price(
        request.settlement_id,
        request.container_type_id,
        request.volume,
        db
    )


@router.get("/{pricing_id}", response_model=PricingResponse)
async def get_pricing(
    pricing_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return pricing_service.get_pricing(pricing_id, db)


@router.put("/{pricing_id}", response_model=PricingResponse)
async def update_pricing(
    pricing_id: str,
    pricing_data: PricingUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return pricing_service.update_pricing(pricing_id, pricing_data, db)


@router.delete("/{pricing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pricing(
    pricing_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    pricing_service.delete_pricing(pricing_id, db)
