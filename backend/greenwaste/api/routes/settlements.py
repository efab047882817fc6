"""
Settlement management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
from greenwaste.db.session import get_db
from greenwaste.models.settlement import Settlement
from greenwaste.models.user import User
from greenwaste.schemas.common import PaginatedResponse
from greenwaste.schemas.pricing import PricingResponse
from greenwaste.schemas.settlement import SettlementCreate, SettlementResponse, SettlementUpdate
from greenwaste.core.utils import total_pages
from greenwaste.api.dependencies import get_current_user, require_admin
from greenwaste.services.pricing_service import get_settlement_pricing

router = APIRouter(prefix="/settlements", tags=["settlements"])


def get_settlement_or_404(settlement_id: str, db: Session) -> Settlement:
    settlement = db.query(Settlement).filter(Settlement.id == settlement_id).first()
    if not settlement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Settlement not found"
        )
    return settlement


@router.get("", response_model=PaginatedResponse[SettlementResponse])
async def list_settlements(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List settlements, optionally searching by name."""
    query = db.query(Settlement)
    if search:
        query = query.filter(Settlement.name.ilike(f"%{search}%"))

    total = query.count()
    settlements = query.order_by(Settlement.name).offset((page - 1) * limit).limit(limit).all()
    return {
        "data": settlements,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.post("", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def create_settlement(
    settlement_data: SettlementCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a new settlement."""
    settlement = Settlement(**settlement_data.model_dump())
    db.add(settlement)
    db.commit()
    db.refresh(settlement)
    return settlement


@router.get("/{settlement_id}", response_model=SettlementResponse)
async def get_settlement(
    settlement_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get settlement by ID."""
    return get_settlement_or_404(settlement_id, db)


@router.get("/{settlement_id}/pricing", response_model=List[PricingResponse])
async def get_active_settlement_pricing(
    settlement_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active pricing rules of a settlement, newest first."""
    get_settlement_or_404(settlement_id, db)
    return get_settlement_pricing(settlement_id, db)


@router.put("/{settlement_id}", response_model=SettlementResponse)
async def update_settlement(
    settlement_id: str,
    settlement_data: SettlementUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update a settlement."""
    settlement = get_settlement_or_404(settlement_id, db)
    for field, value in settlement_data.model_dump(exclude_unset=True).items():
        setattr(settlement, field, value)
    db.commit()
    db.refresh(settlement)
    return settlement


@router.delete("/{settlement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_settlement(
    settlement_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a settlement that has no pricing, users or reports."""
    settlement = get_settlement_or_404(settlement_id, db)
    if settlement.pricing or settlement.reports or settlement.users:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="לא ניתן למחוק יישוב שיש לו תמחור, משתמשים או דיווחים"
        )
    db.delete(settlement)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="לא ניתן למחוק יישוב שיש לו תמחור, משתמשים או דיווחים"
        )
