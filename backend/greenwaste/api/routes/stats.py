"""
Dashboard statistics routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from greenwaste.db.session import get_db
from greenwaste.models.user import User
from greenwaste.schemas.stats import StatsResponse
from greenwaste.api.dependencies import get_current_user
from greenwaste.services.stats_service import get_dashboard_stats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Dashboard totals scoped to the current user."""
    return get_dashboard_stats(current_user, db)
