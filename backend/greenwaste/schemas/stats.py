"""
Pydantic schemas for dashboard statistics.
"""
from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class StatsResponse(BaseModel):
    total_reports: int
    today_reports: int
    total_volume: Decimal
    total_revenue: Decimal
    notifications_sent: int
    settlements_count: Optional[int] = None  # Administrators only
    drivers_count: Optional[int] = None
    container_types_count: Optional[int] = None
