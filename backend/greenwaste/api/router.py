"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from greenwaste.api.routes import (
    auth, users, settlements, container_types,
    pricing, reports, notifications, stats
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(settlements.router)
api_router.include_router(container_types.router)
api_router.include_router(pricing.router)
api_router.include_router(reports.router)
api_router.include_router(notifications.router)
api_router.include_router(stats.router)
