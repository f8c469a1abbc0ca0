"""
API v1 Router
Main router for all API v1 endpoints
"""

from fastapi import APIRouter
from taskboard.api.v1.endpoints import access, reminders, health

api_router = APIRouter()

# Board, list and card access endpoints
api_router.include_router(
    access.router,
    tags=["access"]
)

# Due-date reminder endpoints
api_router.include_router(
    reminders.router,
    prefix="/reminders",
    tags=["reminders"]
)

# Health and monitoring endpoints
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)
