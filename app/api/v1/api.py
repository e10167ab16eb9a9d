"""
API v1 router.
"""
from fastapi import APIRouter
from app.api.v1.endpoints import health, tags

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(health.router, tags=["health"])
