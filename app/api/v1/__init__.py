"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import accounts, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(accounts.router, prefix="/usuarios", tags=["usuarios"])
