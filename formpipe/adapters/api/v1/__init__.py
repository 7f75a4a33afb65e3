"""API v1 router configuration.
"""

from fastapi import APIRouter

from .contact.routes import create_contact_router
from .health import router as health_router


def create_api_router(contact_path: str = "/contact") -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(health_router, prefix="/health", tags=["health"])
    api_router.include_router(create_contact_router(contact_path), tags=["contact"])
    return api_router
