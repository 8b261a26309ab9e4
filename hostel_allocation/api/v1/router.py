"""
API v1 Router - Main Entry Point
Aggregates the v1 endpoints of the allocation engine.
"""
from fastapi import APIRouter

from hostel_allocation.api.v1 import admin, settings, student, webhooks

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        429: {"description": "Too Many Requests"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(settings.router)
router.include_router(student.router)
router.include_router(admin.router)
router.include_router(webhooks.router)
