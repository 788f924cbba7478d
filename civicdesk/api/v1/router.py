"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from civicdesk.api.v1 import captcha, complaints, guest

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        410: {"description": "Gone"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(captcha.router)
router.include_router(complaints.router)
router.include_router(guest.router)
