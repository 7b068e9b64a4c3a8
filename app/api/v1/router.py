"""
API v1 router setup
"""
from fastapi import APIRouter

from app.api.v1 import coaches, sessions

api_v1_router = APIRouter()

api_v1_router.include_router(coaches.router, tags=["Coaches"])
api_v1_router.include_router(sessions.router, tags=["Sessions"])


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints."""
    return {
        "version": "1.0",
        "endpoints": {
            "slots": "/api/v1/coaches/{coach_id}/available-slots",
            "packages": "/api/v1/coaches/{coach_id}/packages",
            "availability": "/api/v1/coaches/{coach_id}/availability",
            "book": "/api/v1/sessions/book",
        }
    }
