"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from eventy.api.routes import auth, events, bookings, uploads

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(bookings.router)
api_router.include_router(uploads.router)
