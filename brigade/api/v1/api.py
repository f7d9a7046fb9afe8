"""
API v1 router.
"""
from fastapi import APIRouter

from brigade.api.v1.endpoints import access, health, journal

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(access.router)
api_router.include_router(journal.router)
