"""
Simple health check endpoint.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from brigade.core.config import settings
from brigade.core.database import get_session
from brigade.core.logging_config import log_warning

router = APIRouter(tags=["health"])


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=Dict[str, Any])
async def health_check(session: Annotated[Session, Depends(get_session)]):
    """
    Health check with database status.

    Returns degraded status if the database is unreachable but the service is running.
    """
    db_status = "connected"
    try:
        session.exec(text("SELECT 1")).first()
    except SQLAlchemyError as e:
        log_warning("Health check database probe failed", error=str(e))
        db_status = f"disconnected: {e}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "timestamp": _utc_now_iso(),
        "service": settings.app_name,
        "version": settings.app_version,
        "record_store": settings.record_store_backend,
        "database": db_status,
    }
