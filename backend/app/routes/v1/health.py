# backend/app/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer checks.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.api.dependencies import get_db
from app.core.config import settings
from app.core.constants import API_VERSION, BRAND_NAME

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    database_ok = True
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        database_ok = False
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": f"{BRAND_NAME.lower()}-api",
        "version": API_VERSION,
        "environment": settings.environment,
        "database": "ok" if database_ok else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
