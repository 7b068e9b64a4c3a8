"""Health checks and monitoring endpoints"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.redis import ping_broker

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Liveness probe"""
    return {"status": "healthy", "service": "coach-booking-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Readiness probe. Booking needs the database; a broker outage only delays
    pending payments, so it degrades rather than fails the service.
    """
    checks = {"database": "unknown", "payment_broker": "unknown"}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        checks["database"] = f"unhealthy: {e}"

    try:
        await ping_broker()
        checks["payment_broker"] = "healthy"
    except Exception as e:
        logger.warning(f"Payment broker health check failed: {e}")
        checks["payment_broker"] = f"unhealthy: {e}"

    if checks["database"] != "healthy":
        checks["overall"] = "unhealthy"
    elif checks["payment_broker"] != "healthy":
        checks["overall"] = "degraded"
    else:
        checks["overall"] = "healthy"

    return checks
