# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + number of devices currently generating.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy import text
from app.database import SessionLocal
from app.dependencies import get_scheduler
from app.services.scheduler import TransactionScheduler

router = APIRouter()


@router.get("/health", summary="System health check")
async def health_check(scheduler: TransactionScheduler = Depends(get_scheduler)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Count of devices with a live generation chain
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "unknown",
        "active_devices": scheduler.active_count(),
    }

    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
