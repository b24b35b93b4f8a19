"""
Health checks

/health is liveness and never touches the database, so a database outage
does not get the process restarted. /health/db is readiness.
"""
import time
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from folio.shared.database import get_db
from folio.shared import errors

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health():
    """Liveness check endpoint - returns process status"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": errors.ENVIRONMENT,
    }


@router.get("/db")
def database_health(db: Session = Depends(get_db)):
    """Readiness check endpoint - runs a trivial query"""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {type(e).__name__}: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected"},
        )
    return {"status": "healthy", "database": "connected"}
