"""
Health check endpoints.

- /health, /health/live: liveness
- /health/db: database connectivity
- /health/ready: database, Stripe configuration and Stripe circuit state
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.config import Settings, get_settings
from app.infrastructure.circuit_breaker import stripe_breaker

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "bookings-api"


async def _database_ok(session: AsyncSession) -> bool:
    try:
        await session.scalar(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", exc_info=e)
        return False
    return True


@router.get("/health")
@router.get("/health/live")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    if await _database_ok(session):
        return {"status": "healthy", "component": "database"}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unhealthy", "component": "database"},
    )


@router.get("/health/ready")
async def health_check_ready(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """
    Only the database gates readiness. Missing Stripe keys or an open
    circuit are reported: bookings can still be created and read.
    """
    database_ok = await _database_ok(session)
    body = {
        "status": "ready" if database_ok else "not_ready",
        "checks": {
            "database": "healthy" if database_ok else "unhealthy",
            "stripe_configured": bool(
                settings.stripe_secret_key and settings.stripe_webhook_secret
            ),
            "stripe_circuit": stripe_breaker.current_state,
        },
    }
    if not database_ok:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body
