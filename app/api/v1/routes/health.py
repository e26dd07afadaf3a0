import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.health import HealthStatus
from app.db.session import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthStatus, summary="API health check")
async def health_check() -> HealthStatus:
    """Return a simple status payload confirming the service is alive."""
    return HealthStatus(status="ok")


@router.get("/db", response_model=HealthStatus, summary="Database health check")
async def database_health_check(session: AsyncSession = Depends(get_session)):
    """Run SELECT 1 against the configured database; 503 when it is unreachable."""
    try:
        await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("Database health check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "error", "database": "unreachable"})
    return HealthStatus(status="ok", database="ok")
