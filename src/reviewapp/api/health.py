"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from reviewapp.api.deps import SessionDep
from reviewapp.tasks.queue import queue

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check - just confirms the service is running."""
    return {"status": "ok"}


@router.get("/db")
async def health_check_db(session: SessionDep):
    """Health check with database connectivity."""
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e!r}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "disconnected"},
        )


@router.get("/redis")
async def health_check_redis():
    """Health check for Redis, which backs the maintenance task queue."""
    try:
        redis = queue.redis  # type: ignore[attr-defined]
        if redis is None:
            return JSONResponse(
                status_code=503,
                content={"status": "error", "redis": "not_initialized"},
            )
        await redis.ping()
        return {"status": "ok", "redis": "connected"}
    except Exception as e:
        logger.error(f"Redis health check failed: {e!r}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "redis": "disconnected"},
        )
