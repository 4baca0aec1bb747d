"""Maintenance background tasks for cleanup operations."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import delete, select

from reviewapp.database import get_session_context
from reviewapp.models import EmailVerificationToken, PasswordResetToken

logger = logging.getLogger(__name__)

# Timeout for maintenance tasks (10 minutes)
MAINTENANCE_TIMEOUT_SECONDS = 10 * 60

TOKEN_MODELS = {
    "email_verification_tokens": EmailVerificationToken,
    "password_reset_tokens": PasswordResetToken,
}


async def purge_expired_tokens(
    session: AsyncSession,
    now: datetime | None = None,
    dry_run: bool = False,
) -> dict[str, int]:
    """Delete verification and reset tokens whose expiry has passed.

    Returns:
        Number of expired rows per table (deleted unless dry_run)
    """
    now = now or datetime.now(UTC)
    counts: dict[str, int] = {}

    for table, model in TOKEN_MODELS.items():
        count_stmt = select(func.count()).select_from(model).where(model.expires_at <= now)
        counts[table] = (await session.execute(count_stmt)).scalar() or 0

        if not dry_run and counts[table]:
            await session.execute(delete(model).where(model.expires_at <= now))

    if not dry_run:
        await session.commit()

    return counts


async def prune_expired_tokens(
    ctx: dict[str, Any],
    dry_run: bool = False,
) -> dict[str, Any]:
    """SAQ task wrapping purge_expired_tokens.

    Args:
        ctx: SAQ context
        dry_run: If True, only report what would be deleted

    Returns:
        Dict with pruning results
    """
    async with get_session_context() as session:
        try:
            counts = await purge_expired_tokens(session, dry_run=dry_run)
        except Exception as e:
            error = f"Token pruning failed: {e}"
            logger.exception(error)
            return {"success": False, "error": error}

    logger.info(
        f"Token pruning complete (dry_run={dry_run}): "
        + ", ".join(f"{table}={count}" for table, count in counts.items())
    )
    return {"success": True, "dry_run": dry_run, **counts}
