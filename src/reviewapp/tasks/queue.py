"""SAQ queue configuration for background tasks."""

from saq import CronJob, Queue

from reviewapp.config import settings

# Main task queue
queue = Queue.from_url(settings.redis_url)


def get_queue_settings() -> dict:
    """Get SAQ queue settings for the worker."""
    # Import here to avoid circular imports
    from reviewapp.tasks.maintenance import prune_expired_tokens

    return {
        "queue": queue,
        "functions": [prune_expired_tokens],
        "cron_jobs": [
            # Expired tokens are already ignored by lookups; this keeps the tables small.
            CronJob(prune_expired_tokens, cron="0 * * * *"),
        ],
        "concurrency": 2,
        "startup": startup,
        "shutdown": shutdown,
    }


async def startup(_ctx: dict) -> None:
    """Called when worker starts."""
    pass


async def shutdown(_ctx: dict) -> None:
    """Called when worker shuts down."""
    from reviewapp.database import close_db

    await close_db()
