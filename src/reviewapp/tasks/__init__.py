"""Background task processing."""

from reviewapp.tasks.maintenance import prune_expired_tokens
from reviewapp.tasks.queue import get_queue_settings, queue

__all__ = ["get_queue_settings", "prune_expired_tokens", "queue"]
