"""Utilities module - lock client and helpers."""
from ladders.config import get_settings
from ladders.utils.lock_client import LockClient, LockTimeoutError
from ladders.utils.datetime_helpers import ensure_utc

settings = get_settings()

# Create singleton instance
lock_client = LockClient(settings.redis_url if settings.redis_url else None)

__all__ = ["lock_client", "LockTimeoutError", "ensure_utc"]
