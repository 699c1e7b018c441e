"""Lock client abstraction - Redis or in-process fallback."""
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(RuntimeError):
    """Raised when a named lock cannot be acquired in time."""


class LockClient:
    """Named async locks - uses Redis if available, else asyncio locks."""

    def __init__(self, redis_url: Optional[str] = None):
        self.backend = "memory"
        self._memory_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]] = (
            weakref.WeakKeyDictionary()
        )

        if redis_url:
            try:
                import redis
                import redis.asyncio as redis_async

                redis.from_url(redis_url).ping()
                self.redis = redis_async.from_url(redis_url)
                self.backend = "redis"
                logger.info("Using Redis for locks")
            except Exception as e:
                logger.warning(f"Redis not available, using in-memory locks: {e}")
        else:
            logger.info("Using in-memory locks (Redis URL not provided)")

    def _memory_lock(self, name: str) -> asyncio.Lock:
        # asyncio locks are bound to the loop that first waits on them
        loop_locks = self._memory_locks.setdefault(asyncio.get_running_loop(), {})
        lock = loop_locks.get(name)
        if lock is None:
            lock = loop_locks[name] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def lock(self, name: str, timeout: float = 10) -> AsyncIterator[None]:
        """Hold the named lock for the duration of the block.

        Args:
            name: Lock name, e.g. ``area:SW1``
            timeout: Seconds to wait for the lock; Redis locks also expire after this long
                plus a grace period so a crashed holder cannot block an area forever.

        Raises:
            LockTimeoutError: If the lock was not acquired within ``timeout``
        """
        if self.backend == "redis":
            redis_lock = self.redis.lock(f"lock:{name}", timeout=timeout * 3, blocking_timeout=timeout)
            if not await redis_lock.acquire():
                logger.warning(f"Timed out waiting for lock {name}")
                raise LockTimeoutError(f"Timed out waiting for lock {name}")
            try:
                yield
            finally:
                from redis.exceptions import LockError

                try:
                    await redis_lock.release()
                except LockError as e:
                    logger.warning(f"Lock {name} expired before release: {e}")
        else:
            memory_lock = self._memory_lock(name)
            try:
                await asyncio.wait_for(memory_lock.acquire(), timeout=timeout)
            except asyncio.TimeoutError as exc:
                logger.warning(f"Timed out waiting for lock {name}")
                raise LockTimeoutError(f"Timed out waiting for lock {name}") from exc
            try:
                yield
            finally:
                memory_lock.release()
