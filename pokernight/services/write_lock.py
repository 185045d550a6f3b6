"""
Global write lock for seating and statistics mutations.

Every mutation of the game history (seating generation, result recording,
admin edits and deletes, full recomputes) runs inside this single critical
section, so the active-game check, the fingerprint check and the insert can
never interleave between two requests.

Within one process an ``asyncio.Lock`` is enough. When ``REDIS_URL`` is set
the lock is additionally taken in Redis so several server workers sharing one
database also serialise.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import LockError

from pokernight.config import Config
from pokernight.utils.exceptions import WriteLockError
from pokernight.utils.logger import setup_logger

logger = setup_logger(__name__)

LOCK_KEY = "pokernight:write_lock"


class WriteLock:
    """Process-wide mutual exclusion with optional Redis-backed cross-process locking."""

    def __init__(self, redis_url: Optional[str] = None, timeout: int = Config.WRITE_LOCK_TIMEOUT_SECONDS):
        self._lock = asyncio.Lock()
        self.redis_url = redis_url
        self.timeout = timeout
        self.redis_client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis when a URL is configured. Failures leave only the local lock active."""
        if not self.redis_url:
            logger.debug("REDIS_URL not set, using in-process write lock only")
            return

        try:
            client = redis.from_url(self.redis_url)
            await client.ping()
            self.redis_client = client
            logger.info("Connected to Redis for cross-process write locking")
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}. Falling back to in-process write lock.")
            self.redis_client = None

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None

    @asynccontextmanager
    async def hold(self, operation: str):
        """Hold the write lock for the duration of ``operation``"""
        start = time.monotonic()
        async with self._lock:
            if self.redis_client is None:
                logger.debug(f"Acquired write lock for {operation} after {time.monotonic() - start:.3f}s")
                yield
                return

            lock = self.redis_client.lock(LOCK_KEY, timeout=self.timeout, blocking_timeout=self.timeout)
            try:
                acquired = await lock.acquire()
            except redis.RedisError as e:
                logger.error(f"Could not acquire distributed write lock for {operation}: {e}")
                raise WriteLockError(operation, str(e)) from e
            if not acquired:
                logger.warning(f"Timed out after {self.timeout}s waiting for distributed write lock for {operation}")
                raise WriteLockError(operation, f"not acquired within {self.timeout}s")

            logger.debug(f"Acquired distributed write lock for {operation} after {time.monotonic() - start:.3f}s")
            try:
                yield
            finally:
                try:
                    await lock.release()
                except LockError as e:
                    # Lease expired while the operation was still running
                    logger.error(f"Distributed write lock for {operation} expired before release: {e}")
                    raise WriteLockError(operation, f"lock expired after {self.timeout}s") from e
