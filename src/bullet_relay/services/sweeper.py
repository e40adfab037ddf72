"""Background expiry of relayed credential sessions.

This module provides the SessionSweepWorker class that periodically removes
expired records from the session store and forgets rate-limit windows that
have fully elapsed.
"""

from __future__ import annotations

import asyncio
import logging

from bullet_relay.services.rate_limit import TieredRateLimiter
from bullet_relay.services.session_store import SessionStore

# Configure logger for this module
logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


class SessionSweepWorker:
    """Periodically sweeps the session store while the application runs.

    The worker shares the store with request handlers; the store itself
    guarantees that a sweep and a concurrent redemption of the same session
    have exactly one winner.
    """

    def __init__(
        self,
        store: SessionStore,
        rate_limiter: TieredRateLimiter | None = None,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the sweep worker.

        Args:
            store: Session store to sweep.
            rate_limiter: Optional limiter whose idle windows are pruned too.
            interval_seconds: Delay between sweeps.
        """
        self.store = store
        self.rate_limiter = rate_limiter
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""

        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run(), name="session-sweep")

    async def stop(self) -> None:
        """Stop the background sweep loop and wait for it to finish."""

        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    def sweep_once(self) -> int:
        """Run a single sweep pass and return the number of sessions removed."""
        removed = self.store.sweep()
        if self.rate_limiter is not None:
            self.rate_limiter.prune()
        if removed:
            logger.info("Expired %d unredeemed credential sessions", removed)
        return removed

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                pass
            else:
                return

            try:
                self.sweep_once()
            except Exception:
                logger.exception("SessionSweepWorker encountered an error")
