# src/bullet_relay/services/rate_limit.py
"""Fixed-window request quotas with independent credential tiers."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 15 * 60
DEFAULT_TIER_MAX = 20
OWN_CREDENTIAL_TIER_MAX = 10


class Tier(str, Enum):
    """Rate-limit category of a request."""

    DEFAULT = "default"  # served with the server's own credential
    OWN_CREDENTIAL = "own_key"  # caller referenced a relayed credential


@dataclass
class _Window:
    started_at: float
    count: int = 0
    retired: bool = False
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)


class TieredRateLimiter:
    """Per-caller fixed-window counters, one independent window per tier.

    Each ``(caller_key, tier)`` pair owns its own lock, so checks for
    unrelated callers never contend. Rejected calls do not advance the count,
    and counts only ever go back to zero when the window elapses.
    """

    def __init__(
        self,
        limits: dict[Tier, int] | None = None,
        *,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("Rate-limit window must be positive")
        self._limits = {
            Tier.DEFAULT: DEFAULT_TIER_MAX,
            Tier.OWN_CREDENTIAL: OWN_CREDENTIAL_TIER_MAX,
        }
        if limits:
            self._limits.update(limits)
        self._window_seconds = float(window_seconds)
        self._clock = clock
        self._windows: dict[tuple[str, Tier], _Window] = {}

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def limit_for(self, tier: Tier) -> int:
        return self._limits[tier]

    def _window(self, caller_key: str, tier: Tier, now: float) -> _Window:
        return self._windows.setdefault((caller_key, tier), _Window(started_at=now))

    def allow(self, caller_key: str, tier: Tier) -> bool:
        """Record a request and return False once the tier's quota is spent."""
        now = self._clock()
        while True:
            window = self._window(caller_key, tier, now)
            with window.lock:
                if window.retired:
                    # prune() dropped this window between lookup and lock
                    continue
                if now - window.started_at >= self._window_seconds:
                    window.started_at = now
                    window.count = 0
                if window.count >= self._limits[tier]:
                    return False
                window.count += 1
                return True

    def retry_after(self, caller_key: str, tier: Tier) -> int:
        """Return whole seconds until the caller's current window resets."""
        window = self._windows.get((caller_key, tier))
        if window is None:
            return 0
        with window.lock:
            remaining = window.started_at + self._window_seconds - self._clock()
        return max(0, math.ceil(remaining))

    def prune(self) -> int:
        """Forget windows that have fully elapsed and return how many were dropped."""
        now = self._clock()
        removed = 0
        for key, window in list(self._windows.items()):
            with window.lock:
                if now - window.started_at < self._window_seconds:
                    continue
                if self._windows.get(key) is window:
                    window.retired = True
                    del self._windows[key]
                    removed += 1
        if removed:
            logger.debug("Pruned %d idle rate-limit windows", removed)
        return removed

    def __len__(self) -> int:
        return len(self._windows)
