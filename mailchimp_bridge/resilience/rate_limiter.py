"""Per-client sliding window rate limiter.

Each client identifier owns an ordered list of admission timestamps inside
the trailing window. Every check prunes timestamps older than the window and
admits the request only while fewer than ``max_requests`` remain.

Key behaviors:
- admit() never blocks: over-limit requests are rejected immediately
- Rejected requests are not recorded, so they do not extend the penalty
- Windows live in a RateWindowStore; the default in-process store only
  works for a single instance. Multi-instance deployments need a shared
  store behind the same interface.
- The key is the caller's network address, which is shared behind NAT and
  spoofable, so the limit is advisory throttling, not access control.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateDecision:
    """Result of a single admission check."""

    allowed: bool
    count: int  # Live timestamps after the decision
    limit: int
    retry_after: float = 0.0  # Seconds until the oldest entry leaves the window


class RateWindowStore(Protocol):
    """Storage for per-client timestamp windows."""

    async def get(self, client_id: str) -> list[float]: ...

    async def set(self, client_id: str, timestamps: list[float]) -> None: ...


class InMemoryRateWindowStore:
    """Process-local window storage. Not shared across workers or instances."""

    def __init__(self) -> None:
        self._windows: dict[str, list[float]] = {}

    async def get(self, client_id: str) -> list[float]:
        return list(self._windows.get(client_id, []))

    async def set(self, client_id: str, timestamps: list[float]) -> None:
        if timestamps:
            self._windows[client_id] = timestamps
        else:
            self._windows.pop(client_id, None)

    def __len__(self) -> int:
        return len(self._windows)


class SlidingWindowRateLimiter:
    """Sliding window limiter keyed by client identifier.

    Args:
        store: Window storage; defaults to an in-process store.
        max_requests: Admissions allowed per window.
        window_seconds: Window length in seconds.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        store: RateWindowStore | None = None,
        max_requests: int = 30,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store if store is not None else InMemoryRateWindowStore()
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _prune(self, timestamps: list[float], now: float) -> list[float]:
        cutoff = now - self._window_seconds
        return [t for t in timestamps if t > cutoff]

    async def admit(self, client_id: str) -> RateDecision:
        """Record a request for ``client_id`` if it fits in the window."""
        async with self._lock:
            now = self._clock()
            timestamps = self._prune(await self._store.get(client_id), now)

            if len(timestamps) >= self._max_requests:
                await self._store.set(client_id, timestamps)
                retry_after = max(0.0, timestamps[0] + self._window_seconds - now)
                logger.warning(
                    "Rate limit exceeded for client %s (%d/%d)",
                    client_id,
                    len(timestamps),
                    self._max_requests,
                    extra={"client_id": client_id},
                )
                return RateDecision(
                    allowed=False,
                    count=len(timestamps),
                    limit=self._max_requests,
                    retry_after=retry_after,
                )

            timestamps.append(now)
            await self._store.set(client_id, timestamps)
            return RateDecision(allowed=True, count=len(timestamps), limit=self._max_requests)

    async def get_stats(self, client_id: str) -> dict:
        """Current window usage for a client."""
        async with self._lock:
            timestamps = self._prune(await self._store.get(client_id), self._clock())
            await self._store.set(client_id, timestamps)

        return {
            "count": len(timestamps),
            "limit": self._max_requests,
            "window_seconds": self._window_seconds,
        }
