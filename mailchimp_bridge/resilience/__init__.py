"""Resilience components for the bridge service."""

from mailchimp_bridge.resilience.rate_limiter import (
    InMemoryRateWindowStore,
    RateDecision,
    RateWindowStore,
    SlidingWindowRateLimiter,
)

__all__ = [
    "InMemoryRateWindowStore",
    "RateDecision",
    "RateWindowStore",
    "SlidingWindowRateLimiter",
]
