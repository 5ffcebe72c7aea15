"""Health endpoint.

Does NOT require the anti-forgery token.
- GET /health: service status, upstream configuration and limiter settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter

from mailchimp_bridge.models.responses import ApiResponse

if TYPE_CHECKING:
    from mailchimp_bridge.integration.mailchimp_api import MailchimpApi
    from mailchimp_bridge.resilience.rate_limiter import SlidingWindowRateLimiter
    from mailchimp_bridge.services.webhook_relay import WebhookRelay


def create_health_router(
    *,
    api: MailchimpApi | None = None,
    rate_limiter: SlidingWindowRateLimiter | None = None,
    relay: WebhookRelay | None = None,
) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health check with configuration summary."""
        rate_limit: dict[str, Any] = {}
        if rate_limiter is not None:
            rate_limit = {
                "limit": rate_limiter.max_requests,
                "window_seconds": rate_limiter.window_seconds,
            }

        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "upstream_configured": api.is_configured if api else False,
                "upstream_base_url": api.base_url if api else None,
                "rate_limit": rate_limit,
                "webhook_consumers": relay.consumer_count if relay else 0,
            },
        ).model_dump()

    return health_router
