"""FastAPI application entry point.

Builds the upstream client, rate limiter, proxy gateway and webhook relay,
mounts their routers and wires middleware. Run standalone with::

    uvicorn mailchimp_bridge.main:app --port 8002

Startup configures JSON logging; there are no background tasks to drain on
shutdown.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mailchimp_bridge import __version__
from mailchimp_bridge.config.module_config import load_settings
from mailchimp_bridge.config.settings import BridgeSettings
from mailchimp_bridge.integration.mailchimp_api import MailchimpApi
from mailchimp_bridge.logging_config import configure_logging
from mailchimp_bridge.middleware.csrf import CsrfMiddleware
from mailchimp_bridge.middleware.error_handler import register_error_handlers
from mailchimp_bridge.middleware.request_id import RequestIdMiddleware
from mailchimp_bridge.resilience.rate_limiter import (
    RateWindowStore,
    SlidingWindowRateLimiter,
)
from mailchimp_bridge.routers.gateway import create_gateway_router
from mailchimp_bridge.routers.health import create_health_router
from mailchimp_bridge.routers.webhook import create_webhook_router
from mailchimp_bridge.services.gateway import ProxyGateway
from mailchimp_bridge.services.webhook_relay import WebhookConsumer, WebhookRelay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: logging setup and lifecycle log lines."""
    settings: BridgeSettings = app.state.settings
    configure_logging(settings.log_level)

    logger.info(
        "Starting bridge service on port %d (upstream %s, %d req/%ds)",
        settings.port,
        app.state.api.base_url,
        settings.requests_per_minute,
        settings.rate_limit_window_seconds,
    )
    if not settings.api_key:
        logger.warning("MAILCHIMP_API_KEY is not set; proxy calls will fail")
    if settings.webhook_secret and not settings.webhook_require_signature:
        logger.info("Webhook signatures are verified only when the header is present")

    yield

    logger.info("Bridge service shut down")


def create_app(
    settings: BridgeSettings | None = None,
    consumers: Iterable[WebhookConsumer] = (),
    rate_window_store: RateWindowStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings:
        Explicit settings; loaded from the environment and config file when
        omitted.
    consumers:
        Webhook consumers registered on the relay, invoked in order.
    rate_window_store:
        Shared window store for multi-instance deployments. Defaults to the
        in-process store.
    """
    settings = settings or load_settings()

    api = MailchimpApi(
        api_key=settings.api_key,
        base_url=settings.api_base_url,
        timeout_seconds=settings.request_timeout_seconds,
        signup_url=settings.signup_url,
    )
    rate_limiter = SlidingWindowRateLimiter(
        store=rate_window_store,
        max_requests=settings.requests_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
    )
    gateway = ProxyGateway(api=api, rate_limiter=rate_limiter)
    relay = WebhookRelay(
        secret=settings.webhook_secret,
        consumers=consumers,
        signature_header=settings.webhook_signature_header,
        require_signature=settings.webhook_require_signature,
    )

    app = FastAPI(
        title="Mailchimp Bridge",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.api = api
    app.state.rate_limiter = rate_limiter
    app.state.gateway = gateway
    app.state.relay = relay

    register_error_handlers(app)

    # Starlette applies middleware in reverse order of add_middleware calls
    if settings.csrf_enabled:
        app.add_middleware(
            CsrfMiddleware,
            cookie_name=settings.csrf_cookie_name,
            header_name=settings.csrf_header_name,
        )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(create_health_router(api=api, rate_limiter=rate_limiter, relay=relay))
    app.include_router(create_gateway_router(gateway=gateway))
    app.include_router(
        create_webhook_router(relay=relay, public_base_url=settings.public_base_url)
    )

    return app


app = create_app()
