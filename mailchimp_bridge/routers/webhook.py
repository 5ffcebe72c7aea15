"""Webhook endpoints.

These endpoints do NOT require the anti-forgery token.
- POST /webhook/handle: JSON or form-encoded callback from the provider
- GET  /webhook/handle: query-string callback (used for URL validation)
- POST|GET /webhook/info: advertised URL and recognized event types

Every handle response is HTTP 200 so the provider does not retry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from mailchimp_bridge.middleware.error_handler import InvalidSignatureError
from mailchimp_bridge.services.webhook_relay import decode_webhook_body, parse_webhook_fields

if TYPE_CHECKING:
    from mailchimp_bridge.services.webhook_relay import WebhookRelay

logger = logging.getLogger(__name__)

_HANDLE_PATH = "webhook/handle"


def create_webhook_router(
    *,
    relay: WebhookRelay,
    public_base_url: str | None = None,
) -> APIRouter:
    """Factory that creates the webhook router with an injected relay.

    Parameters
    ----------
    relay:
        WebhookRelay that verifies and republishes callbacks.
    public_base_url:
        Base URL advertised by /webhook/info; the request's own base URL
        is used when unset.
    """
    webhook_router = APIRouter(prefix="/webhook", tags=["webhook"])

    @webhook_router.api_route("/handle", methods=["GET", "POST"])
    async def handle(request: Request) -> dict:
        """Verify, classify and republish one provider callback."""
        raw_body = await request.body()

        try:
            if request.method == "POST":
                fields = decode_webhook_body(raw_body, request.headers.get("content-type"))
            else:
                fields = parse_webhook_fields(request.query_params.multi_items())
        except ValueError as exc:
            logger.warning("Undecodable webhook body: %s", exc)
            return {"error": f"Invalid webhook payload: {exc}"}

        try:
            relay.handle(raw_body, request.headers, fields)
        except InvalidSignatureError as exc:
            return {"error": exc.message}
        except Exception as exc:
            logger.exception("Webhook processing error: %s", exc)
            return {"error": str(exc)}

        return {"success": True}

    @webhook_router.api_route("/info", methods=["GET", "POST"])
    async def info(request: Request) -> dict:
        """Report the public webhook URL and the recognized event types."""
        base_url = public_base_url or str(request.base_url)
        if not base_url.endswith("/"):
            base_url += "/"

        return {
            "webhook_url": base_url + _HANDLE_PATH,
            "available_events": relay.available_events(),
            "configuration_help": "Add this URL to your Mailchimp list webhook settings",
        }

    return webhook_router
