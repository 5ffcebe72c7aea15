"""Proxy endpoint.

- POST /request: forward ``{method, endpoint, params}`` to the upstream API
- POST /api/request: alias

Requires the anti-forgery token (see CsrfMiddleware). Always answers HTTP 200
with the ProxyResponse; the logical status travels in ``status``/``code``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from mailchimp_bridge.models.requests import ProxyRequest

if TYPE_CHECKING:
    from mailchimp_bridge.services.gateway import ProxyGateway


def client_identifier(request: Request) -> str:
    """Rate-limit key for a caller: its network address."""
    return request.client.host if request.client else "unknown"


def create_gateway_router(*, gateway: ProxyGateway) -> APIRouter:
    """Factory that creates the proxy router with an injected gateway."""

    gateway_router = APIRouter(tags=["proxy"])

    @gateway_router.post("/request")
    @gateway_router.post("/api/request")
    async def proxy_request(body: ProxyRequest, request: Request) -> dict:
        """Forward one call upstream on behalf of the caller."""
        response = await gateway.handle(
            client_identifier(request),
            body.method,
            body.endpoint,
            body.params,
        )
        return response.to_dict()

    return gateway_router
