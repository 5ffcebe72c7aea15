"""Proxy gateway: validate, rate-limit and forward a client call upstream."""

from __future__ import annotations

import logging
from typing import Any

from mailchimp_bridge.integration.mailchimp_api import MailchimpApi
from mailchimp_bridge.middleware.error_handler import (
    BridgeError,
    InvalidMethodError,
    MissingEndpointError,
    RateLimitExceededError,
)
from mailchimp_bridge.models.requests import HttpMethod
from mailchimp_bridge.models.responses import ProxyResponse
from mailchimp_bridge.resilience.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


class ProxyGateway:
    """Forwards ``(method, endpoint, params)`` calls on behalf of clients.

    Gateway errors (bad verb, missing endpoint, rate limit) never propagate:
    they come back as failure ProxyResponses with the matching code.
    Validation happens before admission, so malformed calls do not consume
    the client's allowance.
    """

    def __init__(self, api: MailchimpApi, rate_limiter: SlidingWindowRateLimiter) -> None:
        self._api = api
        self._rate_limiter = rate_limiter

    async def handle(
        self,
        client_id: str,
        method: object,
        endpoint: object,
        params: dict[str, Any] | None = None,
    ) -> ProxyResponse:
        try:
            verb = await self._admit(client_id, method, endpoint)
        except BridgeError as exc:
            return ProxyResponse.failure(exc.message, exc.status_code)

        return await self._api.request(verb.value, str(endpoint), params or {})

    async def _admit(self, client_id: str, method: object, endpoint: object) -> HttpMethod:
        verb = HttpMethod.parse(method)
        if verb is None:
            raise InvalidMethodError()

        if not isinstance(endpoint, str) or not endpoint:
            raise MissingEndpointError()

        decision = await self._rate_limiter.admit(client_id)
        if not decision.allowed:
            raise RateLimitExceededError(
                "Rate limit exceeded. Maximum "
                f"{self._rate_limiter.max_requests} requests per minute."
            )

        logger.debug(
            "Admitted %s %s for client %s (%d/%d)",
            verb.value,
            endpoint,
            client_id,
            decision.count,
            decision.limit,
            extra={"client_id": client_id, "method": verb.value, "endpoint": endpoint},
        )
        return verb
