"""HTTP client for the Mailchimp Marketing API (v3.0).

Forwards a ``(method, endpoint, params)`` call to
``https://<prefix>.api.mailchimp.com/3.0/<endpoint>`` with basic auth and
wraps the outcome in a ProxyResponse. This is a pure pass-through: there are
no retries and upstream errors are returned to the caller as-is.

SECURITY: The API key is sent as the basic-auth password and never logged.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from mailchimp_bridge.middleware.error_handler import (
    ApiKeyNotConfiguredError,
    BridgeError,
    UpstreamClientError,
    UpstreamTransportError,
)
from mailchimp_bridge.models.responses import ProxyResponse

logger = logging.getLogger(__name__)

# Upstream ignores the basic-auth username
_AUTH_USERNAME = "anystring"


class MailchimpApi:
    """Upstream API client.

    Parameters
    ----------
    api_key:
        Upstream API key. Calls fail with a 500 ProxyResponse when unset.
    base_url:
        Versioned API root, e.g. ``https://us6.api.mailchimp.com/3.0/``.
    timeout_seconds:
        HTTP timeout per call (default 120).
    signup_url:
        Fallback returned by ``get_list_signup_url`` when the list has none.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        timeout_seconds: float = 120.0,
        signup_url: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._timeout_seconds = timeout_seconds
        self._signup_url = signup_url

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> ProxyResponse:
        """Send one call upstream and wrap the outcome.

        2xx becomes ``{success: true, data, status}``; a 4xx passes the parsed
        error body through under ``error``; anything else (5xx, timeout,
        connection failure, undecodable body) becomes a 500 with the message.
        """
        try:
            data, status = await self._send(method.upper(), endpoint, params or {})
        except UpstreamClientError as exc:
            return ProxyResponse.failure(exc.error_body, exc.status_code)
        except BridgeError as exc:
            return ProxyResponse.failure(exc.message, exc.status_code)

        return ProxyResponse.ok(data, status)

    async def _send(
        self, method: str, endpoint: str, params: dict[str, Any]
    ) -> tuple[Any, int]:
        if not self._api_key:
            raise ApiKeyNotConfiguredError()

        path = endpoint.lstrip("/")
        options: dict[str, Any] = {
            "auth": (_AUTH_USERNAME, self._api_key),
            "headers": {
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        }
        if method == "GET" and params:
            options["params"] = params
        elif params:
            options["content"] = json.dumps(params).encode("utf-8")

        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout_seconds
            ) as client:
                response = await client.request(method, path, **options)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if 400 <= status < 500:
                logger.info(
                    "Upstream rejected %s %s with %d",
                    method,
                    path,
                    status,
                    extra={"method": method, "endpoint": path, "status_code": status},
                )
                raise UpstreamClientError(status, self._decode_error(exc.response)) from exc
            logger.warning(
                "Upstream failure for %s %s: %s",
                method,
                path,
                exc,
                extra={"method": method, "endpoint": path, "status_code": status},
            )
            raise UpstreamTransportError(str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Upstream transport error for %s %s: %s",
                method,
                path,
                exc,
                extra={"method": method, "endpoint": path},
            )
            raise UpstreamTransportError(str(exc) or exc.__class__.__name__) from exc

        duration_ms = round((time.monotonic() - started) * 1000, 1)
        logger.info(
            "Forwarded %s %s -> %d",
            method,
            path,
            response.status_code,
            extra={
                "method": method,
                "endpoint": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        if not response.content.strip():
            return None, response.status_code

        try:
            return response.json(), response.status_code
        except ValueError as exc:
            raise UpstreamTransportError(f"Invalid JSON in upstream response: {exc}") from exc

    @staticmethod
    def _decode_error(response: httpx.Response) -> Any:
        """Parse a 4xx body, wrapping undecodable text as ``{"detail": text}``."""
        try:
            return response.json()
        except ValueError:
            return {"detail": response.text}

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.request("GET", endpoint, params)

    async def post(self, endpoint: str, data: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.request("POST", endpoint, data)

    async def patch(self, endpoint: str, data: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.request("PATCH", endpoint, data)

    async def put(self, endpoint: str, data: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.request("PUT", endpoint, data)

    async def delete(self, endpoint: str) -> ProxyResponse:
        return await self.request("DELETE", endpoint)

    async def get_list_signup_url(self, list_id: str) -> str | None:
        """Return the list's hosted signup URL, or the configured fallback."""
        response = await self.get(f"lists/{list_id}")
        if response.success and isinstance(response.data, dict):
            url = response.data.get("subscribe_url_long")
            if url:
                return url
        return self._signup_url
