"""Anti-forgery (double-submit cookie) middleware.

Browser callers of the proxy endpoint must echo the CSRF cookie value in a
request header. Webhook, health and info endpoints are not protected since
the provider cannot supply a token.

Uses ``hmac.compare_digest`` for constant-time comparison of the token.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from mailchimp_bridge.middleware.error_handler import AuthenticationError, _envelope

logger = logging.getLogger(__name__)

# Paths that require a valid token.
_PROTECTED_PATHS: set[str] = {"/request", "/api/request"}


class CsrfMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that enforces the double-submit CSRF check.

    Only state-changing requests to the proxy paths are checked. The token in
    ``header_name`` must equal the value of the ``cookie_name`` cookie.
    """

    def __init__(  # noqa: ANN001
        self,
        app,
        cookie_name: str = "CSRF_TOKEN",
        header_name: str = "X-CSRF-Token",
    ) -> None:
        super().__init__(app)
        self._cookie_name = cookie_name
        self._header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or request.url.path not in _PROTECTED_PATHS:
            return await call_next(request)

        provided = request.headers.get(self._header_name)
        expected = request.cookies.get(self._cookie_name)
        source_ip = request.client.host if request.client else "unknown"

        if not provided or not expected:
            logger.warning(
                "Missing CSRF token",
                extra={"client_id": source_ip, "endpoint": request.url.path},
            )
            return _envelope(
                status_code=AuthenticationError.status_code,
                error=AuthenticationError.message,
            )

        if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            logger.warning(
                "CSRF token mismatch",
                extra={"client_id": source_ip, "endpoint": request.url.path},
            )
            return _envelope(
                status_code=AuthenticationError.status_code,
                error=AuthenticationError.message,
            )

        return await call_next(request)
