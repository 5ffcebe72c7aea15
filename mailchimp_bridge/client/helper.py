"""Async client for the bridge's proxy endpoint.

Wraps the request builders with I/O: each convenience method builds a
ProxyRequest and POSTs it to ``/request`` together with the anti-forgery
token. Failures of the hop to the bridge itself are reported in the same
ProxyResponse shape as upstream failures.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from mailchimp_bridge.client.builders import RequestBuilder
from mailchimp_bridge.client.validation import EmailValidation, validate_email
from mailchimp_bridge.config.settings import DEFAULT_BLOCKED_TLDS, BridgeSettings
from mailchimp_bridge.models.requests import ProxyRequest
from mailchimp_bridge.models.responses import ProxyResponse

logger = logging.getLogger(__name__)

ResponseCallback = Callable[[ProxyResponse], None]


class HelperRequestError(Exception):
    """An upstream failure the helper cannot express as a status."""


class MailchimpHelper:
    """Convenience wrapper around the bridge's proxy endpoint.

    Parameters
    ----------
    base_url:
        Root URL of the bridge service.
    endpoint:
        Path of the proxy endpoint (default ``/request``).
    csrf_token:
        Anti-forgery token, sent both as cookie and header.
    list_id:
        Default audience for list-scoped operations.
    timeout_seconds:
        HTTP timeout for the hop to the bridge (default 30).
    on_success / on_error:
        Optional callbacks receiving every successful / failed response.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8002",
        endpoint: str = "/request",
        csrf_token: str = "",
        csrf_cookie_name: str = "CSRF_TOKEN",
        csrf_header_name: str = "X-CSRF-Token",
        list_id: str | None = None,
        timeout_seconds: float = 30.0,
        on_success: ResponseCallback | None = None,
        on_error: ResponseCallback | None = None,
        blocked_tlds: Iterable[str] = DEFAULT_BLOCKED_TLDS,
    ) -> None:
        self._base_url = base_url
        self._endpoint = endpoint
        self._csrf_token = csrf_token
        self._csrf_cookie_name = csrf_cookie_name
        self._csrf_header_name = csrf_header_name
        self._timeout_seconds = timeout_seconds
        self._on_success = on_success
        self._on_error = on_error or self._log_error
        self._blocked_tlds = tuple(blocked_tlds)
        self.requests = RequestBuilder(list_id)

    @classmethod
    def from_settings(
        cls,
        settings: BridgeSettings,
        csrf_token: str = "",
        **kwargs: Any,
    ) -> MailchimpHelper:
        """Build a helper for a bridge configured with ``settings``.

        Uses the bridge's advertised URL (or localhost on its port), its
        CSRF names, default audience and email blocklist. Keyword arguments
        override any of these.
        """
        options: dict[str, Any] = {
            "base_url": settings.public_base_url or f"http://localhost:{settings.port}",
            "csrf_cookie_name": settings.csrf_cookie_name,
            "csrf_header_name": settings.csrf_header_name,
            "list_id": settings.list_id,
            "blocked_tlds": settings.blocked_email_tlds,
        }
        options.update(kwargs)
        return cls(csrf_token=csrf_token, **options)

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def _log_error(response: ProxyResponse) -> None:
        logger.warning("Mailchimp API error %s: %s", response.code, response.error)

    # -- Transport ----------------------------------------------------------

    async def request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> ProxyResponse:
        return await self.send(ProxyRequest(method=method, endpoint=endpoint, params=params or {}))

    async def send(self, call: ProxyRequest) -> ProxyResponse:
        """POST one call to the bridge and return its ProxyResponse."""
        logger.debug("Bridge request %s %s", call.method, call.endpoint)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_seconds,
                cookies={self._csrf_cookie_name: self._csrf_token},
            ) as client:
                response = await client.post(
                    self._endpoint,
                    json=call.model_dump(),
                    headers={
                        "Accept": "application/json",
                        "X-Requested-With": "XMLHttpRequest",
                        self._csrf_header_name: self._csrf_token,
                    },
                )

            if not response.is_success:
                result = ProxyResponse.failure(f"HTTP error! status: {response.status_code}", 500)
            else:
                result = ProxyResponse.model_validate(response.json())
        except httpx.TimeoutException:
            result = ProxyResponse.failure("Request timeout", 500)
        except (httpx.HTTPError, ValueError) as exc:
            result = ProxyResponse.failure(str(exc) or exc.__class__.__name__, 500)

        if result.success and self._on_success:
            self._on_success(result)
        elif not result.success and self._on_error:
            self._on_error(result)

        return result

    # -- Validation ---------------------------------------------------------

    def validate_email(self, email: str | None) -> EmailValidation:
        return validate_email(email, self._blocked_tlds)

    # -- Lists --------------------------------------------------------------

    async def get_lists(self) -> ProxyResponse:
        return await self.send(self.requests.get_lists())

    async def get_list(self, list_id: str | None = None) -> ProxyResponse:
        return await self.send(self.requests.get_list(list_id))

    async def get_list_signup_url(self, list_id: str | None = None) -> str | None:
        response = await self.get_list(list_id)
        if response.success and isinstance(response.data, dict):
            return response.data.get("subscribe_url_long") or None
        return None

    async def get_members(self, params: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.send(self.requests.get_members(params))

    # -- Members ------------------------------------------------------------

    async def check_subscription(self, email: str) -> ProxyResponse:
        return await self.send(self.requests.check_subscription(email))

    async def add_or_update_member(
        self, email: str, data: dict[str, Any] | None = None
    ) -> ProxyResponse:
        return await self.send(self.requests.add_or_update_member(email, data))

    async def subscribe_member(
        self, email: str, merge_fields: dict[str, Any] | None = None
    ) -> ProxyResponse:
        return await self.send(self.requests.subscribe_member(email, merge_fields))

    async def unsubscribe_member(self, email: str) -> ProxyResponse:
        return await self.send(self.requests.unsubscribe_member(email))

    async def get_subscription_status(self, email: str) -> dict[str, Any]:
        """Summarize a member's status as flags.

        Raises HelperRequestError for failures other than "not found".
        """
        response = await self.check_subscription(email)

        if response.success:
            data = response.data or {}
            status = data.get("status")
            return {
                "found": True,
                "status": status,
                "email": data.get("email_address"),
                "subscribed": status == "subscribed",
                "unsubscribed": status == "unsubscribed",
                "pending": status == "pending",
                "cleaned": status == "cleaned",
                "data": data,
            }

        if response.code == 404:
            return {
                "found": False,
                "status": "not_found",
                "email": email,
                "subscribed": False,
                "unsubscribed": False,
                "pending": False,
                "cleaned": False,
                "data": None,
            }

        detail = response.error.get("detail") if isinstance(response.error, dict) else response.error
        raise HelperRequestError(detail or "Unknown error")

    async def update_member_interests(self, email: str, interests: dict[str, bool]) -> ProxyResponse:
        return await self.send(self.requests.update_member_interests(email, interests))

    async def archive_member(self, email: str) -> ProxyResponse:
        return await self.send(self.requests.archive_member(email))

    async def permanently_delete_member(self, email: str) -> ProxyResponse:
        return await self.send(self.requests.permanently_delete_member(email))

    async def get_member_activity(self, email: str) -> ProxyResponse:
        return await self.send(self.requests.get_member_activity(email))

    async def get_member_events(
        self, email: str, params: dict[str, Any] | None = None
    ) -> ProxyResponse:
        return await self.send(self.requests.get_member_events(email, params))

    # -- Batches ------------------------------------------------------------

    async def batch_subscribe(
        self, emails: list[str], options: dict[str, Any] | None = None
    ) -> ProxyResponse:
        return await self.send(self.requests.batch_subscribe(emails, options))

    async def batch_unsubscribe(self, emails: list[str]) -> ProxyResponse:
        return await self.send(self.requests.batch_unsubscribe(emails))

    # -- Tags ---------------------------------------------------------------

    async def add_tags(self, email: str, tags: list[str]) -> ProxyResponse:
        return await self.send(self.requests.add_tags(email, tags))

    async def remove_tags(self, email: str, tags: list[str]) -> ProxyResponse:
        return await self.send(self.requests.remove_tags(email, tags))

    async def get_tags(self, email: str) -> ProxyResponse:
        return await self.send(self.requests.get_tags(email))

    # -- Segments and interests ---------------------------------------------

    async def add_to_segment(self, email: str, segment_id: str) -> ProxyResponse:
        return await self.send(self.requests.add_to_segment(email, segment_id))

    async def get_segments(self, params: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.send(self.requests.get_segments(params))

    async def get_interest_categories(self) -> ProxyResponse:
        return await self.send(self.requests.get_interest_categories())

    # -- Campaigns and automations ------------------------------------------

    async def get_campaigns(self, params: dict[str, Any] | None = None) -> ProxyResponse:
        return await self.send(self.requests.get_campaigns(params))

    async def get_campaign_content(self, campaign_id: str) -> ProxyResponse:
        return await self.send(self.requests.get_campaign_content(campaign_id))

    async def trigger_automation(self, workflow_id: str, email: str) -> ProxyResponse:
        return await self.send(self.requests.trigger_automation(workflow_id, email))

    async def pause_automation(self, workflow_id: str, email: str) -> ProxyResponse:
        return await self.send(self.requests.pause_automation(workflow_id, email))

    # -- Search -------------------------------------------------------------

    async def search_members(
        self, query: str, options: dict[str, Any] | None = None
    ) -> ProxyResponse:
        return await self.send(self.requests.search_members(query, options))
