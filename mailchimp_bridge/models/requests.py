"""Pydantic request models and enums for proxy calls and webhook events."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class HttpMethod(str, Enum):
    """HTTP verbs the gateway forwards upstream."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: object) -> HttpMethod | None:
        """Case-insensitive lookup; None for anything outside the five verbs."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.upper())
        except ValueError:
            return None


class ProxyRequest(BaseModel):
    """A single ``(method, endpoint, params)`` call destined for the upstream API.

    ``method`` and ``endpoint`` accept any JSON value so the gateway can
    report an invalid verb or a missing endpoint as a structured response
    rather than a 422.
    """

    method: Any = "GET"
    endpoint: Any = None
    params: dict[str, Any] | None = Field(default_factory=dict)


class WebhookType(str, Enum):
    """Webhook event types sent by the provider."""

    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    PROFILE = "profile"
    UPEMAIL = "upemail"
    CLEANED = "cleaned"
    CAMPAIGN = "campaign"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, value: object) -> WebhookType:
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.UNKNOWN
