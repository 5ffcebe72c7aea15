"""Public models for the bridge service."""

from mailchimp_bridge.models.events import RelayResult, WebhookEvent
from mailchimp_bridge.models.requests import HttpMethod, ProxyRequest, WebhookType
from mailchimp_bridge.models.responses import ApiResponse, ProxyResponse

__all__ = [
    "ApiResponse",
    "HttpMethod",
    "ProxyRequest",
    "ProxyResponse",
    "RelayResult",
    "WebhookEvent",
    "WebhookType",
]
