"""Middleware package: error hierarchy, anti-forgery check, and request ID."""

from mailchimp_bridge.middleware.csrf import CsrfMiddleware
from mailchimp_bridge.middleware.error_handler import (
    ApiKeyNotConfiguredError,
    AuthenticationError,
    BridgeError,
    InvalidMethodError,
    InvalidSignatureError,
    MissingEndpointError,
    RateLimitExceededError,
    UpstreamClientError,
    UpstreamTransportError,
    ValidationError,
    register_error_handlers,
)
from mailchimp_bridge.middleware.request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "ApiKeyNotConfiguredError",
    "AuthenticationError",
    "BridgeError",
    "CsrfMiddleware",
    "InvalidMethodError",
    "InvalidSignatureError",
    "MissingEndpointError",
    "RateLimitExceededError",
    "RequestIdMiddleware",
    "UpstreamClientError",
    "UpstreamTransportError",
    "ValidationError",
    "get_request_id",
    "register_error_handlers",
]
