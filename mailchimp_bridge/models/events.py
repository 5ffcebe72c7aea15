"""In-memory models for webhook processing results and published events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mailchimp_bridge.models.requests import WebhookType


@dataclass(frozen=True)
class RelayResult:
    """Outcome of processing one webhook call."""

    type: str  # Raw type string as received
    processed: bool
    message: str


@dataclass(frozen=True)
class WebhookEvent:
    """Notification handed to webhook consumers."""

    type: WebhookType
    fired_at: str | None
    payload: dict[str, Any] = field(default_factory=dict)
    result: RelayResult | None = None
