"""Webhook relay: verify, classify and republish provider callbacks.

Inbound callbacks are optionally verified with HMAC-SHA256(secret, raw body)
against a signature header, classified by their ``type`` field, summarized,
and handed to every registered consumer in registration order.

Consumers run synchronously in-process. A failing consumer is logged and
skipped; it never turns the provider's response into a failure, because the
provider retries aggressively on non-2xx answers.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl

from mailchimp_bridge.middleware.error_handler import InvalidSignatureError
from mailchimp_bridge.models.events import RelayResult, WebhookEvent
from mailchimp_bridge.models.requests import WebhookType

logger = logging.getLogger(__name__)

WebhookConsumer = Callable[[WebhookEvent], None]

EVENT_DESCRIPTIONS: dict[str, str] = {
    WebhookType.SUBSCRIBE.value: "Triggered when a subscriber joins the list",
    WebhookType.UNSUBSCRIBE.value: "Triggered when a subscriber unsubscribes",
    WebhookType.PROFILE.value: "Triggered when a subscriber updates their profile",
    WebhookType.UPEMAIL.value: "Triggered when a subscriber changes their email address",
    WebhookType.CLEANED.value: "Triggered when an email is cleaned from the list",
    WebhookType.CAMPAIGN.value: "Triggered for campaign events",
}

_KEY_HEAD = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_KEY_PART = re.compile(r"\[([^\[\]]*)\]")


# ---------------------------------------------------------------------------
# Payload decoding
# ---------------------------------------------------------------------------


def parse_webhook_fields(pairs: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Expand bracket-notation form keys into nested dicts.

    ``[("data[merges][FNAME]", "John")]`` -> ``{"data": {"merges": {"FNAME": "John"}}}``
    """
    fields: dict[str, Any] = {}
    for key, value in pairs:
        match = _KEY_HEAD.match(key)
        parts = [match.group(1), *_KEY_PART.findall(match.group(2))] if match else [key]

        node = fields
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return fields


def decode_webhook_body(raw_body: bytes, content_type: str | None) -> dict[str, Any]:
    """Decode a JSON or form-encoded webhook body into a field mapping.

    Raises ValueError for a JSON body that is not an object.
    """
    if not raw_body:
        return {}

    if content_type and "json" in content_type.lower():
        payload = json.loads(raw_body)
        if not isinstance(payload, dict):
            raise ValueError("Webhook JSON body must be an object")
        return payload

    text = raw_body.decode("utf-8", errors="replace")
    return parse_webhook_fields(parse_qsl(text, keep_blank_values=True))


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def _field(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    return "unknown" if value is None else str(value)


_SUMMARIES: dict[WebhookType, Callable[[Mapping[str, Any]], str]] = {
    WebhookType.SUBSCRIBE: lambda d: f"New subscriber: {_field(d, 'email')}",
    WebhookType.UNSUBSCRIBE: lambda d: f"Unsubscribed: {_field(d, 'email')}",
    WebhookType.PROFILE: lambda d: f"Profile updated: {_field(d, 'email')}",
    WebhookType.UPEMAIL: lambda d: (
        f"Email changed from {_field(d, 'old_email')} to {_field(d, 'new_email')}"
    ),
    WebhookType.CLEANED: lambda d: f"Email cleaned: {_field(d, 'email')}",
    WebhookType.CAMPAIGN: lambda d: "Campaign event received",
}


def summarize(raw_type: str, fields: Mapping[str, Any]) -> RelayResult:
    """Classify a payload and build its human-readable summary."""
    event_type = WebhookType.classify(raw_type)
    builder = _SUMMARIES.get(event_type)
    if builder is None:
        return RelayResult(type=raw_type, processed=False, message=f"Unknown webhook type: {raw_type}")

    data = fields.get("data")
    if not isinstance(data, Mapping):
        data = {}
    return RelayResult(type=raw_type, processed=True, message=builder(data))


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


class WebhookRelay:
    """Verifies and republishes inbound webhook callbacks.

    Parameters
    ----------
    secret:
        Shared secret for HMAC-SHA256 verification. None disables the check.
    consumers:
        Callables invoked with each WebhookEvent, in order.
    signature_header:
        Header carrying the hex signature (default ``X-Signature``).
    require_signature:
        When a secret is set, reject calls without the header instead of
        accepting them.
    """

    def __init__(
        self,
        secret: str | None = None,
        consumers: Iterable[WebhookConsumer] = (),
        signature_header: str = "X-Signature",
        require_signature: bool = False,
    ) -> None:
        self._secret = secret
        self._consumers: list[WebhookConsumer] = list(consumers)
        self._signature_header = signature_header
        self._require_signature = require_signature

    @property
    def consumer_count(self) -> int:
        return len(self._consumers)

    def subscribe(self, consumer: WebhookConsumer) -> None:
        """Register an additional consumer after construction."""
        self._consumers.append(consumer)

    @staticmethod
    def available_events() -> dict[str, str]:
        return dict(EVENT_DESCRIPTIONS)

    def compute_signature(self, raw_body: bytes) -> str:
        """Compute the hex HMAC-SHA256 of a raw body with the shared secret."""
        return hmac.new(
            (self._secret or "").encode("utf-8"),
            raw_body,
            hashlib.sha256,
        ).hexdigest()

    def verify_signature(self, raw_body: bytes, headers: Mapping[str, str]) -> bool:
        if not self._secret:
            return True

        provided = _header(headers, self._signature_header)
        if not provided:
            return not self._require_signature

        expected = self.compute_signature(raw_body)
        return hmac.compare_digest(expected.encode("utf-8"), provided.strip().encode("utf-8"))

    def handle(
        self,
        raw_body: bytes,
        headers: Mapping[str, str],
        fields: Mapping[str, Any],
    ) -> RelayResult:
        """Process one webhook call.

        Raises InvalidSignatureError (before anything is published) when the
        signature check fails.
        """
        if not self.verify_signature(raw_body, headers):
            logger.warning("Invalid webhook signature")
            raise InvalidSignatureError()

        raw_type = fields.get("type") or WebhookType.UNKNOWN.value
        raw_type = str(raw_type)
        logger.info(
            "Webhook received: %s",
            raw_type,
            extra={"event_type": raw_type},
        )

        result = summarize(raw_type, fields)
        if not result.processed:
            logger.info("Unrecognized webhook type: %s", raw_type, extra={"event_type": raw_type})

        event = WebhookEvent(
            type=WebhookType.classify(raw_type),
            fired_at=fields.get("fired_at"),
            payload=dict(fields),
            result=result,
        )
        self._publish(event)
        return result

    def _publish(self, event: WebhookEvent) -> None:
        if not self._consumers:
            logger.debug(
                "No webhook consumers registered, discarding %s event",
                event.type.value,
                extra={"event_type": event.type.value},
            )
            return

        for consumer in self._consumers:
            try:
                consumer(event)
            except Exception:
                logger.exception(
                    "Webhook consumer %r failed for %s event",
                    consumer,
                    event.type.value,
                    extra={"event_type": event.type.value},
                )
