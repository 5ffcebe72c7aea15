"""Structured JSON logging configuration.

Configures Python logging to emit JSON-formatted log entries with required
fields: request_id, level, timestamp. Proxy and webhook fields are added
contextually (client_id, method, endpoint, status_code, duration_ms for
gateway calls; event_type for webhooks).

SECURITY: Never logs API keys, webhook secrets or CSRF tokens.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from mailchimp_bridge.middleware.request_id import get_request_id

# Patterns that should be redacted from log output
_SENSITIVE_PATTERNS = re.compile(
    r"(api.key|secret|password|token|authorization)"
    r"[\s]*[=:]\s*\S+",
    re.IGNORECASE,
)

# Contextual fields copied from the record when present
_CONTEXT_FIELDS = (
    "client_id",
    "method",
    "endpoint",
    "status_code",
    "event_type",
    "duration_ms",
)


class RequestIdFilter(logging.Filter):
    """Attach the current request ID to every record.

    A ``request_id`` passed explicitly via ``extra`` is preserved.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields.

    Each entry contains at minimum: request_id, level, timestamp, message.
    Additional fields can be attached via the ``extra`` dict on log calls.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(
                self.formatException(record.exc_info)
            )

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove sensitive values from log text."""
        return _SENSITIVE_PATTERNS.sub("[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)
