"""Pydantic Settings for the bridge service.

All environment variables use the MAILCHIMP_ prefix.
Example: MAILCHIMP_API_KEY=abc123-us6, MAILCHIMP_WEBHOOK_SECRET=s3cret
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_BLOCKED_TLDS = [".cn", ".ru", ".tk", ".ml", ".ga", ".cf"]

# Bundled config file, shipped next to this module
DEFAULT_CONFIG_PATH = str(Path(__file__).resolve().parent / "mailchimp.yaml")


class BridgeSettings(BaseSettings):
    """Bridge service configuration validated from environment variables."""

    # Service
    port: int = 8002
    log_level: str = "INFO"
    public_base_url: str | None = None  # Advertised by /webhook/info

    # Upstream API
    api_key: str | None = None  # "<key>-<server prefix>"
    server_prefix: str | None = None  # Used when the key carries no prefix
    fallback_server_prefix: str = "us1"
    api_host: str = "api.mailchimp.com"
    request_timeout_seconds: float = Field(default=120.0, gt=0)

    # Audience
    list_id: str | None = None
    signup_url: str | None = None

    # Proxy rate limiting
    requests_per_minute: int = Field(default=30, ge=1)
    rate_limit_window_seconds: int = Field(default=60, ge=1)

    # Anti-forgery (double-submit cookie)
    csrf_enabled: bool = True
    csrf_cookie_name: str = "CSRF_TOKEN"
    csrf_header_name: str = "X-CSRF-Token"

    # Webhooks
    webhook_secret: str | None = None  # HMAC-SHA256 shared secret
    webhook_signature_header: str = "X-Signature"
    webhook_require_signature: bool = False

    # Client-side validation
    blocked_email_tlds: list[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_TLDS))

    # Optional YAML config file
    config_path: str = DEFAULT_CONFIG_PATH

    model_config = {"env_prefix": "MAILCHIMP_"}

    def resolve_server_prefix(self) -> str:
        """Return the data-center prefix for the upstream host.

        The prefix embedded in the API key wins, then the explicit
        ``server_prefix``, then ``fallback_server_prefix``.
        """
        if self.api_key and "-" in self.api_key:
            parts = self.api_key.split("-")
            if len(parts) == 2 and parts[1]:
                return parts[1]
        return self.server_prefix or self.fallback_server_prefix

    @property
    def api_base_url(self) -> str:
        return f"https://{self.resolve_server_prefix()}.{self.api_host}/3.0/"
