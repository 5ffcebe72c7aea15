"""Module config file model and YAML loader.

The bridge can be configured from a YAML file in addition to the
environment. File values only fill in settings the environment left at
their defaults, so an exported ``MAILCHIMP_*`` variable always wins.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from mailchimp_bridge.config.settings import BridgeSettings

logger = logging.getLogger(__name__)


class ModuleConfig(BaseModel):
    """Keys accepted in the YAML config file."""

    api_key: str | None = None
    server_prefix: str | None = None
    list_id: str | None = None
    signup_url: str | None = None
    public_base_url: str | None = None
    webhook_secret: str | None = None
    webhook_signature_header: str | None = None
    webhook_require_signature: bool | None = None
    requests_per_minute: int | None = Field(default=None, ge=1)
    blocked_email_tlds: list[str] | None = None

    model_config = {"extra": "ignore"}


def load_module_config(yaml_path: str) -> ModuleConfig:
    """Parse the YAML config file into a ModuleConfig.

    Returns an empty ModuleConfig when the file is missing, unparseable or
    invalid.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.debug("Config file not found at %s, using environment only", yaml_path)
        return ModuleConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config YAML at %s: %s", yaml_path, exc)
        return ModuleConfig()

    if raw is None:
        return ModuleConfig()

    if not isinstance(raw, dict):
        logger.warning("Config YAML at %s is not a mapping, ignoring it", yaml_path)
        return ModuleConfig()

    unknown = sorted(set(raw) - set(ModuleConfig.model_fields))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", yaml_path, ", ".join(unknown))

    try:
        return ModuleConfig.model_validate(raw)
    except Exception as exc:
        logger.error("Invalid config file %s: %s", yaml_path, exc)
        return ModuleConfig()


def load_settings(**overrides: object) -> BridgeSettings:
    """Build BridgeSettings from the environment, then fill gaps from the config file."""
    settings = BridgeSettings(**overrides)  # type: ignore[arg-type]
    file_config = load_module_config(settings.config_path)

    updates = {
        name: value
        for name, value in file_config.model_dump(exclude_none=True).items()
        if name not in settings.model_fields_set
    }
    if updates:
        logger.info("Applied %d setting(s) from %s", len(updates), settings.config_path)
        settings = settings.model_copy(update=updates)

    return settings
