"""Configuration module: environment settings and the optional YAML config file."""

from mailchimp_bridge.config.module_config import ModuleConfig, load_module_config, load_settings
from mailchimp_bridge.config.settings import BridgeSettings

__all__ = [
    "BridgeSettings",
    "ModuleConfig",
    "load_module_config",
    "load_settings",
]
