"""Configuration loading, schema, and defaults."""

from svnbridge.config.loader import ConfigError, load_config
from svnbridge.config.schema import SvnBridgeConfig

__all__ = [
    "ConfigError",
    "SvnBridgeConfig",
    "load_config",
]
