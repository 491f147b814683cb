"""Configuration management.

This module provides configuration management through:
- AppConfig: Settings from defaults, env vars, config files and overrides
- configure_logging: Root logger setup driven by AppConfig
- ConfigError: Exception for configuration errors
"""

from discord_ai_tools.config.exceptions import ConfigError
from discord_ai_tools.config.logging_config import configure_logging
from discord_ai_tools.config.runtime_config import AppConfig

__all__ = ["AppConfig", "ConfigError", "configure_logging"]
