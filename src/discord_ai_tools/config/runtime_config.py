"""Application configuration with environment variable and file support.

This module provides AppConfig, the settings object for the generation
backend: provider credentials, generation defaults, response caching and
logging. Configuration can come from defaults, a YAML/TOML file, environment
variables, or explicit overrides.
"""

import logging
import math
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from discord_ai_tools.config.exceptions import ConfigError
from discord_ai_tools.llm.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    OPENROUTER_BASE_URL,
)

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Configuration for the generation backend.

    This immutable configuration dataclass is validated during initialization.

    Attributes:
        api_key: OpenRouter API key. Required before a provider can be built.
        base_url: Chat completions API base URL.
        model: Default model identifier.
        max_tokens: Default maximum output length.
        temperature: Default sampling temperature.
        timeout: Provider request timeout in seconds.
        cache_enabled: Whether generated text is cached.
        cache_ttl_seconds: Lifetime of a cached response.
        single_flight: Collapse concurrent identical cache misses into one provider call.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs to stderr only.

    Example:
        >>> config = AppConfig.from_env()
        >>> config = config.with_overrides(cache_ttl_seconds=600)
        >>> config.cache_ttl_seconds
        600
    """

    api_key: str | None = None
    base_url: str = OPENROUTER_BASE_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = DEFAULT_TIMEOUT
    cache_enabled: bool = True
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    single_flight: bool = False
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ConfigError: If any configuration value is invalid.
        """
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {self.log_level}. Must be one of {sorted(VALID_LOG_LEVELS)}"
            )

        if not self.base_url:
            raise ConfigError("base_url cannot be empty")

        if not self.model:
            raise ConfigError("model cannot be empty")

        if self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be positive, got {self.max_tokens}")

        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigError(f"temperature must be in [0.0, 2.0], got {self.temperature}")

        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ConfigError(f"timeout must be positive and finite, got {self.timeout}")

        if not math.isfinite(self.cache_ttl_seconds) or self.cache_ttl_seconds <= 0:
            raise ConfigError(
                f"cache_ttl_seconds must be positive and finite, got {self.cache_ttl_seconds}"
            )

    @classmethod
    def from_defaults(cls) -> "AppConfig":
        """Create configuration with default values.

        Returns:
            AppConfig with all defaults (no API key).
        """
        return cls()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables.

        Reads:
        - OPENROUTER_API_KEY: API key (default: None)
        - OPENROUTER_BASE_URL: API base URL
        - DAT_LLM_MODEL: Default model
        - DAT_LLM_MAX_TOKENS: Default max output tokens (default: "300")
        - DAT_LLM_TEMPERATURE: Default temperature (default: "0.7")
        - DAT_LLM_TIMEOUT: Request timeout in seconds (default: "60")
        - DAT_CACHE_ENABLED: Enable response caching (default: "true")
        - DAT_CACHE_TTL_SECONDS: Cache TTL in seconds (default: "3600")
        - DAT_SINGLE_FLIGHT: Collapse concurrent identical misses (default: "false")
        - DAT_LOG_LEVEL: Logging level (default: "INFO")
        - DAT_LOG_FILE: Log file path (default: None)

        Returns:
            AppConfig loaded from environment variables.

        Raises:
            ConfigError: If an environment variable has an invalid value.

        Example:
            >>> os.environ["DAT_CACHE_TTL_SECONDS"] = "600"
            >>> AppConfig.from_env().cache_ttl_seconds
            600.0
        """
        defaults = cls.from_defaults()

        def parse_bool(env_var: str, default: bool) -> bool:
            """Parse boolean environment variable."""
            value = os.getenv(env_var, str(default)).lower()
            if value in ("true", "1", "yes", "on"):
                return True
            if value in ("false", "0", "no", "off"):
                return False
            raise ConfigError(
                f"Invalid {env_var}='{value}'. Must be true/false, 1/0, yes/no, or on/off"
            )

        def parse_int(env_var: str, default: int) -> int:
            """Parse integer environment variable."""
            value_str = os.getenv(env_var, str(default))
            try:
                return int(value_str)
            except ValueError as e:
                raise ConfigError(f"Invalid {env_var}='{value_str}'. Must be an integer") from e

        def parse_float(env_var: str, default: float) -> float:
            """Parse float environment variable."""
            value_str = os.getenv(env_var, str(default))
            try:
                return float(value_str)
            except ValueError as e:
                raise ConfigError(f"Invalid {env_var}='{value_str}'. Must be a number") from e

        return cls(
            api_key=os.getenv("OPENROUTER_API_KEY") or defaults.api_key,
            base_url=os.getenv("OPENROUTER_BASE_URL") or defaults.base_url,
            model=os.getenv("DAT_LLM_MODEL") or defaults.model,
            max_tokens=parse_int("DAT_LLM_MAX_TOKENS", defaults.max_tokens),
            temperature=parse_float("DAT_LLM_TEMPERATURE", defaults.temperature),
            timeout=parse_float("DAT_LLM_TIMEOUT", defaults.timeout),
            cache_enabled=parse_bool("DAT_CACHE_ENABLED", defaults.cache_enabled),
            cache_ttl_seconds=parse_float("DAT_CACHE_TTL_SECONDS", defaults.cache_ttl_seconds),
            single_flight=parse_bool("DAT_SINGLE_FLIGHT", defaults.single_flight),
            log_level=os.getenv("DAT_LOG_LEVEL", defaults.log_level).upper(),
            log_file=os.getenv("DAT_LOG_FILE") or defaults.log_file,
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a YAML or TOML file.

        Expected layout (YAML shown)::

            llm:
              model: meta-llama/llama-3.3-70b-instruct:free
              max_tokens: 300
            cache:
              enabled: true
              ttl_seconds: 3600
            logging:
              level: INFO

        The API key is never read from files; set OPENROUTER_API_KEY instead.

        Args:
            config_path: Path to configuration file (.yaml, .yml or .toml).

        Returns:
            AppConfig loaded from file.

        Raises:
            ConfigError: If the file is missing, malformed, or holds invalid values.
        """
        try:
            config_path = Path(config_path).resolve()
        except (OSError, ValueError) as e:
            raise ConfigError(f"Invalid config file path: {e}") from e

        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")

        suffix = config_path.suffix.lower()
        if suffix in (".yaml", ".yml"):
            try:
                with config_path.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        elif suffix == ".toml":
            try:
                with config_path.open("rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        else:
            raise ConfigError(
                f"Unsupported config file format: {suffix}. Must be .yaml, .yml, or .toml"
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping/dict, got {type(data).__name__}")

        return cls._from_dict(data, config_path)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], source: Path) -> "AppConfig":
        """Create AppConfig from a parsed config file (internal helper)."""
        defaults = cls.from_defaults()

        sections: dict[str, dict[str, Any]] = {}
        for name in ("llm", "cache", "logging"):
            section = data.get(name, {})
            if not isinstance(section, dict):
                raise ConfigError(f"Invalid {name} section in {source}: {type(section).__name__}")
            sections[name] = section

        if "api_key" in sections["llm"]:
            logger.warning(f"Ignoring llm.api_key in {source}; set OPENROUTER_API_KEY instead")

        llm = sections["llm"]
        cache = sections["cache"]
        logging_config = sections["logging"]
        log_file = logging_config.get("file", defaults.log_file)

        try:
            return cls(
                base_url=str(llm.get("base_url", defaults.base_url)),
                model=str(llm.get("model", defaults.model)),
                max_tokens=int(llm.get("max_tokens", defaults.max_tokens)),
                temperature=float(llm.get("temperature", defaults.temperature)),
                timeout=float(llm.get("timeout", defaults.timeout)),
                cache_enabled=bool(cache.get("enabled", defaults.cache_enabled)),
                cache_ttl_seconds=float(cache.get("ttl_seconds", defaults.cache_ttl_seconds)),
                single_flight=bool(cache.get("single_flight", defaults.single_flight)),
                log_level=str(logging_config.get("level", defaults.log_level)).upper(),
                log_file=str(log_file) if log_file else None,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {source}: {e}") from e

    def with_overrides(self, **overrides: Any) -> "AppConfig":  # noqa: ANN401
        """Create a new config with explicit overrides applied.

        Only non-None values are applied.

        Raises:
            ConfigError: If an override names an unknown field or is invalid.
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def __repr__(self) -> str:
        # Keep the API key out of logs and tracebacks
        masked = "***" if self.api_key else None
        return (
            f"AppConfig(api_key={masked!r}, base_url={self.base_url!r}, model={self.model!r}, "
            f"max_tokens={self.max_tokens}, cache_enabled={self.cache_enabled}, "
            f"cache_ttl_seconds={self.cache_ttl_seconds}, log_level={self.log_level!r})"
        )
