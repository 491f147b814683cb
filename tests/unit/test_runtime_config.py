"""Tests for AppConfig loading and validation."""

from pathlib import Path

import pytest

from discord_ai_tools.config import AppConfig, ConfigError
from discord_ai_tools.llm.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    OPENROUTER_BASE_URL,
)


class TestAppConfigDefaults:
    """Test default configuration values."""

    def test_from_defaults(self) -> None:
        config = AppConfig.from_defaults()

        assert config.api_key is None
        assert config.base_url == OPENROUTER_BASE_URL
        assert config.model == DEFAULT_MODEL
        assert config.max_tokens == DEFAULT_MAX_TOKENS
        assert config.temperature == 0.7
        assert config.timeout == 60.0
        assert config.cache_enabled is True
        assert config.cache_ttl_seconds == DEFAULT_CACHE_TTL_SECONDS
        assert config.single_flight is False
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_config_is_immutable(self) -> None:
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.model = "other"  # type: ignore[misc]


class TestAppConfigValidation:
    """Test __post_init__ validation."""

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ConfigError, match="Invalid log level"):
            AppConfig(log_level="VERBOSE")

    def test_empty_model(self) -> None:
        with pytest.raises(ConfigError, match="model cannot be empty"):
            AppConfig(model="")

    def test_empty_base_url(self) -> None:
        with pytest.raises(ConfigError, match="base_url cannot be empty"):
            AppConfig(base_url="")

    @pytest.mark.parametrize(
        ("field_name", "value", "message"),
        [
            ("max_tokens", 0, "max_tokens must be positive"),
            ("timeout", 0, "timeout must be positive"),
            ("cache_ttl_seconds", -1, "cache_ttl_seconds must be positive"),
            ("cache_ttl_seconds", float("nan"), "cache_ttl_seconds must be positive and finite"),
            ("cache_ttl_seconds", float("inf"), "cache_ttl_seconds must be positive and finite"),
            ("timeout", float("nan"), "timeout must be positive and finite"),
            ("timeout", float("inf"), "timeout must be positive and finite"),
            ("temperature", 2.5, "temperature must be in"),
            ("temperature", -0.1, "temperature must be in"),
        ],
    )
    def test_out_of_range_values(self, field_name: str, value: float, message: str) -> None:
        with pytest.raises(ConfigError, match=message):
            AppConfig(**{field_name: value})


class TestAppConfigFromEnv:
    """Test loading from environment variables."""

    def test_unset_environment_gives_defaults(self) -> None:
        assert AppConfig.from_env() == AppConfig.from_defaults()

    def test_reads_all_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-env")
        monkeypatch.setenv("OPENROUTER_BASE_URL", "http://localhost:8080/v1")
        monkeypatch.setenv("DAT_LLM_MODEL", "openai/gpt-4o-mini")
        monkeypatch.setenv("DAT_LLM_MAX_TOKENS", "500")
        monkeypatch.setenv("DAT_LLM_TEMPERATURE", "0.2")
        monkeypatch.setenv("DAT_LLM_TIMEOUT", "15")
        monkeypatch.setenv("DAT_CACHE_ENABLED", "off")
        monkeypatch.setenv("DAT_CACHE_TTL_SECONDS", "600")
        monkeypatch.setenv("DAT_SINGLE_FLIGHT", "yes")
        monkeypatch.setenv("DAT_LOG_LEVEL", "debug")
        monkeypatch.setenv("DAT_LOG_FILE", "/tmp/dat.log")

        config = AppConfig.from_env()

        assert config.api_key == "sk-or-env"
        assert config.base_url == "http://localhost:8080/v1"
        assert config.model == "openai/gpt-4o-mini"
        assert config.max_tokens == 500
        assert config.temperature == 0.2
        assert config.timeout == 15.0
        assert config.cache_enabled is False
        assert config.cache_ttl_seconds == 600.0
        assert config.single_flight is True
        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/dat.log"

    @pytest.mark.parametrize("value", ["true", "1", "YES", "On"])
    def test_truthy_booleans(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("DAT_SINGLE_FLIGHT", value)
        assert AppConfig.from_env().single_flight is True

    def test_invalid_boolean(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAT_CACHE_ENABLED", "maybe")
        with pytest.raises(ConfigError, match="Invalid DAT_CACHE_ENABLED='maybe'"):
            AppConfig.from_env()

    def test_invalid_integer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAT_LLM_MAX_TOKENS", "lots")
        with pytest.raises(ConfigError, match="Must be an integer"):
            AppConfig.from_env()

    def test_invalid_float(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAT_CACHE_TTL_SECONDS", "an hour")
        with pytest.raises(ConfigError, match="Must be a number"):
            AppConfig.from_env()

    def test_nan_ttl_from_env_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAT_CACHE_TTL_SECONDS", "nan")
        with pytest.raises(ConfigError, match="cache_ttl_seconds must be positive and finite"):
            AppConfig.from_env()

    def test_env_values_still_validated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAT_CACHE_TTL_SECONDS", "0")
        with pytest.raises(ConfigError, match="cache_ttl_seconds must be positive"):
            AppConfig.from_env()

    def test_empty_api_key_treated_as_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "")
        assert AppConfig.from_env().api_key is None


class TestAppConfigFromFile:
    """Test loading from YAML and TOML files."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "llm:\n"
            "  model: openai/gpt-4o-mini\n"
            "  max_tokens: 450\n"
            "cache:\n"
            "  enabled: false\n"
            "  ttl_seconds: 120\n"
            "logging:\n"
            "  level: warning\n"
            "  file: app.log\n",
            encoding="utf-8",
        )

        config = AppConfig.from_file(config_file)

        assert config.model == "openai/gpt-4o-mini"
        assert config.max_tokens == 450
        assert config.cache_enabled is False
        assert config.cache_ttl_seconds == 120.0
        assert config.log_level == "WARNING"
        assert config.log_file == "app.log"
        assert config.base_url == OPENROUTER_BASE_URL

    def test_toml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            "[llm]\n"
            'base_url = "http://localhost:8080/v1"\n'
            "temperature = 1.0\n"
            "\n"
            "[cache]\n"
            "single_flight = true\n",
            encoding="utf-8",
        )

        config = AppConfig.from_file(config_file)

        assert config.base_url == "http://localhost:8080/v1"
        assert config.temperature == 1.0
        assert config.single_flight is True
        assert config.cache_enabled is True

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("", encoding="utf-8")

        config = AppConfig.from_file(config_file)

        assert config == AppConfig.from_defaults()

    def test_api_key_in_file_ignored(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("llm:\n  api_key: sk-or-leaked\n", encoding="utf-8")

        config = AppConfig.from_file(config_file)

        assert config.api_key is None
        assert "Ignoring llm.api_key" in caplog.text

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            AppConfig.from_file(tmp_path / "absent.yaml")

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text("{}", encoding="utf-8")

        with pytest.raises(ConfigError, match="Unsupported config file format"):
            AppConfig.from_file(config_file)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("llm: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            AppConfig.from_file(config_file)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text("[llm\nmodel = ", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            AppConfig.from_file(config_file)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- llm\n- cache\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            AppConfig.from_file(config_file)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("cache: 3600\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid cache section"):
            AppConfig.from_file(config_file)

    def test_bad_value_type(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("llm:\n  max_tokens: many\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid value"):
            AppConfig.from_file(config_file)


class TestAppConfigOverrides:
    """Test with_overrides() and repr masking."""

    def test_overrides_applied(self) -> None:
        config = AppConfig().with_overrides(cache_ttl_seconds=600, model="m")

        assert config.cache_ttl_seconds == 600
        assert config.model == "m"

    def test_none_overrides_skipped(self) -> None:
        config = AppConfig(model="m").with_overrides(model=None)
        assert config.model == "m"

    def test_unknown_override_rejected(self) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration fields: ttl"):
            AppConfig().with_overrides(ttl=5)

    def test_invalid_override_rejected(self) -> None:
        with pytest.raises(ConfigError, match="max_tokens must be positive"):
            AppConfig().with_overrides(max_tokens=-1)

    def test_repr_masks_api_key(self) -> None:
        config = AppConfig(api_key="sk-or-secret")

        assert "sk-or-secret" not in repr(config)
        assert "api_key='***'" in repr(config)

    def test_repr_without_api_key(self) -> None:
        assert "api_key=None" in repr(AppConfig())
