"""Factory functions for building providers and text generators.

Usage Examples:
    Build everything from the environment:
        >>> config = AppConfig.from_env()
        >>> generator = create_text_generator_from_config(config)
        >>> generator.generate("Name a color", {"max_tokens": 50})

    Share one cache between two generators:
        >>> cache = ResponseCache(ttl_seconds=600)
        >>> provider = create_provider(api_key="sk-or-...")
        >>> fast = create_text_generator(provider, shared_cache=cache, default_max_tokens=100)
        >>> long = create_text_generator(provider, shared_cache=cache, default_max_tokens=600)
"""

import logging
from typing import TYPE_CHECKING, Any

from discord_ai_tools.llm.cache.response_cache import ResponseCache
from discord_ai_tools.llm.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_TIMEOUT,
    OPENROUTER_BASE_URL,
)
from discord_ai_tools.llm.exceptions import LLMConfigurationError
from discord_ai_tools.llm.providers.base import CompletionProvider
from discord_ai_tools.llm.providers.openrouter import OpenRouterProvider
from discord_ai_tools.llm.text_generator import TextGenerator

if TYPE_CHECKING:
    from discord_ai_tools.config.runtime_config import AppConfig

logger = logging.getLogger(__name__)


def create_provider(
    api_key: str | None,
    base_url: str = OPENROUTER_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    **kwargs: Any,  # noqa: ANN401
) -> OpenRouterProvider:
    """Create the OpenRouter completion provider.

    Args:
        api_key: OpenRouter API key. Required.
        base_url: API base URL
        timeout: Request timeout in seconds
        **kwargs: Passed through to OpenRouterProvider (app_url, app_title)

    Returns:
        Configured OpenRouterProvider

    Raises:
        LLMConfigurationError: If api_key is missing or settings are invalid
    """
    if not api_key:
        raise LLMConfigurationError(
            "API key required for OpenRouter. Set OPENROUTER_API_KEY environment variable.",
            details={"provider": "openrouter"},
        )

    return OpenRouterProvider(api_key=api_key, base_url=base_url, timeout=timeout, **kwargs)


def create_text_generator(
    provider: CompletionProvider,
    cache_enabled: bool = True,
    shared_cache: ResponseCache | None = None,
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
    **kwargs: Any,  # noqa: ANN401
) -> TextGenerator:
    """Wrap ``provider`` in a TextGenerator with its own or a shared cache.

    Args:
        provider: Completion provider to call on cache misses
        cache_enabled: Enable response caching (default: True)
        shared_cache: Optional ResponseCache shared with other generators.
            When given, cache_ttl_seconds is ignored.
        cache_ttl_seconds: TTL for a newly created cache
        **kwargs: Passed through to TextGenerator (default_model,
            default_max_tokens, default_temperature, single_flight)

    Returns:
        Configured TextGenerator
    """
    cache = shared_cache if shared_cache is not None else ResponseCache(cache_ttl_seconds)
    return TextGenerator(provider, cache, enabled=cache_enabled, **kwargs)


def create_text_generator_from_config(
    config: "AppConfig",
    shared_cache: ResponseCache | None = None,
) -> TextGenerator:
    """Build provider and TextGenerator from application configuration.

    Args:
        config: AppConfig (typically AppConfig.from_env())
        shared_cache: Optional ResponseCache to reuse

    Returns:
        TextGenerator ready for generate() calls

    Raises:
        LLMConfigurationError: If the API key is missing
    """
    provider = create_provider(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.timeout,
    )
    generator = create_text_generator(
        provider,
        cache_enabled=config.cache_enabled,
        shared_cache=shared_cache,
        cache_ttl_seconds=config.cache_ttl_seconds,
        default_model=config.model,
        default_max_tokens=config.max_tokens,
        default_temperature=config.temperature,
        single_flight=config.single_flight,
    )
    logger.info(f"Created text generator from config: {generator!r}")
    return generator
