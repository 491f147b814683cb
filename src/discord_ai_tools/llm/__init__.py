"""LLM integration for Discord content generation.

This package forwards prompts to the completion provider and memoizes the
generated text in an in-memory TTL cache.
"""

from discord_ai_tools.llm.cache import CacheStats, ResponseCache
from discord_ai_tools.llm.exceptions import (
    GenerationFailed,
    GenerationFailedError,
    LLMConfigurationError,
    LLMError,
)
from discord_ai_tools.llm.factory import (
    create_provider,
    create_text_generator,
    create_text_generator_from_config,
)
from discord_ai_tools.llm.text_generator import TextGenerator

__all__: list[str] = [
    "CacheStats",
    "GenerationFailed",
    "GenerationFailedError",
    "LLMConfigurationError",
    "LLMError",
    "ResponseCache",
    "TextGenerator",
    "create_provider",
    "create_text_generator",
    "create_text_generator_from_config",
]
