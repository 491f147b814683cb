"""Response caching for LLM cost reduction.

This module provides in-memory caching for generated text with lazy TTL
expiration, so repeated requests for the same prompt are served without a
provider call.
"""

from discord_ai_tools.llm.cache.response_cache import (
    CacheStats,
    ResponseCache,
)

__all__: list[str] = ["CacheStats", "ResponseCache"]
