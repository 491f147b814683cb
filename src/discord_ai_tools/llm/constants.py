"""Constants for LLM integration.

This module defines shared constants used across the LLM integration components.
"""

# OpenRouter exposes an OpenAI-compatible chat completions API
OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"

# Generation defaults applied beneath caller-supplied options
DEFAULT_MODEL: str = "meta-llama/llama-3.3-70b-instruct:free"
DEFAULT_MAX_TOKENS: int = 300
DEFAULT_TEMPERATURE: float = 0.7

# Request timeout in seconds handed to the HTTP client
DEFAULT_TIMEOUT: float = 60.0

# Responses are reused for one hour
DEFAULT_CACHE_TTL_SECONDS: float = 3600.0

# Option carrying the no-cache token. Clients send a fresh timestamp when the
# user asks to regenerate, so it must never reach the cache key or the provider.
SKIP_CACHE_OPTION: str = "timestamp"

# Timeout in seconds for waiting on another thread's in-flight fetch
MAX_CACHE_WAIT_TIMEOUT: float = 30.0
