"""Completion provider implementations.

Available providers:
- openrouter.py: OpenRouter (OpenAI-compatible) chat completions
"""

from discord_ai_tools.llm.providers.base import CompletionProvider
from discord_ai_tools.llm.providers.openrouter import OpenRouterProvider

__all__: list[str] = [
    "CompletionProvider",
    "OpenRouterProvider",
]
