"""Memoized text generation in front of a completion provider.

This module provides TextGenerator, the single entry point the route layer
uses to turn a prompt into generated text. It:
- Derives a cache key from the prompt and the cacheable options
- Serves repeated requests from ResponseCache within the TTL
- Skips the lookup when the caller sends a ``timestamp`` (regenerate)
- Merges caller options over the generation defaults
- Validates and trims the provider's answer
- Normalizes every failure into GenerationFailedError, leaving the cache untouched

Usage:
    >>> provider = OpenRouterProvider(api_key="sk-or-...")
    >>> generator = TextGenerator(provider, ResponseCache())
    >>> generator.generate("Name a color", {"max_tokens": 50})  # provider call
    'Blue'
    >>> generator.generate("Name a color", {"max_tokens": 50})  # served from cache
    'Blue'
    >>> generator.generate("Name a color", {"max_tokens": 50, "timestamp": "t1"})  # fresh call
    'Green'
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from discord_ai_tools.llm.cache.response_cache import CacheStats, ResponseCache
from discord_ai_tools.llm.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    MAX_CACHE_WAIT_TIMEOUT,
    SKIP_CACHE_OPTION,
)
from discord_ai_tools.llm.exceptions import (
    NO_RESPONSE_MESSAGE,
    GenerationFailedError,
    LLMConfigurationError,
    extract_error_message,
)
from discord_ai_tools.llm.providers.base import CompletionProvider

logger = logging.getLogger(__name__)


def split_options(options: Mapping[str, Any] | None) -> tuple[dict[str, Any], Any]:
    """Separate the no-cache token from the cacheable options.

    Options set to None are treated as absent, so ``{"timestamp": None}``
    does not force a regeneration and ``{"max_tokens": None}`` falls back to
    the default.

    Args:
        options: Caller-supplied generation options

    Returns:
        tuple: (cacheable options, no-cache token or None)
    """
    cacheable: dict[str, Any] = {}
    token = None
    for name, value in (options or {}).items():
        if value is None:
            continue
        if name == SKIP_CACHE_OPTION:
            token = value
        else:
            cacheable[name] = value
    return cacheable, token


def _extract_text(response: Any, model: str) -> str:  # noqa: ANN401
    """Return the trimmed text of the first alternative that has any.

    Raises:
        GenerationFailedError: If no alternative carries non-blank text
    """
    choices = getattr(response, "choices", None)
    if not choices:
        # OpenRouter reports some upstream failures as a 200 with an error body
        error = getattr(response, "error", None)
        message = error.get("message") if isinstance(error, dict) else None
        raise GenerationFailedError(message or NO_RESPONSE_MESSAGE, details={"model": model})

    try:
        for choice in choices:
            content = getattr(getattr(choice, "message", None), "content", None)
            if isinstance(content, str) and content.strip():
                return content.strip()
    except TypeError as e:
        raise GenerationFailedError(
            f"Malformed completion payload: {e}", details={"model": model}
        ) from e

    raise GenerationFailedError(NO_RESPONSE_MESSAGE, details={"model": model})


class TextGenerator:
    """Cache-aware front end for a completion provider.

    Attributes:
        provider: The wrapped completion provider
        cache: ResponseCache holding generated text
        enabled: Whether the cache is consulted and written at all
        single_flight: Whether concurrent identical misses share one provider call
        defaults: Options applied beneath caller options on every request

    Examples:
        Bypass the cache for an explicit regeneration:
        >>> generator.generate(prompt, {"max_tokens": 400, "timestamp": 1718000000000})

        Disable caching entirely:
        >>> generator = TextGenerator(provider, enabled=False)
    """

    def __init__(
        self,
        provider: CompletionProvider,
        cache: ResponseCache | None = None,
        *,
        enabled: bool = True,
        default_model: str = DEFAULT_MODEL,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
        default_temperature: float | None = DEFAULT_TEMPERATURE,
        single_flight: bool = False,
    ) -> None:
        """Initialize the generator.

        Args:
            provider: Provider implementing complete()
            cache: ResponseCache instance (creates a new one if None)
            enabled: Whether caching is enabled (default: True)
            default_model: Model used when the caller does not pick one
            default_max_tokens: Output length used when the caller does not pick one
            default_temperature: Sampling temperature, None to leave it to the provider
            single_flight: Collapse concurrent identical cache misses into one call

        Raises:
            TypeError: If provider is None or has no complete() method
            LLMConfigurationError: If a default is invalid
        """
        if provider is None:
            raise TypeError("provider must be provided and cannot be None")
        if not callable(getattr(provider, "complete", None)):
            raise TypeError(
                f"Provider {type(provider).__name__} does not implement CompletionProvider "
                f"protocol. Missing methods: complete"
            )
        if not default_model:
            raise LLMConfigurationError("default_model cannot be empty")
        if default_max_tokens <= 0:
            raise LLMConfigurationError(
                f"default_max_tokens must be positive, got {default_max_tokens}"
            )

        self.provider = provider
        self.cache = cache if cache is not None else ResponseCache()
        self.enabled = enabled
        self.single_flight = single_flight

        self.defaults: dict[str, Any] = {
            "model": default_model,
            "max_tokens": default_max_tokens,
        }
        if default_temperature is not None:
            self.defaults["temperature"] = default_temperature

        self._in_flight: dict[str, threading.Event] = {}
        self._in_flight_lock = threading.Lock()

        logger.info(
            f"Initialized TextGenerator: model={default_model}, "
            f"max_tokens={default_max_tokens}, cache_enabled={enabled}, "
            f"single_flight={single_flight}"
        )

    def generate(self, prompt: str, options: Mapping[str, Any] | None = None) -> str:
        """Generate text for ``prompt``, using the cache where allowed.

        Args:
            prompt: Prompt text
            options: Generation options. ``model`` and ``max_tokens`` override
                the defaults, ``timestamp`` forces a fresh provider call, any
                other key is forwarded to the provider unchanged.

        Returns:
            str: Generated text with surrounding whitespace removed

        Raises:
            GenerationFailedError: If the provider call fails or returns no text
            TypeError: If an option value is not JSON-serializable

        Note:
            A forced regeneration still stores its result, replacing the
            entry that identical non-forced requests will be served.
        """
        cacheable, skip_token = split_options(options)

        if not self.enabled:
            logger.debug("Cache disabled, calling provider directly")
            return self._call_provider(prompt, cacheable)

        cache_key = self.cache.compute_key(prompt, cacheable)

        if skip_token is not None:
            logger.debug(f"Regeneration requested, skipping cache for {cache_key[:16]}...")
            return self._fetch_and_store(cache_key, prompt, cacheable)

        cached_response = self.cache.get(cache_key)
        if cached_response is not None:
            logger.debug(f"Using cached response for {cache_key[:16]}...")
            return cached_response

        if self.single_flight:
            return self._fetch_single_flight(cache_key, prompt, cacheable)
        return self._fetch_and_store(cache_key, prompt, cacheable)

    def _fetch_and_store(self, cache_key: str, prompt: str, cacheable: dict[str, Any]) -> str:
        text = self._call_provider(prompt, cacheable)
        self.cache.put(cache_key, text)
        return text

    def _fetch_single_flight(self, cache_key: str, prompt: str, cacheable: dict[str, Any]) -> str:
        """Fetch on a cache miss, letting only one thread call the provider per key.

        Threads arriving while a fetch for the same key is in flight wait for
        it and reuse the cached result. If that fetch failed, each waiter
        makes its own call (duplicates are accepted at that point).
        """
        wait_event: threading.Event | None = None
        with self._in_flight_lock:
            if cache_key in self._in_flight:
                wait_event = self._in_flight[cache_key]
            else:
                self._in_flight[cache_key] = threading.Event()

        if wait_event is not None:
            logger.debug(f"Another thread is fetching {cache_key[:16]}..., waiting for result")
            if not wait_event.wait(timeout=MAX_CACHE_WAIT_TIMEOUT):
                logger.warning(f"Timed out waiting for in-flight fetch of {cache_key[:16]}...")

            cached_response = self.cache.get(cache_key)
            if cached_response is not None:
                logger.debug(f"Cache populated by other thread for {cache_key[:16]}...")
                return cached_response

            logger.warning(
                f"Other thread completed but cache miss for {cache_key[:16]}..., "
                "will fetch from provider"
            )
            return self._fetch_and_store(cache_key, prompt, cacheable)

        try:
            return self._fetch_and_store(cache_key, prompt, cacheable)
        finally:
            with self._in_flight_lock:
                event = self._in_flight.pop(cache_key, None)
            if event:
                event.set()

    def _call_provider(self, prompt: str, cacheable: dict[str, Any]) -> str:
        """Issue exactly one provider request with defaults merged beneath ``cacheable``."""
        request = {**self.defaults, **cacheable}
        model = request.pop("model")
        max_tokens = request.pop("max_tokens")
        temperature = request.pop("temperature", None)

        logger.info(
            f"AI request: model={model}, max_tokens={max_tokens}, prompt_length={len(prompt)}"
        )

        try:
            response = self.provider.complete(
                prompt,
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                **request,
            )
        except GenerationFailedError:
            raise
        except Exception as e:
            message = extract_error_message(e)
            logger.error(f"Unexpected error during generation: {type(e).__name__}: {message}")
            raise GenerationFailedError(message, details={"model": model}) from e

        text = _extract_text(response, model)
        logger.debug(f"AI response received: {len(text)} characters")
        return text

    def invalidate(self, prompt: str, options: Mapping[str, Any] | None = None) -> bool:
        """Drop the cached entry for a prompt and option set.

        The no-cache token in ``options`` is ignored, as in generate().

        Returns:
            bool: True if an entry was removed
        """
        cacheable, _ = split_options(options)
        removed = self.cache.delete(self.cache.compute_key(prompt, cacheable))
        if removed:
            logger.info("Invalidated cached response")
        return removed

    def get_cache_stats(self) -> CacheStats:
        """Get cache statistics.

        Examples:
            >>> stats = generator.get_cache_stats()
            >>> print(f"Hit rate: {stats.hit_rate * 100:.1f}%")
        """
        return self.cache.get_stats()

    def clear_cache(self) -> None:
        """Clear all cached entries.

        Note:
            This clears the ENTIRE cache, affecting every generator sharing it.
        """
        self.cache.clear()
        logger.info("Cleared cache entries")

    def __repr__(self) -> str:
        return (
            f"TextGenerator(model={self.defaults['model']}, "
            f"enabled={self.enabled}, single_flight={self.single_flight})"
        )
