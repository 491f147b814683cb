"""OpenRouter provider implementation.

OpenRouter exposes an OpenAI-compatible chat completions endpoint, so this
provider drives it with the official OpenAI Python SDK pointed at the
OpenRouter base URL. It includes:
- A single request per call (no retries; failures go straight to the caller)
- Translation of SDK errors into GenerationFailedError carrying the
  provider's own message
- Token usage and latency tracking for logging

Examples:
    >>> provider = OpenRouterProvider(api_key="sk-or-...")
    >>> response = provider.complete(
    ...     "Name a color", model="meta-llama/llama-3.3-70b-instruct:free", max_tokens=50
    ... )
    >>> response.choices[0].message.content
    'Blue'
"""

import logging
import math
import time
from typing import Any

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
    OpenAIError,
)

from discord_ai_tools.llm.constants import DEFAULT_TIMEOUT, OPENROUTER_BASE_URL
from discord_ai_tools.llm.exceptions import (
    GenerationFailedError,
    LLMConfigurationError,
    extract_error_message,
)

logger = logging.getLogger(__name__)


class OpenRouterProvider:
    """OpenRouter API provider for chat completions.

    Implements the CompletionProvider protocol.

    Attributes:
        client: OpenAI SDK client configured for OpenRouter
        base_url: API base URL
        timeout: Request timeout in seconds
        total_input_tokens: Cumulative prompt tokens across all requests
        total_output_tokens: Cumulative completion tokens across all requests
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        app_url: str | None = None,
        app_title: str | None = None,
    ) -> None:
        """Initialize OpenRouter provider.

        Args:
            api_key: OpenRouter API key
            base_url: API base URL (default: OpenRouter's v1 endpoint)
            timeout: Request timeout in seconds
            app_url: Optional site URL sent as HTTP-Referer for OpenRouter rankings
            app_title: Optional site title sent as X-Title

        Raises:
            LLMConfigurationError: If api_key is empty or timeout is not positive
        """
        if not api_key:
            raise LLMConfigurationError(
                "OpenRouter API key cannot be empty", details={"provider": "openrouter"}
            )
        if not math.isfinite(timeout) or timeout <= 0:
            raise LLMConfigurationError(
                f"timeout must be positive and finite, got {timeout}",
                details={"provider": "openrouter"},
            )

        default_headers: dict[str, str] = {}
        if app_url:
            default_headers["HTTP-Referer"] = app_url
        if app_title:
            default_headers["X-Title"] = app_title

        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            default_headers=default_headers or None,
        )
        self.base_url = base_url
        self.timeout = timeout

        self.total_input_tokens = 0
        self.total_output_tokens = 0
        self._last_request_latency: float | None = None

        logger.info(f"Initialized OpenRouter provider: base_url={base_url}, timeout={timeout}s")

    def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float | None = None,
        **params: Any,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """Send ``prompt`` as a single user message and return the raw response.

        Args:
            prompt: Prompt text
            model: Model identifier (e.g., "meta-llama/llama-3.3-70b-instruct:free")
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature, omitted from the request when None
            **params: Additional request fields, sent in the JSON body as-is

        Returns:
            The SDK ChatCompletion object

        Raises:
            GenerationFailedError: On any transport or provider-side failure
        """
        request: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            request["temperature"] = temperature
        if params:
            request["extra_body"] = params

        start_time = time.perf_counter()
        try:
            response = self.client.chat.completions.create(**request)

        except APIStatusError as e:
            message = extract_error_message(e)
            logger.error(f"OpenRouter returned HTTP {e.status_code}: {message}")
            raise GenerationFailedError(
                message, details={"model": model}, status_code=e.status_code
            ) from e

        except (APITimeoutError, APIConnectionError) as e:
            message = extract_error_message(e)
            logger.error(f"OpenRouter connection error: {type(e).__name__}: {message}")
            raise GenerationFailedError(message, details={"model": model}) from e

        except OpenAIError as e:
            message = extract_error_message(e)
            logger.error(f"OpenRouter API error: {message}")
            raise GenerationFailedError(message, details={"model": model}) from e

        finally:
            self._last_request_latency = time.perf_counter() - start_time

        usage = getattr(response, "usage", None)
        if usage:
            self.total_input_tokens += usage.prompt_tokens or 0
            self.total_output_tokens += usage.completion_tokens or 0
            logger.debug(
                f"OpenRouter API call: {usage.prompt_tokens} input + "
                f"{usage.completion_tokens} output tokens "
                f"in {self._last_request_latency:.2f}s"
            )

        return response

    def get_last_request_latency(self) -> float | None:
        """Get latency of most recent request in seconds.

        Returns:
            Latency in seconds, or None if no requests made yet.
        """
        return self._last_request_latency

    def reset_usage_tracking(self) -> None:
        """Reset token usage counters to zero."""
        self.total_input_tokens = 0
        self.total_output_tokens = 0
        logger.debug("Reset token usage tracking")

    def __repr__(self) -> str:
        return f"OpenRouterProvider(base_url={self.base_url}, timeout={self.timeout})"
