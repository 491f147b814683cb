"""Exception hierarchy for LLM text generation.

Every failure of an outbound completion call surfaces to callers as a single
GenerationFailedError, so the route layer has exactly one error kind to map
to a user-visible response.
"""

from typing import Any

# Used when neither the provider nor the transport supplied a usable message
DEFAULT_FAILURE_MESSAGE = "Failed to generate content"

# Raised when the provider answered but produced no usable alternative
NO_RESPONSE_MESSAGE = "No response generated from AI"


class LLMError(Exception):
    """Base exception for LLM integration errors.

    Args:
        message: Human-readable error message
        details: Optional structured context (model, status code, ...)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details) if details else {}

    def __str__(self) -> str:
        return self.message


class GenerationFailedError(LLMError):
    """Raised when the completion provider could not produce text.

    Covers transport failures, non-2xx responses, malformed payloads and
    responses with no usable alternative. The message is the provider's own
    when one was available, DEFAULT_FAILURE_MESSAGE otherwise.

    Attributes:
        status_code: HTTP status returned by the provider, if any
    """

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message or DEFAULT_FAILURE_MESSAGE, details)
        self.status_code = status_code


class LLMConfigurationError(LLMError):
    """Raised when a provider or generator is constructed with invalid settings."""


# Short name used by the route layer
GenerationFailed = GenerationFailedError


def extract_error_message(error: BaseException) -> str:
    """Return the most useful human-readable message for a provider error.

    Looks at the parsed error body first (``{"error": {"message": ...}}`` or
    the already-unwrapped ``{"message": ...}``), then the exception's own
    message, then falls back to DEFAULT_FAILURE_MESSAGE.

    Args:
        error: Exception raised by the SDK, the transport or a provider

    Returns:
        str: Non-empty message
    """
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if isinstance(nested, str) and nested:
            return nested
        if body.get("message"):
            return str(body["message"])

    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or DEFAULT_FAILURE_MESSAGE
