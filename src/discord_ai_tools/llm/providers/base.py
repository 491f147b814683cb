"""Protocol shared by completion providers."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CompletionProvider(Protocol):
    """A service that turns a single user prompt into chat completion alternatives.

    Implementations issue exactly one outbound request per call and return
    the provider's response object, which must expose ``choices``, each with
    ``message.content``. Failures are raised as GenerationFailedError.
    """

    def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float | None = None,
        **params: Any,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """Request a completion for ``prompt``."""
        ...
