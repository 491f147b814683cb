"""Test configuration and fixtures."""

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """
    Provide a clock that only moves when the test advances it.

    Returns:
        FakeClock: Callable returning the current fake time in seconds.
    """
    return FakeClock()


@pytest.fixture
def make_completion() -> Callable[..., Any]:
    """
    Provide a builder for chat completion responses shaped like the OpenAI SDK's.

    Returns:
        Callable[..., Any]: ``make_completion("text", "other")`` returns an object
            with one choice per argument, each exposing ``message.content``.
    """

    def _make(*contents: str | None, prompt_tokens: int = 10, completion_tokens: int = 5) -> Any:
        return SimpleNamespace(
            choices=[
                SimpleNamespace(index=i, message=SimpleNamespace(role="assistant", content=c))
                for i, c in enumerate(contents)
            ],
            usage=SimpleNamespace(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
            ),
        )

    return _make


@pytest.fixture(autouse=True)
def clear_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration environment variables so tests start from defaults."""
    for name in (
        "OPENROUTER_API_KEY",
        "OPENROUTER_BASE_URL",
        "DAT_LLM_MODEL",
        "DAT_LLM_MAX_TOKENS",
        "DAT_LLM_TEMPERATURE",
        "DAT_LLM_TIMEOUT",
        "DAT_CACHE_ENABLED",
        "DAT_CACHE_TTL_SECONDS",
        "DAT_SINGLE_FLIGHT",
        "DAT_LOG_LEVEL",
        "DAT_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
