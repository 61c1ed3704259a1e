"""Shared fixtures: a clean environment and a fake chat-completion client."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from web_i18n.config import LLMConfig, TranslationConfig

ENV_VARS = (
    "TRANSLATION_API_KEY",
    "LLM_API_KEY",
    "TRANSLATION_API_URL",
    "TRANSLATION_MODEL",
    "TARGET_LANGUAGES",
)


def completion(content: str | None) -> SimpleNamespace:
    """Build an object shaped like a chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def prompt_text(call_kwargs: dict) -> str:
    """Return the source text embedded at the end of a translation prompt."""
    return call_kwargs["messages"][0]["content"].split("\n\n", 1)[1]


def make_client(reply: Callable[[str], Awaitable[SimpleNamespace]]) -> MagicMock:
    """Create a fake AsyncOpenAI client whose replies depend on the source text."""

    async def create(**kwargs: object) -> SimpleNamespace:
        return await reply(prompt_text(kwargs))

    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=create)
    return client


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(base_url="https://api.test/v1", api_key="test-key", model="test-model")


@pytest.fixture
def translation_config() -> TranslationConfig:
    return TranslationConfig(target_languages=["zh-CN"], batch_size=10, delay_ms=0)
