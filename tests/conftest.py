"""Shared fixtures for the test suite."""

import httpx
import pytest

from bountrip.config import Settings
from bountrip.services.llm import LLMDispatcher
from bountrip.services.model_registry import ModelRegistry, build_default_registry


def chat_completion(content: str | None, refusal: str | None = None) -> dict:
    """Minimal chat-completions response body."""
    message = {"role": "assistant", "content": content}
    if refusal is not None:
        message["refusal"] = refusal
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="sk-test",
        perplexity_api_key="",
        groq_api_key="gsk-test",
        _env_file=None,
    )


@pytest.fixture
def registry(settings: Settings) -> ModelRegistry:
    return build_default_registry(settings)


@pytest.fixture
def make_dispatcher(registry: ModelRegistry):
    """Build a dispatcher whose HTTP client is served by ``handler``."""

    def _make(handler) -> LLMDispatcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return LLMDispatcher(registry=registry, client=client)

    return _make
