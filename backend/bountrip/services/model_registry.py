"""Catalog of chat models and the providers that serve them.

The registry is built once at startup and injected wherever a model name
has to be turned into an endpoint, a credential and a context window.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from bountrip.config import Settings
from bountrip.services.errors import MissingAuthToken, ModelNotFound

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_WINDOW = 4096


class Provider(str, Enum):
    OPENAI = "openai"
    PERPLEXITY = "perplexity"
    GROQ = "groq"


PROVIDER_URLS: dict[Provider, str] = {
    Provider.OPENAI: "https://api.openai.com/v1/chat/completions",
    Provider.PERPLEXITY: "https://api.perplexity.ai/chat/completions",
    Provider.GROQ: "https://api.groq.com/openai/v1/chat/completions",
}

# Settings attribute holding each provider's bearer token
PROVIDER_CREDENTIALS: dict[Provider, str] = {
    Provider.OPENAI: "openai_api_key",
    Provider.PERPLEXITY: "perplexity_api_key",
    Provider.GROQ: "groq_api_key",
}

TOOL_CALLING_PROVIDERS = frozenset({Provider.OPENAI})


@dataclass(frozen=True)
class ModelDescriptor:
    name: str
    provider: Provider
    context_window: int = DEFAULT_CONTEXT_WINDOW


@dataclass(frozen=True)
class ResolvedModel:
    """A descriptor paired with the credential needed to call it."""

    descriptor: ModelDescriptor
    auth_token: str

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def provider(self) -> Provider:
        return self.descriptor.provider

    @property
    def context_window(self) -> int:
        return self.descriptor.context_window

    @property
    def url(self) -> str:
        return PROVIDER_URLS[self.descriptor.provider]

    @property
    def supports_tools(self) -> bool:
        return self.descriptor.provider in TOOL_CALLING_PROVIDERS


class ModelRegistry:
    """Read-only lookup of model descriptors by name."""

    def __init__(self, models: Iterable[ModelDescriptor], settings: Settings):
        catalog: dict[str, ModelDescriptor] = {}
        for model in models:
            if model.name in catalog:
                raise ValueError(f"Duplicate model name in registry: {model.name}")
            catalog[model.name] = model
        self._models = catalog
        self._settings = settings

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._models.values())

    def __len__(self) -> int:
        return len(self._models)

    def get(self, name: str) -> ModelDescriptor:
        try:
            return self._models[name]
        except KeyError:
            raise ModelNotFound(name) from None

    def resolve(self, name: str) -> ResolvedModel:
        """Return the model with its provider credential attached.

        The credential is read from settings on every call so that a
        missing key only fails requests for that provider.
        """
        descriptor = self.get(name)
        auth_token = getattr(self._settings, PROVIDER_CREDENTIALS[descriptor.provider], "")
        if not auth_token:
            logger.error("No credential configured for provider %s", descriptor.provider.value)
            raise MissingAuthToken(descriptor.provider.value)
        return ResolvedModel(descriptor=descriptor, auth_token=auth_token)


DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    # OpenAI
    ModelDescriptor("gpt-4o", Provider.OPENAI, 128_000),
    ModelDescriptor("gpt-4o-2024-08-06", Provider.OPENAI, 128_000),
    ModelDescriptor("gpt-4o-mini", Provider.OPENAI, 128_000),
    ModelDescriptor("gpt-4-turbo", Provider.OPENAI, 128_000),
    ModelDescriptor("gpt-4", Provider.OPENAI, 8_192),
    ModelDescriptor("gpt-3.5-turbo", Provider.OPENAI, 16_385),
    # Perplexity
    ModelDescriptor("llama-3.1-sonar-small-128k-online", Provider.PERPLEXITY, 127_072),
    ModelDescriptor("llama-3.1-sonar-large-128k-online", Provider.PERPLEXITY, 127_072),
    ModelDescriptor("llama-3.1-sonar-huge-128k-online", Provider.PERPLEXITY, 127_072),
    # Groq
    ModelDescriptor("llama-3.1-70b-versatile", Provider.GROQ, 131_072),
    ModelDescriptor("llama-3.1-8b-instant", Provider.GROQ, 131_072),
    ModelDescriptor("mixtral-8x7b-32768", Provider.GROQ, 32_768),
    ModelDescriptor("gemma2-9b-it", Provider.GROQ, 8_192),
)


def build_default_registry(settings: Settings) -> ModelRegistry:
    return ModelRegistry(DEFAULT_MODELS, settings)
