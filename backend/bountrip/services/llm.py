import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from bountrip.services.errors import (
    InvalidLLMRequest,
    LLMError,
    MissingSchemaName,
    RequestFailed,
    ResponseRefused,
)
from bountrip.services.model_registry import ModelRegistry, ResolvedModel
from bountrip.services.token_budget import (
    FitResult,
    HeuristicTokenEstimator,
    Message,
    TokenEstimator,
    draft_messages,
    fit_content,
)

logger = logging.getLogger(__name__)

# Token overhead set aside for each declared tool definition
TOKENS_PER_TOOL = 150


def reserved_tokens_for(tools: Sequence[dict] | None) -> int:
    return len(tools) * TOKENS_PER_TOOL if tools else 0


@dataclass
class ProviderRequest:
    payload: dict[str, Any]
    fit: FitResult
    reserved_tokens: int


def build_request(
    model: ResolvedModel,
    system: str,
    history: Sequence[Message],
    prompt: str,
    *,
    temperature: float = 0.5,
    max_tokens: int | None = None,
    top_p: float = 1,
    frequency_penalty: float = 0.0001,
    presence_penalty: float = 0,
    stop: str | list[str] | None = None,
    tools: list[dict] | None = None,
    tool_choice: str | dict | None = None,
    json_schema_name: str | None = None,
    json_schema: dict | None = None,
    stream: bool = False,
    estimator: TokenEstimator | None = None,
) -> ProviderRequest:
    """Fit the conversation into the model's window and build the payload.

    ``max_tokens`` defaults to whatever is left of the context window after
    the messages and tool overhead. It is not clamped, so a conversation
    that could not be trimmed enough yields zero or a negative value.
    """
    if json_schema and not json_schema_name:
        raise MissingSchemaName()

    estimator = estimator or HeuristicTokenEstimator()
    reserved_tokens = reserved_tokens_for(tools)
    fit = fit_content(
        system, history, prompt,
        context_window=model.context_window,
        reserved_tokens=reserved_tokens,
        estimator=estimator,
    )
    if not fit.fits:
        logger.warning(
            "Conversation for %s still over budget: %d tokens, target %d",
            model.name, fit.tokens, fit.target_tokens,
        )

    messages = draft_messages(fit.system, fit.history, fit.prompt)
    available = model.context_window - estimator.estimate(messages) - reserved_tokens
    if not max_tokens and available <= 0:
        logger.warning("No output tokens left for %s (max_tokens=%d)", model.name, available)

    payload: dict[str, Any] = {
        "model": model.name,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens or available,
        "top_p": top_p,
        "frequency_penalty": frequency_penalty,
        "presence_penalty": presence_penalty,
        "stream": stream,
    }

    if json_schema:
        payload["response_format"] = {
            "type": "json_schema",
            "json_schema": {
                "name": json_schema_name,
                "schema": json_schema,
                "strict": True,
            },
        }

    # Tool calling is only sent where the provider handles it, and never streamed
    if tools and model.supports_tools and not stream:
        payload["tools"] = tools
        if tool_choice is not None:
            payload["tool_choice"] = tool_choice

    if stop:
        payload["stop"] = stop

    return ProviderRequest(payload=payload, fit=fit, reserved_tokens=reserved_tokens)


def response_json(resp: httpx.Response) -> dict:
    """Decode a buffered provider response, treating a non-JSON body as a failure."""
    try:
        return resp.json()
    except ValueError as exc:
        logger.error("Provider returned non-JSON body (%s): %s", resp.status_code, resp.text[:500])
        raise RequestFailed(
            "provider returned a non-JSON response",
            status_code=resp.status_code,
            body=resp.text,
        ) from exc


def message_content(data: dict) -> str:
    """Return the assistant text from a chat-completions response body."""
    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as exc:
        logger.error("Unexpected LLM response shape: %s", data)
        raise LLMError("Unexpected response from LLM service") from exc

    content = message.get("content")
    if content is None:
        refusal = message.get("refusal")
        if refusal:
            raise ResponseRefused(refusal)
        logger.error("LLM response has no content: %s", data)
        raise LLMError("Empty response from LLM service")
    return content


class LLMDispatcher:
    """Resolves a model, budgets the conversation and calls the provider."""

    def __init__(
        self,
        registry: ModelRegistry,
        client: httpx.AsyncClient,
        estimator: TokenEstimator | None = None,
    ):
        self.registry = registry
        self.client = client
        self.estimator = estimator or HeuristicTokenEstimator()

    async def send_message(
        self,
        model: str,
        prompt: str,
        system: str = "",
        history: Sequence[Message] | None = None,
        stream: bool = False,
        **options: Any,
    ) -> httpx.Response:
        """Build and send a chat request, returning the raw provider response.

        ``options`` are passed to :func:`build_request` (temperature,
        max_tokens, tools, json_schema, ...). With ``stream=True`` the
        response body has not been read; the caller must consume and close
        it.
        """
        if not model or not prompt:
            raise InvalidLLMRequest(
                "Missing required field: " + ("model" if not model else "prompt")
            )

        resolved = self.registry.resolve(model)
        request = build_request(
            resolved,
            system or "",
            history or [],
            prompt,
            stream=stream,
            estimator=self.estimator,
            **options,
        )
        return await self.dispatch(request, resolved, stream=stream)

    async def dispatch(
        self,
        request: ProviderRequest,
        model: ResolvedModel,
        stream: bool = False,
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {model.auth_token}",
            "Content-Type": "application/json",
        }
        provider = model.provider.value

        try:
            if stream:
                outbound = self.client.build_request(
                    "POST", model.url, json=request.payload, headers=headers
                )
                resp = await self.client.send(outbound, stream=True)
            else:
                resp = await self.client.post(model.url, json=request.payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("%s request failed: %s", provider, exc)
            raise RequestFailed(str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            try:
                if stream:
                    await resp.aread()
            except httpx.HTTPError as exc:
                logger.error("%s returned %s, body unreadable: %s", provider, resp.status_code, exc)
                raise RequestFailed(
                    f"{provider} returned {resp.status_code}", status_code=resp.status_code
                ) from exc
            finally:
                if stream:
                    await resp.aclose()
            body = resp.text
            logger.error("%s returned %s: %s", provider, resp.status_code, body)
            raise RequestFailed(
                f"{provider} returned {resp.status_code}",
                status_code=resp.status_code,
                body=body,
            )

        return resp

    async def complete(self, model: str, prompt: str, **kwargs: Any) -> str:
        """Non-streaming call that returns the assistant text."""
        kwargs.pop("stream", None)
        resp = await self.send_message(model, prompt, **kwargs)
        return message_content(response_json(resp))
