"""Token estimation and prompt budgeting for chat requests.

Counting follows the OpenAI chat accounting: every message costs a few
framing tokens plus its role and content, and the reply is primed with a
few more. Content is measured either with a character heuristic
(~4 chars/token) or with tiktoken.

``fit_content`` trims a conversation until its estimate fits a model's
context window, dropping the oldest history first, then shortening the
system text, then the prompt.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

Message = dict[str, str]

_CHARS_PER_TOKEN = 4
_TOKENS_PER_MESSAGE = 3
_TOKENS_PER_ROLE = 1
_REPLY_PRIMING_TOKENS = 3

# Budgeting constants; changing any of them changes which content survives
MAX_FIT_ITERATIONS = 100
TRIM_RATIO = 0.5
APPROX_CHARS_PER_TOKEN = 4
MIN_TEXT_CHARS = 50


class TokenEstimator(Protocol):
    def estimate(self, messages: Sequence[Message]) -> int: ...


def estimate_tokens(text: str) -> int:
    """Estimate token count from text using character heuristic."""
    return math.ceil(len(text) / _CHARS_PER_TOKEN)


class HeuristicTokenEstimator:
    """Chat token estimate using the character heuristic for content."""

    def estimate(self, messages: Sequence[Message]) -> int:
        total = _REPLY_PRIMING_TOKENS
        for msg in messages:
            total += _TOKENS_PER_MESSAGE + _TOKENS_PER_ROLE
            total += estimate_tokens(msg.get("content") or "")
        return total


class TiktokenEstimator:
    """Chat token estimate using a tiktoken BPE encoding for content."""

    def __init__(self, encoding_name: str = "cl100k_base"):
        self.encoding_name = encoding_name
        self._encoding = None

    def _encode(self, text: str) -> list[int]:
        if self._encoding is None:
            import tiktoken

            self._encoding = tiktoken.get_encoding(self.encoding_name)
        # Special-token markers in user text are counted as plain text
        return self._encoding.encode(text, disallowed_special=())

    def estimate(self, messages: Sequence[Message]) -> int:
        total = _REPLY_PRIMING_TOKENS
        for msg in messages:
            total += _TOKENS_PER_MESSAGE
            total += len(self._encode(msg.get("role") or ""))
            total += len(self._encode(msg.get("content") or ""))
        return total


def get_estimator(name: str) -> TokenEstimator:
    if name == "heuristic":
        return HeuristicTokenEstimator()
    if name == "tiktoken":
        return TiktokenEstimator()
    raise ValueError(f"Unknown token estimator: {name}")


def draft_messages(system: str, history: Sequence[Message], prompt: str) -> list[Message]:
    """Join system, history and prompt into the message list sent upstream."""
    return [
        {"role": "system", "content": system},
        *history,
        {"role": "user", "content": prompt},
    ]


@dataclass
class FitResult:
    system: str
    history: list[Message]
    prompt: str
    tokens: int
    target_tokens: int
    trims: int = 0
    exhausted: bool = False

    @property
    def fits(self) -> bool:
        """False when trimming gave up before reaching the target."""
        return self.tokens <= self.target_tokens


def fit_content(
    system: str,
    history: Sequence[Message],
    prompt: str,
    context_window: int,
    reserved_tokens: int = 0,
    estimator: TokenEstimator | None = None,
) -> FitResult:
    """Trim system/history/prompt until the estimate fits the context window.

    One action per iteration, in order:

    1. drop the oldest history message while more than one remains;
    2. shorten the system text from the end, never below MIN_TEXT_CHARS;
    3. shorten the prompt the same way.

    Each shortening removes about half the remaining overage. The loop
    stops after MAX_FIT_ITERATIONS trims or when nothing is left to trim;
    the result is then returned as-is and ``fits`` reports whether the
    target was reached. The caller's history list is not modified.
    """
    estimator = estimator or HeuristicTokenEstimator()
    history = list(history)
    target_tokens = context_window - reserved_tokens
    current_tokens = estimator.estimate(draft_messages(system, history, prompt))

    logger.info(
        "Fitting content: %d tokens, target %d (window %d, reserved %d)",
        current_tokens, target_tokens, context_window, reserved_tokens,
    )

    trims = 0
    exhausted = False
    while current_tokens > target_tokens:
        if trims >= MAX_FIT_ITERATIONS:
            logger.error(
                "Content fitting hit %d iterations, giving up at %d tokens",
                MAX_FIT_ITERATIONS, current_tokens,
            )
            break

        tokens_over = current_tokens - target_tokens
        chars_to_remove = math.ceil(tokens_over * TRIM_RATIO) * APPROX_CHARS_PER_TOKEN

        if len(history) > 1:
            removed = history.pop(0)
            logger.debug("Dropped oldest %s message from history", removed.get("role"))
        elif len(system) > MIN_TEXT_CHARS:
            trim = min(chars_to_remove, len(system) - MIN_TEXT_CHARS)
            system = system[:-trim]
            logger.debug("Trimmed system text by %d chars", trim)
        elif len(prompt) > MIN_TEXT_CHARS:
            trim = min(chars_to_remove, len(prompt) - MIN_TEXT_CHARS)
            prompt = prompt[:-trim]
            logger.debug("Trimmed prompt by %d chars", trim)
        else:
            exhausted = True
            logger.warning(
                "Content cannot be reduced further, still %d tokens over", tokens_over,
            )
            break

        trims += 1
        current_tokens = estimator.estimate(draft_messages(system, history, prompt))

    logger.info(
        "Content fitted after %d trims: %d tokens, target %d",
        trims, current_tokens, target_tokens,
    )
    return FitResult(
        system=system,
        history=history,
        prompt=prompt,
        tokens=current_tokens,
        target_tokens=target_tokens,
        trims=trims,
        exhausted=exhausted,
    )
