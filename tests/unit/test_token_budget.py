"""Unit tests for token estimation and content fitting."""

import pytest

from bountrip.services.token_budget import (
    MAX_FIT_ITERATIONS,
    MIN_TEXT_CHARS,
    HeuristicTokenEstimator,
    TiktokenEstimator,
    draft_messages,
    estimate_tokens,
    fit_content,
    get_estimator,
)

SYSTEM = "You are a helpful travel assistant."
PROMPT = "Plan a 3-day trip to Lisbon."


def _history(count: int, size: int) -> list[dict[str, str]]:
    roles = ("user", "assistant")
    return [
        {"role": roles[i % 2], "content": f"{i:04d}".ljust(size, "x")}
        for i in range(count)
    ]


class RecordingEstimator(HeuristicTokenEstimator):
    def __init__(self):
        self.calls: list[int] = []

    def estimate(self, messages):
        tokens = super().estimate(messages)
        self.calls.append(tokens)
        return tokens


class FakeEncoding:
    """Word-count encoding that rejects special tokens the way tiktoken does."""

    def encode(self, text: str, disallowed_special="all") -> list[int]:
        if "<|endoftext|>" in text and disallowed_special != ():
            raise ValueError("Encountered text corresponding to disallowed special token")
        return [0] * len(text.split())


class TestEstimators:

    def test_estimate_tokens_rounds_up(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_heuristic_counts_framing(self):
        estimator = HeuristicTokenEstimator()
        assert estimator.estimate([]) == 3
        assert estimator.estimate([{"role": "user", "content": "abcd"}]) == 3 + 4 + 1

    def test_heuristic_handles_missing_content(self):
        estimator = HeuristicTokenEstimator()
        msg = {"role": "assistant", "content": None, "tool_calls": []}
        assert estimator.estimate([msg]) == 7

    def test_heuristic_is_monotonic(self):
        estimator = HeuristicTokenEstimator()
        base = draft_messages(SYSTEM, _history(2, 100), PROMPT)
        longer = draft_messages(SYSTEM + " Be brief.", _history(2, 100), PROMPT)
        fewer = draft_messages(SYSTEM, _history(1, 100), PROMPT)
        assert estimator.estimate(longer) >= estimator.estimate(base)
        assert estimator.estimate(fewer) <= estimator.estimate(base)

    def test_tiktoken_estimator_uses_encoding(self):
        estimator = TiktokenEstimator()
        estimator._encoding = FakeEncoding()
        messages = [{"role": "user", "content": "three word prompt"}]
        # priming + framing + role + content
        assert estimator.estimate(messages) == 3 + 3 + 1 + 3

    def test_tiktoken_counts_special_token_text(self):
        estimator = TiktokenEstimator()
        estimator._encoding = FakeEncoding()
        messages = [{"role": "user", "content": "what does <|endoftext|> mean"}]

        assert estimator.estimate(messages) == 3 + 3 + 1 + 4

    def test_get_estimator(self):
        assert isinstance(get_estimator("heuristic"), HeuristicTokenEstimator)
        assert isinstance(get_estimator("tiktoken"), TiktokenEstimator)
        with pytest.raises(ValueError):
            get_estimator("words")


class TestFitContent:

    def test_fitting_input_is_untouched(self):
        result = fit_content(SYSTEM, [], PROMPT, context_window=128_000)

        assert result.system == SYSTEM
        assert result.history == []
        assert result.prompt == PROMPT
        assert result.trims == 0
        assert result.target_tokens == 128_000
        assert result.fits

    def test_refitting_a_fitted_result_is_identity(self):
        history = _history(3, 100)
        first = fit_content("s" * 200, history, "p" * 200, context_window=180)
        second = fit_content(first.system, first.history, first.prompt, context_window=180)

        assert second.trims == 0
        assert (second.system, second.history, second.prompt) == (
            first.system, first.history, first.prompt,
        )

    def test_oldest_history_dropped_first(self):
        history = _history(3, 100)
        system = "s" * 200
        prompt = "p" * 200

        # 198 tokens; dropping one history message brings it to 169
        result = fit_content(system, history, prompt, context_window=180)

        assert result.trims == 1
        assert result.history == history[1:]
        assert result.system == system
        assert result.prompt == prompt
        assert result.fits

    def test_single_history_entry_is_kept_and_system_trimmed(self):
        history = _history(1, 100)
        system = "s" * 200
        prompt = "p" * 200

        result = fit_content(system, history, prompt, context_window=120)

        assert result.history == history
        assert result.prompt == prompt
        assert result.system == system[:120]
        assert result.tokens == 120
        assert result.fits

    def test_each_trim_reduces_estimate(self):
        estimator = RecordingEstimator()
        fit_content("s" * 200, _history(1, 100), "p" * 200, 120, estimator=estimator)

        assert estimator.calls == [140, 130, 125, 122, 121, 120]

    def test_trimming_respects_floor(self):
        result = fit_content("s" * 200, [], "p" * 200, context_window=10)

        assert len(result.system) == MIN_TEXT_CHARS
        assert len(result.prompt) == MIN_TEXT_CHARS
        assert result.system == "s" * MIN_TEXT_CHARS
        assert result.prompt == "p" * MIN_TEXT_CHARS
        assert result.exhausted
        assert not result.fits

    def test_system_trimmed_before_prompt(self):
        result = fit_content("s" * 200, [], "p" * 200, context_window=80)

        assert len(result.system) < 200
        assert result.prompt == "p" * 200
        assert result.fits

    def test_short_text_is_never_trimmed(self):
        result = fit_content("short", [], "tiny", context_window=1)

        assert result.system == "short"
        assert result.prompt == "tiny"
        assert result.trims == 0
        assert result.exhausted

    def test_pathological_history_stops_at_iteration_ceiling(self):
        history = _history(500, 100)

        result = fit_content(SYSTEM, history, PROMPT, context_window=50)

        assert result.trims == MAX_FIT_ITERATIONS
        assert len(result.history) == 400
        assert result.history == history[100:]
        assert not result.exhausted
        assert not result.fits

    def test_overflowing_history_removed_one_by_one(self):
        history = _history(50, 500)
        system = "s" * 40
        prompt = "p" * 30

        result = fit_content(system, history, prompt, context_window=200)

        assert len(result.history) == 1
        assert result.history[0] == history[-1]
        assert result.trims == 49
        assert result.system == system
        assert result.prompt == prompt
        assert result.fits

    def test_caller_history_not_mutated(self):
        history = _history(5, 500)
        snapshot = [dict(m) for m in history]

        fit_content(SYSTEM, history, PROMPT, context_window=100)

        assert history == snapshot

    def test_reserved_tokens_beyond_window(self):
        history = _history(2, 20)

        result = fit_content("s" * 40, history, "p" * 30, context_window=100, reserved_tokens=150)

        assert result.target_tokens == -50
        assert result.history == history[1:]
        assert result.exhausted
        assert not result.fits

    def test_reserved_tokens_shrink_target(self):
        history = _history(3, 100)

        result = fit_content("s" * 200, history, "p" * 200, context_window=330, reserved_tokens=150)

        assert result.target_tokens == 180
        assert result.history == history[1:]
