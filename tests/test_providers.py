"""Tests for core.providers -- retry, Anthropic tool protocol and SDK error mapping."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import openai
import pytest
from google.api_core import exceptions as google_exceptions

from core.providers.anthropic_provider import (
    TOOL_RESULT_MESSAGE,
    WEB_SEARCH_TOOL,
    AnthropicProvider,
)
from core.providers.base import (
    LLMConfig,
    LLMEmptyResponseError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    LLMTimeoutError,
)
from core.providers.google_provider import GoogleProvider
from core.providers.guards import TextOutputGuard
from core.providers.openai_provider import OpenAIProvider
from core.providers.registry import (
    get_default_model_for_provider,
    get_provider,
    get_providers,
    supports_web_search,
    validate_provider_model,
)

REQUEST = httpx.Request("POST", "https://api.example.test/v1/messages")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _text(text: str):
    return SimpleNamespace(type="text", text=text)


def _tool_use(block_id: str = "toolu_01"):
    return SimpleNamespace(type="tool_use", id=block_id, name="web_search", input={"query": "x"})


def _message(*blocks, stop_reason="end_turn", input_tokens=10, output_tokens=20):
    return SimpleNamespace(
        content=list(blocks),
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def _searching():
    return _message(_text("Searching."), _tool_use(), stop_reason="tool_use")


def _status_error(cls, status: int):
    return cls(f"status {status}", response=httpx.Response(status, request=REQUEST), body=None)


def _anthropic(*responses):
    client = MagicMock()
    client.messages.create.side_effect = list(responses)
    sleeps = []
    provider = AnthropicProvider(api_key="sk-test", client=client, sleep=sleeps.append)
    return provider, client, sleeps


class _FlakyProvider(LLMProvider):
    """Raises the given errors in order, then answers."""

    provider_name = "flaky"

    def __init__(self, errors, sleep):
        super().__init__(sleep=sleep)
        self.errors = list(errors)
        self.calls = 0

    def generate_text(self, prompt, *, config=None, use_web_search=False):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return LLMResponse(text="ok", provider=self.provider_name)


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------

class TestRetry:
    def test_delay_schedule(self):
        cfg = LLMConfig()
        assert [cfg.retry_delay(n) for n in (1, 2, 3, 4, 5)] == [4.0, 8.0, 12.0, 15.0, 15.0]

    def test_recovers_after_rate_limits(self):
        sleeps = []
        provider = _FlakyProvider([LLMRateLimitError("429"), LLMRateLimitError("529", status_code=529)], sleeps.append)
        response = provider.generate_with_retry("p")
        assert response.text == "ok"
        assert response.attempts == 3
        assert sleeps == [4.0, 8.0]

    def test_gives_up_after_three_retries(self):
        sleeps = []
        provider = _FlakyProvider([LLMRateLimitError("429")] * 4, sleeps.append)
        with pytest.raises(LLMRateLimitError):
            provider.generate_with_retry("p")
        assert provider.calls == 4
        assert sleeps == [4.0, 8.0, 12.0]

    def test_other_errors_not_retried(self):
        sleeps = []
        provider = _FlakyProvider([LLMError("boom")], sleeps.append)
        with pytest.raises(LLMError):
            provider.generate_with_retry("p")
        assert provider.calls == 1
        assert sleeps == []

    def test_zero_retry_budget(self):
        sleeps = []
        provider = _FlakyProvider([LLMRateLimitError("429")], sleeps.append)
        with pytest.raises(LLMRateLimitError):
            provider.generate_with_retry("p", config=LLMConfig(retry_attempts=0))
        assert sleeps == []


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------

class TestAnthropicProvider:
    def test_plain_answer(self):
        provider, client, _ = _anthropic(_message(_text("## Market\n- big")))
        response = provider.generate_text("prompt")
        assert response.text == "## Market\n- big"
        assert response.input_tokens == 10
        assert response.output_tokens == 20
        assert response.used_tool is False
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["max_tokens"] == 4000
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert "tools" not in kwargs
        assert "temperature" not in kwargs

    def test_web_search_attaches_tool(self):
        provider, client, _ = _anthropic(_message(_text("answer")))
        provider.generate_text("prompt", use_web_search=True)
        assert client.messages.create.call_args.kwargs["tools"] == [WEB_SEARCH_TOOL]

    def test_joins_text_blocks(self):
        provider, _, _ = _anthropic(_message(_text("a"), _tool_use(), _text("b")))
        assert provider.generate_text("p").text == "a\nb"

    def test_tool_use_follow_up(self):
        first = _message(_text("Let me search."), _tool_use("toolu_9"), stop_reason="tool_use")
        second = _message(_text("Full analysis"), input_tokens=5, output_tokens=7)
        provider, client, _ = _anthropic(first, second)

        response = provider.generate_text("prompt", use_web_search=True)

        assert response.text == "Full analysis"
        assert response.used_tool is True
        assert response.input_tokens == 15
        assert response.output_tokens == 27
        assert client.messages.create.call_count == 2
        messages = client.messages.create.call_args.kwargs["messages"]
        assert len(messages) == 3
        assert messages[0] == {"role": "user", "content": "prompt"}
        assert messages[1]["role"] == "assistant"
        assert messages[2]["content"] == [{
            "type": "tool_result",
            "tool_use_id": "toolu_9",
            "content": TOOL_RESULT_MESSAGE,
        }]

    def test_substantive_tool_use_text_returned(self):
        long_text = "Detailed market research. " * 10
        provider, client, _ = _anthropic(
            _message(_text(long_text), _tool_use(), stop_reason="tool_use"),
        )
        response = provider.generate_text("prompt", use_web_search=True)
        assert response.text == long_text
        assert client.messages.create.call_count == 1

    def test_empty_follow_up_falls_back_to_first_text(self):
        provider, _, _ = _anthropic(
            _message(_text("short"), _tool_use(), stop_reason="tool_use"),
            _message(),
        )
        assert provider.generate_text("p", use_web_search=True).text == "short"

    def test_empty_answer_raises(self):
        provider, _, _ = _anthropic(_message())
        with pytest.raises(LLMEmptyResponseError, match="Empty response"):
            provider.generate_text("p")

    def test_rate_limit_mapped(self):
        provider, _, _ = _anthropic(_status_error(anthropic.RateLimitError, 429))
        with pytest.raises(LLMRateLimitError) as exc:
            provider.generate_text("p")
        assert exc.value.status_code == 429

    def test_overloaded_mapped(self):
        provider, _, _ = _anthropic(_status_error(anthropic.APIStatusError, 529))
        with pytest.raises(LLMRateLimitError) as exc:
            provider.generate_text("p")
        assert exc.value.status_code == 529

    def test_server_error_message(self):
        provider, _, _ = _anthropic(_status_error(anthropic.InternalServerError, 500))
        with pytest.raises(LLMError, match="API error 500: Service temporarily unavailable.") as exc:
            provider.generate_text("p")
        assert not isinstance(exc.value, LLMRateLimitError)

    def test_timeout_mapped(self):
        provider, _, _ = _anthropic(anthropic.APITimeoutError(request=REQUEST))
        with pytest.raises(LLMTimeoutError):
            provider.generate_text("p")

    def test_retry_then_success(self):
        provider, client, sleeps = _anthropic(
            _status_error(anthropic.RateLimitError, 429),
            _message(_text("done")),
        )
        response = provider.generate_with_retry("p")
        assert response.text == "done"
        assert response.attempts == 2
        assert sleeps == [4.0]
        assert client.messages.create.call_count == 2

    def test_follow_up_rate_limit_restarts_attempt(self):
        provider, client, sleeps = _anthropic(
            _searching(),
            _status_error(anthropic.RateLimitError, 429),
            _searching(),
            _message(_text("final")),
        )
        response = provider.generate_with_retry("p", use_web_search=True)
        assert response.text == "final"
        assert response.attempts == 2
        assert sleeps == [4.0]
        assert client.messages.create.call_count == 4

    def test_follow_up_rate_limit_shares_retry_budget(self):
        responses = []
        for _ in range(4):
            responses.append(_searching())
            responses.append(_status_error(anthropic.RateLimitError, 429))
        provider, client, sleeps = _anthropic(*responses)
        with pytest.raises(LLMRateLimitError):
            provider.generate_with_retry("p", use_web_search=True)
        assert sleeps == [4.0, 8.0, 12.0]
        assert client.messages.create.call_count == 8

    def test_follow_up_server_error_message(self):
        provider, _, _ = _anthropic(
            _searching(),
            _status_error(anthropic.InternalServerError, 500),
        )
        with pytest.raises(LLMError, match="^Follow-up error: 500$") as exc:
            provider.generate_text("p", use_web_search=True)
        assert exc.value.status_code == 500

    def test_missing_key(self):
        provider = AnthropicProvider(api_key="")
        with pytest.raises(LLMError, match="ANTHROPIC_API_KEY"):
            provider.generate_text("p")

    def test_temperature_passed_when_set(self):
        provider, client, _ = _anthropic(_message(_text("x")))
        provider.generate_text("p", config=LLMConfig(temperature=0.3))
        assert client.messages.create.call_args.kwargs["temperature"] == 0.3


# ---------------------------------------------------------------------------
# OpenAI / Google
# ---------------------------------------------------------------------------

def _chat_completion(text):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4),
    )


class _BlockedGeminiResponse:
    """Gemini response whose candidates were all blocked by safety filters."""

    usage_metadata = None

    @property
    def text(self):
        raise ValueError(
            "Invalid operation: The response.text quick accessor requires the "
            "response to contain a valid Part"
        )


class TestOpenAIProvider:
    def test_answer(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_completion("```markdown\n- hi\n```")
        provider = OpenAIProvider(api_key="k", default_model="gpt-4o-mini", client=client)
        response = provider.generate_text("p", use_web_search=True)
        assert response.text == "- hi"
        assert response.model == "gpt-4o-mini"
        assert response.output_tokens == 4
        assert "tools" not in client.chat.completions.create.call_args.kwargs

    def test_rate_limit_mapped(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = _status_error(openai.RateLimitError, 429)
        provider = OpenAIProvider(api_key="k", client=client)
        with pytest.raises(LLMRateLimitError):
            provider.generate_text("p")

    def test_blank_answer(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_completion(None)
        provider = OpenAIProvider(api_key="k", client=client)
        with pytest.raises(LLMEmptyResponseError):
            provider.generate_text("p")


class TestGoogleProvider:
    def test_answer(self):
        model = MagicMock()
        model.generate_content.return_value = SimpleNamespace(
            text="Gemini says hi",
            usage_metadata=SimpleNamespace(prompt_token_count=2, candidates_token_count=3),
        )
        provider = GoogleProvider(api_key="k", model=model)
        response = provider.generate_text("p")
        assert response.text == "Gemini says hi"
        assert response.input_tokens == 2
        assert model.generate_content.call_args.kwargs["generation_config"] == {"max_output_tokens": 4000}

    def test_quota_mapped(self):
        model = MagicMock()
        model.generate_content.side_effect = google_exceptions.ResourceExhausted("quota")
        provider = GoogleProvider(api_key="k", model=model)
        with pytest.raises(LLMRateLimitError):
            provider.generate_text("p")

    def test_blocked_response(self):
        model = MagicMock()
        model.generate_content.return_value = _BlockedGeminiResponse()
        provider = GoogleProvider(api_key="k", model=model)
        with pytest.raises(LLMEmptyResponseError, match="valid Part"):
            provider.generate_text("p")


# ---------------------------------------------------------------------------
# Guards / registry
# ---------------------------------------------------------------------------

class TestTextOutputGuard:
    def test_substantive_threshold(self):
        assert not TextOutputGuard.is_substantive("x" * 100)
        assert TextOutputGuard.is_substantive("x" * 101)
        assert not TextOutputGuard.is_substantive("   " + "x" * 99 + "   ")

    def test_strip_fences(self):
        assert TextOutputGuard.strip_fences("```json\n{}\n```") == "{}"
        assert TextOutputGuard.strip_fences("no fence") == "no fence"

    def test_enforce_blank(self):
        with pytest.raises(LLMEmptyResponseError):
            TextOutputGuard.enforce("  \n ")


class TestRegistry:
    def test_providers(self):
        assert [p["id"] for p in get_providers()] == ["anthropic", "openai", "google"]

    def test_default_models(self):
        assert get_default_model_for_provider("anthropic") == "claude-sonnet-4-5-20250929"
        assert get_default_model_for_provider("openai") == "gpt-4o"
        assert get_default_model_for_provider("unknown") is None

    def test_validate(self):
        assert validate_provider_model("google", "gemini-2.0-flash")
        assert not validate_provider_model("google", "gpt-4o")

    def test_web_search_support(self):
        assert supports_web_search("anthropic", "claude-haiku-4-5-20251001")
        assert not supports_web_search("openai", "gpt-4o")
        assert not supports_web_search("anthropic", "custom-model")

    def test_factory(self):
        provider = get_provider("anthropic", model="claude-haiku-4-5-20251001", api_key="k")
        assert isinstance(provider, AnthropicProvider)
        assert provider.default_model == "claude-haiku-4-5-20251001"
        assert provider.api_key == "k"

    def test_factory_unknown(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            get_provider("mistral")
