"""OpenAI provider: alternative backend for section drafting.

Implements the same LLMProvider interface as AnthropicProvider. Web search
is not wired up for this backend; research sections run without it.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from typing import Any, Callable, Optional

import openai

from .base import (
    LLMConfig,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    LLMTimeoutError,
)
from .guards import TextOutputGuard

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM Provider backed by OpenAI API (GPT-4o, etc.)."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gpt-4o",
        client: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(sleep=sleep)
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        self.default_model = default_model
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise LLMError("OPENAI_API_KEY is not set", provider=self.provider_name)
            self._client = openai.OpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    def generate_text(
        self,
        prompt: str,
        *,
        config: Optional[LLMConfig] = None,
        use_web_search: bool = False,
    ) -> LLMResponse:
        cfg = self._default_config(config)
        if use_web_search:
            logger.debug("Web search not supported by %s; ignoring", self.provider_name)

        kwargs: dict = {
            "model": self.default_model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": cfg.max_tokens,
            "timeout": cfg.timeout_seconds,
        }
        if cfg.temperature is not None:
            kwargs["temperature"] = cfg.temperature

        t0 = time.time()
        try:
            response = self.client.chat.completions.create(**kwargs)
        except openai.RateLimitError as e:
            raise LLMRateLimitError(
                "API error 429", status_code=429, provider=self.provider_name,
            ) from e
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(
                f"OpenAI request timed out after {cfg.timeout_seconds}s",
                provider=self.provider_name,
            ) from e
        except openai.APIStatusError as e:
            raise LLMError(
                f"API error {e.status_code}: Service temporarily unavailable.",
                provider=self.provider_name,
                status_code=e.status_code,
            ) from e
        except openai.APIConnectionError as e:
            raise LLMError(
                f"OpenAI connection failed: {e}",
                provider=self.provider_name,
                retryable=True,
            ) from e

        raw_text = response.choices[0].message.content or ""
        text = TextOutputGuard.enforce(raw_text, provider=self.provider_name)
        usage = response.usage

        return LLMResponse(
            text=text,
            model=self.default_model,
            provider=self.provider_name,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            latency_ms=int((time.time() - t0) * 1000),
            stop_reason=response.choices[0].finish_reason or "",
            prompt_hash=hashlib.sha256(prompt.encode()).hexdigest()[:16],
        )
