"""Google Gemini provider: alternative backend for section drafting.

Implements the same LLMProvider interface as AnthropicProvider.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from typing import Any, Callable, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .base import (
    LLMConfig,
    LLMEmptyResponseError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
)
from .guards import TextOutputGuard

logger = logging.getLogger(__name__)


class GoogleProvider(LLMProvider):
    """LLM Provider backed by Google Gemini API."""

    provider_name = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gemini-1.5-pro",
        model: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(sleep=sleep)
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY", "")
        self.default_model = default_model
        self._model = model

    @property
    def model(self):
        if self._model is None:
            if not self.api_key:
                raise LLMError("GOOGLE_API_KEY is not set", provider=self.provider_name)
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.default_model)
        return self._model

    def generate_text(
        self,
        prompt: str,
        *,
        config: Optional[LLMConfig] = None,
        use_web_search: bool = False,
    ) -> LLMResponse:
        cfg = self._default_config(config)
        gen_config: dict = {"max_output_tokens": cfg.max_tokens}
        if cfg.temperature is not None:
            gen_config["temperature"] = cfg.temperature

        t0 = time.time()
        try:
            response = self.model.generate_content(
                prompt,
                generation_config=gen_config,
                request_options={"timeout": cfg.timeout_seconds},
            )
        except google_exceptions.ResourceExhausted as e:
            raise LLMRateLimitError(
                "API error 429", status_code=429, provider=self.provider_name,
            ) from e
        except google_exceptions.GoogleAPIError as e:
            raise LLMError(
                f"Gemini API error: {e}", provider=self.provider_name,
            ) from e

        try:
            raw = response.text or ""
        except ValueError as e:
            # Blocked or empty candidates make the quick accessor raise
            raise LLMEmptyResponseError(
                f"Gemini returned no text: {e}", provider=self.provider_name,
            ) from e
        text = TextOutputGuard.enforce(raw, provider=self.provider_name)
        usage = getattr(response, "usage_metadata", None)

        return LLMResponse(
            text=text,
            model=self.default_model,
            provider=self.provider_name,
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            latency_ms=int((time.time() - t0) * 1000),
            stop_reason="stop",
            prompt_hash=hashlib.sha256(prompt.encode()).hexdigest()[:16],
        )
