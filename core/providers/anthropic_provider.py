"""Anthropic Claude provider implementation.

Implements the two-step tool protocol used for web-search sections: when
Claude stops to use a tool and has not yet written a substantive answer, a
follow-up request hands back a tool result and asks for the analysis.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from typing import Any, Callable, Dict, List, Optional

import anthropic

from .base import (
    DEFAULT_MODEL,
    RATE_LIMIT_STATUSES,
    LLMConfig,
    LLMEmptyResponseError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    LLMTimeoutError,
)
from .guards import TextOutputGuard

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL: Dict[str, str] = {"type": "web_search_20250305", "name": "web_search"}
TOOL_RESULT_MESSAGE = "Search completed. Provide detailed analysis."


def _block_to_param(block: Any) -> Any:
    """Turn an SDK content block back into a request-side dict."""
    if hasattr(block, "model_dump"):
        return block.model_dump(exclude_none=True)
    return block


def _join_text_blocks(content: List[Any]) -> str:
    return "\n".join(
        block.text for block in content if getattr(block, "type", "") == "text"
    )


class AnthropicProvider(LLMProvider):
    """LLM Provider backed by Anthropic Claude API."""

    provider_name = "anthropic"
    supports_web_search = True

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        client: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(sleep=sleep)
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self.default_model = default_model
        self.base_url = base_url
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise LLMError(
                    "ANTHROPIC_API_KEY is not set",
                    provider=self.provider_name,
                )
            # Backoff is handled by generate_with_retry, not by the SDK
            kwargs: Dict[str, Any] = {"api_key": self.api_key, "max_retries": 0}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = anthropic.Anthropic(**kwargs)
        return self._client

    def _create(
        self,
        cfg: LLMConfig,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[list],
        is_follow_up: bool = False,
    ):
        kwargs: Dict[str, Any] = {
            "model": model,
            "max_tokens": cfg.max_tokens,
            "messages": messages,
            "timeout": cfg.timeout_seconds,
        }
        if cfg.temperature is not None:
            kwargs["temperature"] = cfg.temperature
        if tools:
            kwargs["tools"] = tools
        try:
            return self.client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            if e.status_code in RATE_LIMIT_STATUSES:
                raise LLMRateLimitError(
                    f"API error {e.status_code}", status_code=e.status_code,
                    provider=self.provider_name,
                ) from e
            message = (
                f"Follow-up error: {e.status_code}" if is_follow_up
                else f"API error {e.status_code}: Service temporarily unavailable."
            )
            raise LLMError(
                message,
                provider=self.provider_name,
                status_code=e.status_code,
            ) from e
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(
                f"Anthropic request timed out after {cfg.timeout_seconds}s",
                provider=self.provider_name,
            ) from e
        except anthropic.APIConnectionError as e:
            raise LLMError(
                f"Anthropic connection failed: {e}",
                provider=self.provider_name,
                retryable=True,
            ) from e

    def generate_text(
        self,
        prompt: str,
        *,
        config: Optional[LLMConfig] = None,
        use_web_search: bool = False,
    ) -> LLMResponse:
        cfg = self._default_config(config)
        model = cfg.model if cfg.model != DEFAULT_MODEL else self.default_model
        tools = [dict(WEB_SEARCH_TOOL)] if use_web_search else None
        prompt_hash = hashlib.sha256(prompt.encode()).hexdigest()[:16]
        user_message = {"role": "user", "content": prompt}

        t0 = time.time()
        data = self._create(cfg, model, [user_message], tools)
        stop_reason = getattr(data, "stop_reason", "") or ""
        input_tokens, output_tokens = self._usage(data)
        used_tool = False
        text = None

        if stop_reason == "tool_use":
            combined = _join_text_blocks(data.content)
            if TextOutputGuard.is_substantive(combined):
                text = combined
            else:
                tool_block = next(
                    (b for b in data.content if getattr(b, "type", "") == "tool_use"),
                    None,
                )
                if tool_block is not None:
                    logger.info("Tool use requested (%s), sending follow-up", tool_block.id)
                    follow_up = self._create(
                        cfg,
                        model,
                        [
                            user_message,
                            {
                                "role": "assistant",
                                "content": [_block_to_param(b) for b in data.content],
                            },
                            {
                                "role": "user",
                                "content": [{
                                    "type": "tool_result",
                                    "tool_use_id": tool_block.id,
                                    "content": TOOL_RESULT_MESSAGE,
                                }],
                            },
                        ],
                        tools,
                        is_follow_up=True,
                    )
                    used_tool = True
                    extra_in, extra_out = self._usage(follow_up)
                    input_tokens += extra_in
                    output_tokens += extra_out
                    follow_up_text = _join_text_blocks(follow_up.content)
                    if follow_up_text.strip():
                        text = follow_up_text
                        stop_reason = getattr(follow_up, "stop_reason", "") or stop_reason

        if text is None:
            text = _join_text_blocks(data.content)
            if not text.strip():
                raise LLMEmptyResponseError(provider=self.provider_name)

        return LLMResponse(
            text=text,
            model=model,
            provider=self.provider_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            latency_ms=int((time.time() - t0) * 1000),
            stop_reason=stop_reason,
            prompt_hash=prompt_hash,
            used_tool=used_tool,
        )

    @staticmethod
    def _usage(response: Any) -> tuple:
        usage = getattr(response, "usage", None)
        if usage is None:
            return 0, 0
        return (
            int(getattr(usage, "input_tokens", 0) or 0),
            int(getattr(usage, "output_tokens", 0) or 0),
        )
