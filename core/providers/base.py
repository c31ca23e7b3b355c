"""LLM Provider interface: abstract base for all LLM backends.

Every provider implements ``generate_text`` (a single attempt).
``generate_with_retry`` wraps it with the rate-limit backoff shared by all
backends, so the section writer never needs to know which SDK is behind it.
"""

from __future__ import annotations

import abc
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

# HTTP statuses treated as "slow down and try again"
RATE_LIMIT_STATUSES = (429, 529)


@dataclass(frozen=True)
class LLMConfig:
    """Immutable configuration for a single LLM call."""

    model: str = DEFAULT_MODEL
    max_tokens: int = 4000
    temperature: Optional[float] = None
    timeout_seconds: int = 300
    retry_attempts: int = 3
    retry_base_delay: float = 4.0
    retry_max_delay: float = 15.0

    def retry_delay(self, attempt: int) -> float:
        """Seconds to wait before retry ``attempt`` (1-based): 4, 8, 12, capped at 15."""
        return min(self.retry_max_delay, attempt * self.retry_base_delay)


@dataclass
class LLMResponse:
    """Standardised response from any LLM provider."""

    text: str
    model: str = ""
    provider: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    stop_reason: str = ""
    prompt_hash: str = ""
    used_tool: bool = False
    attempts: int = 1


class LLMError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        retryable: bool = False,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable
        self.status_code = status_code


class LLMRateLimitError(LLMError):
    """The API answered 429 (rate limited) or 529 (overloaded)."""

    def __init__(self, message: str, status_code: int = 429, provider: str = ""):
        super().__init__(message, provider=provider, retryable=True, status_code=status_code)


class LLMTimeoutError(LLMError):
    """LLM call exceeded timeout."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=True)


class LLMEmptyResponseError(LLMError):
    """The API returned no usable text."""

    def __init__(self, message: str = "Empty response", provider: str = ""):
        super().__init__(message, provider=provider)


class LLMProvider(abc.ABC):
    """Abstract base class for LLM providers.

    Subclasses must implement ``generate_text``: send one prompt, return the
    text answer, and raise ``LLMRateLimitError`` on HTTP 429/529 so that
    ``generate_with_retry`` can back off.
    """

    provider_name: str = "base"
    supports_web_search: bool = False

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self._sleep = sleep

    @abc.abstractmethod
    def generate_text(
        self,
        prompt: str,
        *,
        config: Optional[LLMConfig] = None,
        use_web_search: bool = False,
    ) -> LLMResponse:
        """Send a prompt and return the model's text.

        Parameters
        ----------
        prompt : str
            The full user prompt.
        config : LLMConfig, optional
            Override default config for this call.
        use_web_search : bool
            Attach the provider's web-search tool, where supported.

        Raises
        ------
        LLMRateLimitError
            On HTTP 429/529.
        LLMError
            On any other API failure or an empty answer.
        """
        ...

    def generate_with_retry(
        self,
        prompt: str,
        *,
        config: Optional[LLMConfig] = None,
        use_web_search: bool = False,
    ) -> LLMResponse:
        """``generate_text`` with bounded linear backoff on rate limits."""
        cfg = self._default_config(config)
        attempt = 0
        while True:
            try:
                response = self.generate_text(
                    prompt, config=cfg, use_web_search=use_web_search,
                )
                response.attempts = attempt + 1
                return response
            except LLMRateLimitError as e:
                if attempt >= cfg.retry_attempts:
                    raise
                attempt += 1
                delay = cfg.retry_delay(attempt)
                logger.info(
                    "Rate limited (%s), waiting %.1fs before retry %d/%d...",
                    e.status_code, delay, attempt, cfg.retry_attempts,
                )
                self._sleep(delay)

    def _default_config(self, config: Optional[LLMConfig]) -> LLMConfig:
        return config or LLMConfig()
