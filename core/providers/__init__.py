"""LLM Provider abstraction layer.

Supports multiple LLM backends (Anthropic Claude, OpenAI, Google Gemini)
with a unified text interface, rate-limit backoff, and audit logging.
"""

from .base import (
    LLMConfig,
    LLMEmptyResponseError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    LLMTimeoutError,
)
from .anthropic_provider import AnthropicProvider
from .guards import TextOutputGuard
from .audit import AuditLogger, AuditRecord

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "LLMError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMEmptyResponseError",
    "AnthropicProvider",
    "TextOutputGuard",
    "AuditLogger",
    "AuditRecord",
]
