"""Section Writer -- one API round-trip per roadmap section.

Turns a prompt into rendered :class:`SectionContent`, deciding between
live output, placeholder content and an error banner:

  - demo mode or no API key           -> placeholder
  - success                           -> formatted model text
  - 429 still failing after retries   -> placeholder
  - anything else                     -> error banner (placeholder in demo mode)
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from core.providers.audit import AuditLogger
from core.providers.base import LLMConfig, LLMError, LLMProvider, LLMRateLimitError
from core.providers.registry import get_provider

from roadmap.config.models import GeneratorConfig, SectionContent
from roadmap.config.settings import get_api_key
from roadmap.render.formatter import process_content
from roadmap.render.placeholders import create_mock_response, error_banner

logger = logging.getLogger(__name__)


class SectionWriter:
    """Calls the configured LLM for a section and renders the answer.

    ``provider`` may be injected (tests, custom backends); otherwise one is
    built lazily from ``config.provider`` / ``config.model``. ``mock_mode``
    and ``research_mode`` are read from ``config`` on every call, so the UI
    can flip them between calls.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        provider: Optional[LLMProvider] = None,
        api_key: Optional[str] = None,
        audit: Optional[AuditLogger] = None,
        idea_getter: Optional[Callable[[], str]] = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self._provider = provider
        self._api_key = api_key
        self.audit = audit or AuditLogger()
        self._idea_getter = idea_getter or (lambda: "")

    @property
    def api_key(self) -> str:
        if self._api_key is not None:
            return self._api_key
        return get_api_key(self.config.provider)

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_provider(
                self.config.provider, model=self.config.model, api_key=self.api_key,
            )
        return self._provider

    def reset_provider(self) -> None:
        """Drop the cached provider so the next call picks up a new provider/model."""
        self._provider = None

    def llm_config(self) -> LLMConfig:
        cfg = self.config
        return LLMConfig(
            model=cfg.model,
            max_tokens=cfg.max_tokens,
            temperature=cfg.temperature,
            retry_attempts=cfg.retry_attempts,
            retry_base_delay=cfg.retry_base_delay,
            retry_max_delay=cfg.retry_max_delay,
        )

    def _mock(self, step_key: str) -> SectionContent:
        return create_mock_response(step_key, self._idea_getter())

    def write(
        self,
        prompt: str,
        step_key: str,
        *,
        use_web_search: bool = False,
    ) -> SectionContent:
        """Generate one section. Provider failures become placeholder or banner content."""
        if self.config.mock_mode or not self.api_key:
            if not self.api_key and not self.config.mock_mode:
                logger.warning(
                    "API key not set for %s. Returning mock content to avoid rate limits.",
                    self.config.provider,
                )
            self.audit.log_failure(step_key, provider=self.config.provider, fallback="mock")
            return self._mock(step_key)

        web_search = use_web_search and self.config.research_mode == "deep"

        try:
            response = self.provider.generate_with_retry(
                prompt, config=self.llm_config(), use_web_search=web_search,
            )
        except LLMRateLimitError as e:
            if e.status_code == 429:
                logger.warning("Rate limit hit after retries. Falling back to mock content.")
                self.audit.log_failure(
                    step_key, provider=e.provider, error=str(e), fallback="mock",
                )
                return self._mock(step_key)
            return self._failed(
                step_key, e,
                message=f"API error {e.status_code}: Service temporarily unavailable.",
            )
        except LLMError as e:
            return self._failed(step_key, e)
        except Exception as e:
            logger.exception("Unexpected provider failure for section %s", step_key)
            return self._failed(
                step_key, LLMError(str(e) or type(e).__name__, provider=self.config.provider),
            )

        self.audit.log(response, step_key=step_key)
        return process_content(response.text)

    def _failed(self, step_key: str, error: LLMError, message: Optional[str] = None) -> SectionContent:
        logger.error("API error for section %s: %s", step_key, error)
        if self.config.mock_mode:
            self.audit.log_failure(step_key, provider=error.provider, error=str(error), fallback="mock")
            return self._mock(step_key)
        self.audit.log_failure(step_key, provider=error.provider, error=str(error), fallback="error")
        return error_banner(message or str(error))
