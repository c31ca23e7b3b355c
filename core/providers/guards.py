"""Output guards for LLM text responses.

These guards enforce the rules the rest of the pipeline relies on:
- A tool-use turn only counts as an answer when it carries real text
- Code-fence wrappers are removed before formatting
- Blank answers are rejected
"""

from __future__ import annotations

import logging
import re

from .base import LLMEmptyResponseError

logger = logging.getLogger(__name__)

# A tool-use turn needs more than this many characters to stand on its own
SUBSTANTIVE_MIN_CHARS = 100

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


class TextOutputGuard:
    """Checks applied to raw model text before it reaches the formatter."""

    @staticmethod
    def is_substantive(text: str) -> bool:
        return len((text or "").strip()) > SUBSTANTIVE_MIN_CHARS

    @staticmethod
    def strip_fences(text: str) -> str:
        """Remove a code fence wrapping the whole answer, if present."""
        stripped = (text or "").strip()
        match = _FENCE_RE.match(stripped)
        if match:
            logger.debug("Stripped code fence wrapper (%d chars)", len(stripped))
            return match.group(1)
        return text

    @staticmethod
    def enforce(text: str, provider: str = "") -> str:
        """Return the unwrapped text, raising on blank output."""
        cleaned = TextOutputGuard.strip_fences(text)
        if not (cleaned or "").strip():
            raise LLMEmptyResponseError(provider=provider)
        return cleaned
