"""Prompt Registry -- central management for all roadmap prompts.

Provides:
  - Default prompts for every section plus the chat revision prompt
  - Per-session overrides edited in the sidebar
  - Placeholder validation and reset
  - Prompt metadata (display name, description)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .prompts import (
    REVISION_PROMPT,
    SECTION_PROMPTS,
    STEPS,
    build_revision_prompt,
    build_section_prompt,
)

logger = logging.getLogger(__name__)

REVISION_KEY = "revision"

# Placeholders each prompt kind must be formattable with
_SECTION_FIELDS = {"idea": "x"}
_REVISION_FIELDS = {"idea": "x", "current": "x", "request": "x"}


@dataclass
class PromptEntry:
    """One editable template shown in the Prompt settings panel."""
    key: str  # step key, or "revision"
    display_name: str  # sidebar label
    description: str  # help text
    default_content: str  # built-in template
    current_content: str = ""  # empty means built-in

    @property
    def content(self) -> str:
        """Custom template if set, else the built-in one."""
        return self.current_content if self.current_content else self.default_content

    @property
    def is_customized(self) -> bool:
        return bool(self.current_content) and self.current_content != self.default_content

    def reset(self) -> None:
        self.current_content = ""


class PromptRegistry:
    """Central registry for all roadmap prompts.

    Usage::

        registry = PromptRegistry()
        prompt = registry.render_section("research", idea)
        registry.set("research", "Analyze {idea} briefly.")
        registry.reset("research")
        registry.reset_all()
    """

    def __init__(self, overrides: Optional[Dict[str, str]] = None) -> None:
        self._entries: Dict[str, PromptEntry] = {}
        self._register_defaults()
        if overrides:
            self.from_session_state(overrides)

    def _register_defaults(self) -> None:
        for step in STEPS:
            self._entries[step.key] = PromptEntry(
                key=step.key,
                display_name=f"{step.label} prompt",
                description=f"Drafts the {step.label} section; {{idea}} is the business idea",
                default_content=SECTION_PROMPTS[step.key],
            )
        self._entries[REVISION_KEY] = PromptEntry(
            key=REVISION_KEY,
            display_name="Chat revision prompt",
            description="Rewrites one section; uses {idea}, {current} and {request}",
            default_content=REVISION_PROMPT,
        )

    def _require(self, key: str) -> PromptEntry:
        entry = self._entries.get(key)
        if not entry:
            raise KeyError(f"Unknown prompt key: {key}")
        return entry

    def get(self, key: str) -> str:
        """Template in effect for ``key``."""
        return self._require(key).content

    def get_entry(self, key: str) -> PromptEntry:
        return self._require(key)

    def set(self, key: str, content: str) -> None:
        """Override a prompt with custom content.

        Raises ValueError when the template has unknown or malformed
        placeholders.
        """
        entry = self._require(key)
        fields = _REVISION_FIELDS if key == REVISION_KEY else _SECTION_FIELDS
        try:
            content.format(**fields)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Invalid placeholder in prompt '{key}': {e}") from e
        entry.current_content = content
        logger.info("Prompt '%s' customized (%d chars)", key, len(content))

    def reset(self, key: str) -> None:
        self._require(key).reset()
        logger.info("Prompt '%s' reset to default", key)

    def reset_all(self) -> None:
        """Drop every customisation."""
        for entry in self._entries.values():
            entry.reset()
        logger.info("All prompts reset to defaults")

    def list_entries(self) -> List[PromptEntry]:
        """List all entries in step order, revision last."""
        return list(self._entries.values())

    def get_customized_keys(self) -> List[str]:
        """Keys whose template differs from the built-in one."""
        return [k for k, e in self._entries.items() if e.is_customized]

    def render_section(self, step_key: str, idea: str) -> str:
        """Format a section prompt; unknown keys use the research prompt."""
        overrides = {
            k: e.current_content for k, e in self._entries.items()
            if k != REVISION_KEY and e.is_customized
        }
        return build_section_prompt(step_key, idea, overrides=overrides)

    def render_revision(self, idea: str, current_html: str, request: str) -> str:
        return build_revision_prompt(
            idea, current_html, request, template=self.get(REVISION_KEY),
        )

    def to_session_state(self) -> Dict[str, str]:
        """Custom templates keyed by prompt key, for ``st.session_state``."""
        return {k: e.current_content for k, e in self._entries.items() if e.is_customized}

    def from_session_state(self, state: Dict[str, str]) -> None:
        """Apply templates saved by :meth:`to_session_state`; unknown keys are skipped."""
        for key, content in state.items():
            if key in self._entries and content:
                self._entries[key].current_content = content
