"""
Business Roadmap Generator - Configuration and Data Models
==========================================================

Defines the Pydantic v2 models shared across the generator:

  Settings : GeneratorConfig
  Content  : SectionContent, Roadmap (alias)
  Session  : Snapshot, ChatMessage, RevisionProposal

Convention
----------
- A roadmap is a plain ``dict`` keyed by step key (``research``,
  ``executive``, ...) so partially generated plans are easy to render.
- Snapshots always hold deep copies; mutating the live roadmap never
  changes history.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

ResearchMode = Literal["fast", "deep"]
Provider = Literal["anthropic", "openai", "google"]


# ============================================================
# Generator settings
# ============================================================


class GeneratorConfig(BaseModel):
    """Settings for one generation run.

    Attributes:
        provider:            LLM backend name.
        model:               Model ID for the backend.
        max_tokens:          Completion budget per section.
        temperature:         Sampling temperature; ``None`` uses the API default.
        step_delay_seconds:  Pause between consecutive section calls.
        retry_attempts:      Retries on HTTP 429/529 before falling back.
        retry_base_delay:    Linear backoff step (seconds).
        retry_max_delay:     Backoff cap (seconds).
        research_mode:       ``deep`` attaches web search to market research.
        mock_mode:           Demo mode; never calls the API.
    """

    provider: Provider = Field(default="anthropic")
    model: str = Field(default="claude-sonnet-4-5-20250929")
    max_tokens: int = Field(default=4000, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    step_delay_seconds: float = Field(default=4.0, ge=0.0)
    retry_attempts: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=4.0, ge=0.0)
    retry_max_delay: float = Field(default=15.0, ge=0.0)
    research_mode: ResearchMode = Field(default="deep")
    mock_mode: bool = Field(default=False)

    @field_validator("research_mode", mode="before")
    @classmethod
    def _normalise_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


# ============================================================
# Section content
# ============================================================


class SectionContent(BaseModel):
    """Rendered output for one roadmap section."""

    html: str = ""
    data: Optional[Dict[str, Any]] = None
    is_placeholder: bool = Field(default=False, description="True for demo/fallback content")
    is_error: bool = Field(default=False, description="True when html is an error banner")


Roadmap = Dict[str, SectionContent]


def copy_roadmap(roadmap: Roadmap) -> Roadmap:
    """Deep copy of a roadmap dict."""
    return {key: section.model_copy(deep=True) for key, section in roadmap.items()}


# ============================================================
# Session models
# ============================================================


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Snapshot(BaseModel):
    """A saved copy of the full roadmap plus the idea it was generated for."""

    timestamp: str = Field(default_factory=_utc_now_iso)
    data: Dict[str, SectionContent] = Field(default_factory=dict)
    idea: str = ""

    @property
    def section_count(self) -> int:
        return len(self.data)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class RevisionProposal(BaseModel):
    """An improved section waiting for the user to apply or reject it."""

    step: str
    content: SectionContent
    original_content: Optional[SectionContent] = None
