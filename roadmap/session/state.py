"""Roadmap session -- everything the UI keeps between reruns.

:class:`RoadmapSession` owns the business idea, the current roadmap, the
snapshot history, the chat transcript and any pending revision. The
Streamlit app stores one instance in ``st.session_state``; the CLI uses
one per invocation.
"""
from __future__ import annotations

import logging
import time
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Union

from core import storage
from core.providers.audit import AuditLogger

from roadmap.agents.orchestrator import AgentStep, GenerationResult, RoadmapOrchestrator
from roadmap.agents.prompt_registry import PromptRegistry
from roadmap.agents.reviser import SectionReviser
from roadmap.agents.section_writer import SectionWriter
from roadmap.config.models import (
    ChatMessage,
    GeneratorConfig,
    ResearchMode,
    RevisionProposal,
    Roadmap,
    Snapshot,
)
from roadmap.config.settings import build_config
from roadmap.render.export import export_filename, render_html_export, render_text_export

from .history import RoadmapHistory

logger = logging.getLogger(__name__)

RESEARCH_MODE_PREF = "research_mode"

MSG_PROPOSAL_READY = "Created improved {step} section. Review and apply or keep original."
MSG_CHAT_ERROR = "Error occurred. Please try again."
MSG_APPLIED = "Applied changes to {step}. Previous saved to history."
MSG_REJECTED = "Kept original. Ask for different changes if needed."


class RoadmapSession:
    """Stateful facade over the orchestrator, reviser and history."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        writer: Optional[SectionWriter] = None,
        prompts: Optional[PromptRegistry] = None,
        sleep: Callable[[float], None] = time.sleep,
        persist_preferences: bool = True,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.config = config or build_config()
        self.persist_preferences = persist_preferences
        if persist_preferences:
            saved = storage.get_preference(RESEARCH_MODE_PREF)
            if saved in ("fast", "deep"):
                self.config.research_mode = saved

        self.idea: str = ""
        self.roadmap: Optional[Roadmap] = None
        self.history = RoadmapHistory()
        self.chat_messages: List[ChatMessage] = []
        self.proposal: Optional[RevisionProposal] = None
        self.loading = False
        self.chat_loading = False
        self.current_step = ""
        self.last_result: Optional[GenerationResult] = None

        self.prompts = prompts or PromptRegistry()
        self.writer = writer or SectionWriter(
            self.config, audit=audit, idea_getter=lambda: self.idea,
        )
        self.orchestrator = RoadmapOrchestrator(
            self.writer, self.config, prompts=self.prompts, sleep=sleep,
        )
        self.reviser = SectionReviser(self.writer, prompts=self.prompts)

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    @property
    def research_mode(self) -> ResearchMode:
        return self.config.research_mode

    def set_research_mode(self, mode: ResearchMode) -> None:
        if mode not in ("fast", "deep"):
            raise ValueError(f"Unknown research mode: {mode!r}")
        self.config.research_mode = mode
        if self.persist_preferences:
            storage.save_preference(RESEARCH_MODE_PREF, mode)

    @property
    def mock_mode(self) -> bool:
        return self.config.mock_mode

    def set_mock_mode(self, enabled: bool) -> None:
        self.config.mock_mode = bool(enabled)
        logger.info("Demo mode %s", "enabled" if enabled else "disabled")

    def toggle_mock_mode(self) -> bool:
        self.set_mock_mode(not self.config.mock_mode)
        return self.config.mock_mode

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self,
        *,
        on_step: Optional[Callable[[AgentStep], Any]] = None,
        on_section: Optional[Callable[[Roadmap], Any]] = None,
    ) -> Optional[GenerationResult]:
        """Draft every section for ``self.idea``; returns None for a blank idea."""
        if not self.idea.strip():
            return None

        self.loading = True
        self.roadmap = None
        self.chat_messages = []
        self.proposal = None

        def _step(step: AgentStep) -> None:
            if step.status == "running":
                self.current_step = step.progress_text
            if on_step:
                on_step(step)

        def _section(partial: Roadmap) -> None:
            self.roadmap = partial
            if on_section:
                on_section(partial)

        try:
            result = self.orchestrator.generate(self.idea, on_step=_step, on_section=_section)
            self.roadmap = result.roadmap or None
            if not result.error:
                self.history.save(result.roadmap, self.idea)
            self.last_result = result
            return result
        finally:
            self.loading = False
            self.current_step = ""

    # ------------------------------------------------------------------
    # Chat revisions
    # ------------------------------------------------------------------

    def _say(self, content: str) -> None:
        self.chat_messages.append(ChatMessage(role="assistant", content=content))

    def chat(self, message: str) -> Optional[RevisionProposal]:
        """Ask for a rewrite of one section; the result waits as ``proposal``."""
        if not message or not message.strip() or not self.roadmap:
            return None

        self.chat_messages.append(ChatMessage(role="user", content=message))
        self.chat_loading = True
        self.proposal = None
        try:
            self.proposal = self.reviser.propose(self.idea, self.roadmap, message)
            self._say(MSG_PROPOSAL_READY.format(step=self.proposal.step))
        except Exception as e:  # noqa: BLE001
            logger.error("Chat error: %s", e)
            self._say(MSG_CHAT_ERROR)
        finally:
            self.chat_loading = False
        return self.proposal

    def apply_revision(self) -> bool:
        if not self.proposal:
            return False
        self.history.save(self.roadmap, self.idea)
        updated = dict(self.roadmap or {})
        updated[self.proposal.step] = self.proposal.content
        self.roadmap = updated
        step = self.proposal.step
        self.proposal = None
        self._say(MSG_APPLIED.format(step=step))
        return True

    def reject_revision(self) -> None:
        self.proposal = None
        self._say(MSG_REJECTED)

    # ------------------------------------------------------------------
    # History & export
    # ------------------------------------------------------------------

    def restore(self, which: Union[int, Snapshot]) -> Roadmap:
        self.roadmap = self.history.restore(which)
        return self.roadmap

    def export_text(self, on_date: Optional[date] = None) -> str:
        return render_text_export(self.roadmap or {}, self.idea, self.research_mode, on_date)

    def export_html(self) -> str:
        return render_html_export(self.roadmap or {}, self.idea)

    def export_filename(self, now: Optional[datetime] = None) -> str:
        return export_filename(now)
