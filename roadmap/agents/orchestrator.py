"""Roadmap Orchestrator -- drafts the seven sections one after another.

Pipeline (one LLM call per step, in this order):
    1. Market Research      (web search in deep mode)
    2. Executive Summary
    3. Revenue Model
    4. Implementation
    5. Scaling Strategy
    6. Financials
    7. Risk Assessment

A fixed pause separates consecutive calls to stay under the API's rate
limits. Progress is reported through an ``on_step`` callback after every
section so the UI can render partial roadmaps.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from roadmap.config.models import GeneratorConfig, Roadmap

from .prompt_registry import PromptRegistry
from .prompts import STEPS, WEB_SEARCH_STEPS
from .section_writer import SectionWriter

logger = logging.getLogger(__name__)

GENERATION_TIP = "Tip: Try using Fast mode or wait 1-2 minutes before trying again."


@dataclass
class AgentStep:
    """Record of one section generation step."""
    step_key: str
    label: str
    index: int = 0
    total: int = len(STEPS)
    status: str = "pending"  # pending / running / success / error
    started_at: float = 0.0
    finished_at: float = 0.0
    error_message: str = ""
    summary: str = ""

    @property
    def progress_text(self) -> str:
        return f"{self.label} ({self.index + 1}/{self.total})"

    @property
    def elapsed_seconds(self) -> float:
        if self.finished_at and self.started_at:
            return self.finished_at - self.started_at
        return 0.0


@dataclass
class GenerationResult:
    """Complete result of one roadmap generation."""
    idea: str = ""
    roadmap: Roadmap = field(default_factory=dict)
    steps: List[AgentStep] = field(default_factory=list)
    total_elapsed: float = 0.0
    error: str = ""

    @property
    def is_success(self) -> bool:
        return not self.error and len(self.roadmap) == len(STEPS)

    @property
    def placeholder_steps(self) -> List[str]:
        return [k for k, s in self.roadmap.items() if s.is_placeholder]

    @property
    def error_steps(self) -> List[str]:
        return [k for k, s in self.roadmap.items() if s.is_error]

    @property
    def warnings(self) -> List[str]:
        warnings = []
        if self.error:
            warnings.append(f"{self.error}\n\n{GENERATION_TIP}")
        for key in self.error_steps:
            warnings.append(f"{key}: API error, see section for details")
        return warnings


class RoadmapOrchestrator:
    """Coordinates the sequential section pipeline.

    Usage::

        orch = RoadmapOrchestrator(writer, config)
        result = orch.generate("Hyperlocal grocery delivery for tier-2 cities")
        result.roadmap["research"].html
    """

    def __init__(
        self,
        writer: SectionWriter,
        config: Optional[GeneratorConfig] = None,
        *,
        prompts: Optional[PromptRegistry] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.writer = writer
        self.config = config or writer.config
        self.prompts = prompts or PromptRegistry()
        self._sleep = sleep

    def generate(
        self,
        idea: str,
        *,
        on_step: Optional[Callable[[AgentStep], Any]] = None,
        on_section: Optional[Callable[[Roadmap], Any]] = None,
    ) -> GenerationResult:
        """Generate every section for ``idea``.

        Parameters
        ----------
        idea : str
            The business idea; must not be blank.
        on_step : callable, optional
            ``(step: AgentStep) -> None``, called when a step starts and ends.
        on_section : callable, optional
            ``(partial_roadmap) -> None``, called after each section is stored.

        Raises
        ------
        ValueError
            If ``idea`` is blank.
        """
        if not idea or not idea.strip():
            raise ValueError("Business idea is empty")

        result = GenerationResult(idea=idea)
        t_start = time.time()

        for i, entry in enumerate(STEPS):
            step = AgentStep(step_key=entry.key, label=entry.label, index=i)
            result.steps.append(step)

            step.status = "running"
            step.started_at = time.time()
            if on_step:
                on_step(step)

            if i > 0 and self.config.step_delay_seconds > 0:
                self._sleep(self.config.step_delay_seconds)

            try:
                prompt = self.prompts.render_section(entry.key, idea)
                section = self.writer.write(
                    prompt, entry.key, use_web_search=entry.key in WEB_SEARCH_STEPS,
                )
            except Exception as e:
                step.status = "error"
                step.error_message = str(e)
                step.finished_at = time.time()
                result.error = str(e)
                logger.error("Generation error at %s: %s", entry.label, e)
                if on_step:
                    on_step(step)
                break

            result.roadmap[entry.key] = section
            step.status = "error" if section.is_error else "success"
            step.summary = (
                "placeholder" if section.is_placeholder
                else "error banner" if section.is_error
                else f"{len(section.html)} chars"
            )
            step.finished_at = time.time()
            logger.info("Step %s complete: %s", step.progress_text, step.summary)
            if on_step:
                on_step(step)
            if on_section:
                on_section(dict(result.roadmap))

        result.total_elapsed = time.time() - t_start
        return result
