"""Section Reviser -- rewrites one section from a chat request.

The target section is chosen from the message text (the first step key it
mentions, ``executive`` otherwise). The rewrite never uses web search and
is returned as a proposal; nothing in the roadmap changes until the user
applies it.
"""
from __future__ import annotations

import logging
from typing import Optional

from roadmap.config.models import RevisionProposal, Roadmap

from .prompt_registry import PromptRegistry
from .prompts import pick_target_step
from .section_writer import SectionWriter

logger = logging.getLogger(__name__)


class SectionReviser:
    def __init__(self, writer: SectionWriter, prompts: Optional[PromptRegistry] = None) -> None:
        self.writer = writer
        self.prompts = prompts or PromptRegistry()

    def propose(self, idea: str, roadmap: Roadmap, message: str) -> RevisionProposal:
        target = pick_target_step(message)
        original = roadmap.get(target)
        prompt = self.prompts.render_revision(
            idea, original.html if original else "", message,
        )
        logger.info("Revising section %s (%d-char request)", target, len(message))
        content = self.writer.write(prompt, target, use_web_search=False)
        return RevisionProposal(
            step=target,
            content=content,
            original_content=original.model_copy(deep=True) if original else None,
        )
