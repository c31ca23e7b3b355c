"""LLM audit logging. Tracks every section call for cost monitoring and debugging.

Audit records live in memory for the lifetime of a session, with an
optional persist hook.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .base import LLMResponse

logger = logging.getLogger(__name__)


@dataclass
class AuditRecord:
    """Single LLM call audit entry."""

    step_key: str = ""
    provider: str = ""
    model: str = ""
    prompt_hash: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    attempts: int = 1
    used_tool: bool = False
    fallback: str = ""  # "", "mock" or "error"
    timestamp: float = field(default_factory=time.time)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["token_usage"] = {
            "input": data.pop("input_tokens"),
            "output": data.pop("output_tokens"),
        }
        return data


class AuditLogger:
    """Collects LLM audit records.

    Usage::

        audit = AuditLogger()
        audit.log(response, step_key="research")
        audit.log_failure("revenue", provider="anthropic", error="API error 529", fallback="error")
        print(audit.summary())
    """

    def __init__(self, persist_fn: Optional[Callable[[AuditRecord], None]] = None):
        self._records: List[AuditRecord] = []
        self._persist_fn = persist_fn

    def _append(self, record: AuditRecord) -> AuditRecord:
        self._records.append(record)
        if self._persist_fn:
            try:
                self._persist_fn(record)
            except Exception as e:
                logger.error("Failed to persist audit record: %s", e)
        return record

    def log(self, response: LLMResponse, *, step_key: str = "") -> AuditRecord:
        """Record a successful LLM call."""
        record = self._append(AuditRecord(
            step_key=step_key,
            provider=response.provider,
            model=response.model,
            prompt_hash=response.prompt_hash,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            latency_ms=response.latency_ms,
            attempts=response.attempts,
            used_tool=response.used_tool,
        ))
        logger.info(
            "LLM audit: step=%s provider=%s model=%s tokens=%d+%d latency=%dms attempts=%d",
            record.step_key,
            record.provider,
            record.model,
            record.input_tokens,
            record.output_tokens,
            record.latency_ms,
            record.attempts,
        )
        return record

    def log_failure(
        self,
        step_key: str,
        *,
        provider: str = "",
        error: str = "",
        fallback: str = "",
    ) -> AuditRecord:
        """Record a call that ended in placeholder or error-banner content."""
        record = self._append(AuditRecord(
            step_key=step_key,
            provider=provider,
            error=error or None,
            fallback=fallback,
        ))
        logger.info(
            "LLM audit: step=%s provider=%s fallback=%s error=%s",
            step_key, provider, fallback or "-", error or "-",
        )
        return record

    def summary(self) -> Dict[str, Any]:
        """Return aggregate stats for all recorded calls."""
        by_step: Dict[str, Dict[str, int]] = {}
        for rec in self._records:
            step = by_step.setdefault(
                rec.step_key, {"calls": 0, "input_tokens": 0, "output_tokens": 0},
            )
            step["calls"] += 1
            step["input_tokens"] += rec.input_tokens
            step["output_tokens"] += rec.output_tokens

        return {
            "total_calls": len(self._records),
            "total_input_tokens": sum(r.input_tokens for r in self._records),
            "total_output_tokens": sum(r.output_tokens for r in self._records),
            "total_latency_ms": sum(r.latency_ms for r in self._records),
            "errors": sum(1 for r in self._records if r.error),
            "fallbacks": sum(1 for r in self._records if r.fallback),
            "by_step": by_step,
        }

    @property
    def records(self) -> List[AuditRecord]:
        return list(self._records)
