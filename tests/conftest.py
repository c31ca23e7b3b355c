"""Shared fixtures for the Business Roadmap Generator test suite.

Provides a clean environment (no API keys, preferences in a temp dir),
generator configs with zero delays, fake providers and sample roadmaps.
"""

from unittest.mock import MagicMock

import pytest

from core import storage
from core.providers.base import LLMProvider, LLMResponse
from roadmap.agents.prompts import STEPS
from roadmap.config.models import GeneratorConfig, SectionContent


ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "ROADMAP_API_KEY",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "ROADMAP_PROVIDER",
    "ROADMAP_MODEL",
    "ROADMAP_STEP_DELAY",
)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Strip API keys and point preference storage at a temp dir."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(storage, "LOCAL_STATE_DIR", str(tmp_path / "state"))
    return tmp_path


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def live_config():
    """Live-mode config with no pauses between calls."""
    return GeneratorConfig(step_delay_seconds=0.0, mock_mode=False)


@pytest.fixture
def demo_config():
    return GeneratorConfig(step_delay_seconds=0.0, mock_mode=True)


# ---------------------------------------------------------------------------
# Provider fakes
# ---------------------------------------------------------------------------

def make_response(text: str = "## Heading\n- point one", **kwargs) -> LLMResponse:
    defaults = dict(
        model="claude-sonnet-4-5-20250929",
        provider="anthropic",
        input_tokens=120,
        output_tokens=340,
        latency_ms=900,
        prompt_hash="abc123",
    )
    defaults.update(kwargs)
    return LLMResponse(text=text, **defaults)


@pytest.fixture
def fake_provider():
    """MagicMock provider whose generate_with_retry returns a small markdown answer."""
    provider = MagicMock(spec=LLMProvider)
    provider.generate_with_retry.return_value = make_response()
    return provider


# ---------------------------------------------------------------------------
# Roadmap fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_roadmap():
    return {
        step.key: SectionContent(html=f"<p>{step.label} body</p>")
        for step in STEPS
    }
