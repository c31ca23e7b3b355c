"""Static HTML used instead of model output.

Demo mode and exhausted rate limits produce placeholder sections that show
the layout of a real roadmap; unrecoverable API errors produce a red banner.
"""
from __future__ import annotations

from typing import Dict

from roadmap.config.models import SectionContent

PLACEHOLDER_TITLES: Dict[str, str] = {
    "research": "Market Research",
    "executive": "Executive Summary",
    "revenue": "Revenue Model",
    "implementation": "Implementation",
    "scaling": "Scaling Strategy",
    "financial": "Financials",
    "risks": "Risk Assessment",
}

PLACEHOLDER_SUBTITLES: Dict[str, str] = {
    "research": "Mocked market size, growth, and competition for {idea}",
    "executive": "High-level goals and positioning for investors",
    "revenue": "Illustrative pricing and unit economics in INR",
    "implementation": "18-month phased plan with team and budget placeholders",
    "scaling": "City-by-city rollout with example timelines",
    "financial": "Placeholder projections to showcase layout",
    "risks": "Key risks with mitigation placeholders",
}

DEFAULT_TITLE = "Roadmap Section"
DEFAULT_SUBTITLE = "Demo-only placeholder content"

ERROR_HINT = "Please try again, or enable Demo Mode to view placeholder content."


def build_mock_section(title: str, subtitle: str) -> str:
    return f"""
    <h3>{title}</h3>
    <p class="my-3 text-gray-700">{subtitle}</p>
    <ul class="space-y-2 my-4">
      <li class="ml-6 my-3 pl-2"><span class="font-semibold text-indigo-600">1.</span> Sample bullet showing structure</li>
      <li class="ml-6 my-3 pl-2"><span class="font-semibold text-indigo-600">2.</span> Replace with live data once API key is set</li>
    </ul>
  """


def create_mock_response(step_key: str, idea: str = "") -> SectionContent:
    """Placeholder section for ``step_key``."""
    title = PLACEHOLDER_TITLES.get(step_key, DEFAULT_TITLE)
    subtitle = PLACEHOLDER_SUBTITLES.get(step_key, DEFAULT_SUBTITLE)
    subtitle = subtitle.format(idea=idea or "your idea")
    return SectionContent(html=build_mock_section(title, subtitle), is_placeholder=True)


def error_banner(message: str) -> SectionContent:
    """Red error banner shown in place of a section."""
    html = f"""<div class="bg-red-50 border-2 border-red-300 rounded-lg p-4">
          <p class="text-red-800 font-semibold mb-2">Error: {message}</p>
          <p class="text-gray-600 text-sm">{ERROR_HINT}</p>
        </div>"""
    return SectionContent(html=html, is_error=True)
