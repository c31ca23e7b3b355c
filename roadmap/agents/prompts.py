"""Prompt templates for roadmap generation.

All prompt constants are exposed so the Streamlit UI can display them
in an editable "Prompt settings" section. Custom overrides go through
:class:`roadmap.agents.prompt_registry.PromptRegistry`.

Templates use ``str.format`` placeholders: ``{idea}`` for the section
prompts and ``{idea}``, ``{current}``, ``{request}`` for revisions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class RoadmapStep:
    key: str
    label: str


STEPS: List[RoadmapStep] = [
    RoadmapStep("research", "Market Research"),
    RoadmapStep("executive", "Executive Summary"),
    RoadmapStep("revenue", "Revenue Model"),
    RoadmapStep("implementation", "Implementation"),
    RoadmapStep("scaling", "Scaling Strategy"),
    RoadmapStep("financial", "Financials"),
    RoadmapStep("risks", "Risk Assessment"),
]

STEP_KEYS: List[str] = [s.key for s in STEPS]
STEP_LABELS: Dict[str, str] = {s.key: s.label for s in STEPS}

# Only market research benefits from live web data
WEB_SEARCH_STEPS = frozenset({"research"})

DEFAULT_REVISION_STEP = "executive"
REVISION_CONTEXT_CHARS = 800

# ------------------------------------------------------------------
# Section prompts
# ------------------------------------------------------------------

RESEARCH_PROMPT = """\
Analyze this Indian market business idea: "{idea}"

Provide detailed market research with:

MARKET SIZE
- Total market in India (INR Crores)
- Growth rate and trends
- Key cities and regions

COMPETITION
- List 5-7 competitors
- Their positioning and funding
- Market gaps

CUSTOMERS
- Target segments with income levels
- Demographics and preferences
- Pain points

REGULATIONS
- Required licenses
- Compliance needs
- Setup costs

TRENDS
- Recent developments
- Opportunities
- Risks

Use bullet points and realistic numbers."""

EXECUTIVE_PROMPT = """\
Create executive summary for Indian market: "{idea}"

OVERVIEW
- Value proposition
- Problem solved
- Target customers
- Differentiation

OPPORTUNITY
- Market size (TAM/SAM/SOM)
- Growth potential
- Target cities

MODEL
- Revenue streams
- Pricing strategy
- Key partnerships

METRICS
Show Year 1, 2, 3 targets for customers, revenue, cities, team."""

REVENUE_PROMPT = """\
Design revenue model for: "{idea}"

STREAMS
- Primary and secondary revenue
- Pricing in INR
- Rationale

PRICING
Create table with tiers, prices, features, target customers.

ECONOMICS
- AOV, CAC, LTV in INR
- LTV:CAC ratio
- Margins

PROJECTIONS
Monthly targets for 12 months."""

IMPLEMENTATION_PROMPT = """\
Create 18-month plan for: "{idea}"

PHASE 1 (M1-3): Foundation
- MVP features
- Team and salaries
- Tech stack
- Budget

PHASE 2 (M4-6): Launch
- Target city
- Customer goals
- Marketing
- Budget

PHASE 3 (M7-12): Growth
- Expansion
- Revenue targets
- Team growth
- Budget

PHASE 4 (M13-18): Scale
- Multi-city
- Profitability
- Funding
- Budget"""

SCALING_PROMPT = """\
Scaling strategy for: "{idea}"

CHANNELS
- Marketing approach
- Partnerships
- Growth tactics

EXPANSION
- City sequence
- Timeline
- Investment

OPERATIONS
- Team growth
- Tech infrastructure
- Automation

TARGETS
Quarterly goals for customers, revenue, team, cities."""

FINANCIAL_PROMPT = """\
3-year projections for: "{idea}"

STARTUP COSTS
- Tech, legal, marketing
- Total in INR Lakhs

MONTHLY EXPENSES
Year 1, 2, 3 breakdown

REVENUE
Monthly Year 1, Quarterly Year 2-3

METRICS
- Burn rate
- Runway
- Break-even
- EBITDA

FUNDING
- Seed and Series A
- Use of funds
- Dilution"""

RISKS_PROMPT = """\
Risk assessment for: "{idea}"

For each category, list 3-4 risks with Impact, Probability, Mitigation, Contingency:

MARKET RISKS
Competition, adoption, CAC

FINANCIAL RISKS
Funding, cash flow, burn

OPERATIONAL RISKS
Hiring, tech, supply chain

REGULATORY RISKS
Policy, compliance, privacy

COMPETITIVE RISKS
Incumbents, entrants, consolidation"""

SECTION_PROMPTS: Dict[str, str] = {
    "research": RESEARCH_PROMPT,
    "executive": EXECUTIVE_PROMPT,
    "revenue": REVENUE_PROMPT,
    "implementation": IMPLEMENTATION_PROMPT,
    "scaling": SCALING_PROMPT,
    "financial": FINANCIAL_PROMPT,
    "risks": RISKS_PROMPT,
}

# ------------------------------------------------------------------
# Chat revision prompt
# ------------------------------------------------------------------

REVISION_PROMPT = """\
Improve this section for: "{idea}"

Current content: {current}

User request: {request}

Provide improved version with bullet points, tables, and realistic INR numbers."""


# ------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------

def get_step(step_key: str) -> Optional[RoadmapStep]:
    for step in STEPS:
        if step.key == step_key:
            return step
    return None


def build_section_prompt(
    step_key: str,
    idea: str,
    overrides: Optional[Dict[str, str]] = None,
) -> str:
    """Return the prompt for one section; unknown keys get the research prompt."""
    templates = dict(SECTION_PROMPTS)
    if overrides:
        templates.update({k: v for k, v in overrides.items() if v})
    template = templates.get(step_key) or templates["research"]
    return template.format(idea=idea)


def build_revision_prompt(
    idea: str,
    current_html: Optional[str],
    request: str,
    template: Optional[str] = None,
) -> str:
    """Build the chat revision prompt from the first 800 chars of the section."""
    current = (current_html or "")[:REVISION_CONTEXT_CHARS]
    return (template or REVISION_PROMPT).format(
        idea=idea, current=current, request=request,
    )


def pick_target_step(message: str) -> str:
    """Return the first step key (in step order) mentioned in ``message``."""
    lower = (message or "").lower()
    for step in STEPS:
        if step.key in lower:
            return step.key
    return DEFAULT_REVISION_STEP
