"""
Business Roadmap Generator (Streamlit UI)
=========================================

Turns a one-line business idea into a seven-section roadmap:

* **Generate** -- market research, executive summary, revenue model,
  implementation, scaling, financials and risks, one API call each
* **Chat** -- ask for a rewrite of one section, then apply or keep it
* **History** -- restore any of the last ten versions

Run with::

    streamlit run roadmap/app/streamlit_app.py
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List

# Ensure project root is on sys.path (needed for Streamlit Cloud deployment)
_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import streamlit as st

# ---------------------------------------------------------------------------
# Project imports
# ---------------------------------------------------------------------------

from core.providers.registry import get_models_for_provider, get_providers, supports_web_search
from roadmap.agents.orchestrator import GENERATION_TIP, AgentStep
from roadmap.agents.prompts import STEPS
from roadmap.app.version import version_label
from roadmap.config.models import GeneratorConfig, Roadmap, SectionContent
from roadmap.config.settings import build_config, has_api_key
from roadmap.session.state import RoadmapSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

IDEA_PLACEHOLDER = "e.g. Subscription meal kits for college hostels in Pune"
MODE_LABELS = {
    "fast": "Fast (no web search)",
    "deep": "Deep (live market research)",
}
CHAT_EXAMPLES: List[str] = [
    "Make the revenue section more conservative",
    "Add a hiring plan to implementation",
    "Expand the risks with regulatory issues",
]


# ---------------------------------------------------------------------------
# Session-state initialisation
# ---------------------------------------------------------------------------

def _init_session_state() -> None:
    """Ensure every required session-state key exists."""
    if "session" not in st.session_state:
        st.session_state["session"] = RoadmapSession(build_config())
    defaults = {
        "idea_input": "",
        "error_message": "",
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def _session() -> RoadmapSession:
    return st.session_state["session"]


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def _render_section(label: str, section: SectionContent) -> None:
    with st.container(border=True):
        st.subheader(label)
        if section.is_placeholder:
            st.caption("Demo content")
        st.markdown(section.html, unsafe_allow_html=True)


def _render_roadmap(roadmap: Roadmap) -> None:
    for step in STEPS:
        section = roadmap.get(step.key)
        if section is not None:
            _render_section(step.label, section)


# ===================================================================
# Sidebar
# ===================================================================

def _model_options(provider: str, config: GeneratorConfig) -> List[str]:
    """Catalog models for ``provider``, plus the configured model if it is off-catalog."""
    models = [m["model_id"] for m in get_models_for_provider(provider)]
    if provider == config.provider and config.model not in models:
        models.insert(0, config.model)
    return models


def _render_sidebar() -> None:
    session = _session()
    st.title("Roadmap Generator")
    st.caption(version_label())

    st.divider()
    mode = st.radio(
        "Research mode",
        options=list(MODE_LABELS),
        format_func=MODE_LABELS.get,
        index=list(MODE_LABELS).index(session.research_mode),
        disabled=session.mock_mode,
        key="research_mode_radio",
    )
    if mode != session.research_mode:
        session.set_research_mode(mode)

    demo = st.toggle(
        "Demo mode",
        value=session.mock_mode,
        help="Show placeholder content instead of calling the API.",
        key="demo_toggle",
    )
    if demo != session.mock_mode:
        session.set_mock_mode(demo)
    if not has_api_key(session.config.provider):
        st.info("No API key configured; demo content only.")

    with st.expander("Model", expanded=False):
        providers = [p["id"] for p in get_providers()]
        provider = st.selectbox(
            "Provider",
            options=providers,
            index=providers.index(session.config.provider),
            key="provider_select",
        )
        models = _model_options(provider, session.config)
        current = session.config.model if session.config.model in models else models[0]
        model = st.selectbox("Model", options=models, index=models.index(current), key="model_select")
        if provider != session.config.provider or model != session.config.model:
            session.config.provider = provider
            session.config.model = model
            session.writer.reset_provider()
        if not supports_web_search(provider, model):
            st.caption("Deep mode runs without web search on this model.")

    _render_prompt_settings()

    if session.history.snapshots:
        st.divider()
        with st.expander(f"History ({len(session.history)})", expanded=False):
            for idx, snap in enumerate(session.history):
                st.caption(f"{snap.timestamp[:19].replace('T', ' ')} UTC · {snap.section_count} sections")
                if st.button("Restore", key=f"restore_{idx}_{snap.timestamp}"):
                    session.restore(snap)
                    st.rerun()

    audit = session.writer.audit.summary()
    if audit["total_calls"]:
        st.divider()
        st.caption(
            f"API calls: {audit['total_calls']} · "
            f"tokens: {audit['total_input_tokens']:,} in / {audit['total_output_tokens']:,} out · "
            f"fallbacks: {audit['fallbacks']}"
        )


def _render_prompt_settings() -> None:
    session = _session()
    registry = session.prompts
    with st.expander("Prompt settings", expanded=False):
        entries = registry.list_entries()
        labels = {e.key: e.display_name for e in entries}
        key = st.selectbox(
            "Prompt",
            options=list(labels),
            format_func=labels.get,
            key="prompt_select",
        )
        entry = registry.get_entry(key)
        st.caption(entry.description)
        text = st.text_area("Template", value=entry.content, height=240, key=f"prompt_text_{key}")
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Save", key="btn_prompt_save", use_container_width=True):
                try:
                    registry.set(key, text)
                    st.success("Prompt saved")
                except ValueError as exc:
                    st.error(str(exc))
        with c2:
            if st.button("Reset", key="btn_prompt_reset", use_container_width=True):
                registry.reset(key)
                st.session_state.pop(f"prompt_text_{key}", None)
                st.rerun()
        customised = registry.get_customized_keys()
        if customised:
            st.caption(f"Customised: {', '.join(customised)}")


# ===================================================================
# Generation
# ===================================================================

def _run_generation() -> None:
    session = _session()
    progress = st.progress(0, text="Preparing...")
    live = st.empty()

    def on_step(step: AgentStep) -> None:
        done = step.index + (0 if step.status == "running" else 1)
        progress.progress(int(done / step.total * 100), text=step.progress_text)

    def on_section(partial: Roadmap) -> None:
        with live.container():
            _render_roadmap(partial)

    try:
        result = session.generate(on_step=on_step, on_section=on_section)
    except Exception as exc:  # noqa: BLE001
        progress.empty()
        st.error(f"Generation failed: {exc}\n\n{GENERATION_TIP}")
        with st.expander("Error details"):
            st.code(traceback.format_exc())
        return

    progress.empty()
    live.empty()
    if result is None:
        st.warning("Enter a business idea first.")
        return
    if result.warnings:
        st.session_state["error_message"] = "\n\n".join(result.warnings)
    else:
        st.session_state["error_message"] = ""
    st.rerun()


# ===================================================================
# Chat
# ===================================================================

def _render_chat() -> None:
    session = _session()
    st.subheader("Refine with chat")
    st.caption("Mention a section (research, revenue, risks, ...) to target it; executive is the default.")

    for msg in session.chat_messages:
        with st.chat_message(msg.role):
            st.markdown(msg.content)

    proposal = session.proposal
    if proposal is not None:
        with st.container(border=True):
            st.markdown(f"**Proposed {proposal.step} section**")
            st.markdown(proposal.content.html, unsafe_allow_html=True)
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Apply", type="primary", use_container_width=True, key="btn_apply"):
                    session.apply_revision()
                    st.rerun()
            with c2:
                if st.button("Keep Original", use_container_width=True, key="btn_keep"):
                    session.reject_revision()
                    st.rerun()

    message = st.chat_input(CHAT_EXAMPLES[0], disabled=session.chat_loading)
    if message:
        with st.spinner("Rewriting section..."):
            session.chat(message)
        st.rerun()


# ===================================================================
# Main application
# ===================================================================

def main() -> None:
    """Entry point for the Streamlit roadmap generator."""

    st.set_page_config(
        page_title="Business Roadmap Generator",
        page_icon="🗺️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    _init_session_state()
    session = _session()

    with st.sidebar:
        _render_sidebar()

    st.header("Business Roadmap Generator")
    idea = st.text_area(
        "Business idea",
        placeholder=IDEA_PLACEHOLDER,
        height=100,
        key="idea_input",
    )
    session.idea = idea

    c1, c2 = st.columns([3, 1])
    with c1:
        if st.button(
            "Generate Roadmap",
            type="primary",
            disabled=session.loading or not idea.strip(),
            use_container_width=True,
            key="btn_generate",
        ):
            _run_generation()
    with c2:
        if session.roadmap:
            st.download_button(
                "Download",
                data=session.export_text(),
                file_name=session.export_filename(),
                mime="text/plain",
                use_container_width=True,
                key="btn_download",
            )

    if st.session_state["error_message"]:
        st.error(st.session_state["error_message"])

    if not session.roadmap:
        st.info("Describe your idea and press Generate to draft all seven sections.")
        return

    tab_plan, tab_chat = st.tabs(["Roadmap", "Chat"])
    with tab_plan:
        _render_roadmap(session.roadmap)
    with tab_chat:
        _render_chat()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
