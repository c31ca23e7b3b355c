"""Which backends and models the roadmap generator can draft with.

``MODEL_CATALOG`` drives the model picker in the sidebar and the ``models``
CLI command; ``get_provider`` builds the matching :class:`LLMProvider`.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import LLMProvider

# ---------------------------------------------------------------------------
# Model catalog (one "standard" tier model per provider is its default)
# ---------------------------------------------------------------------------

MODEL_CATALOG: List[Dict[str, Any]] = [
    # --- Anthropic Claude ---
    {
        "provider": "anthropic",
        "provider_label": "Claude",
        "model_id": "claude-sonnet-4-5-20250929",
        "label": "Claude Sonnet 4.5",
        "tier": "standard",
        "web_search": True,
        "description": "Balanced speed and depth; supports live web search",
    },
    {
        "provider": "anthropic",
        "provider_label": "Claude",
        "model_id": "claude-haiku-4-5-20251001",
        "label": "Claude Haiku 4.5",
        "tier": "fast",
        "web_search": True,
        "description": "Fast and cheap; good for quick drafts",
    },
    # --- OpenAI GPT ---
    {
        "provider": "openai",
        "provider_label": "ChatGPT",
        "model_id": "gpt-4o",
        "label": "GPT-4o",
        "tier": "standard",
        "web_search": False,
        "description": "General-purpose model",
    },
    {
        "provider": "openai",
        "provider_label": "ChatGPT",
        "model_id": "gpt-4o-mini",
        "label": "GPT-4o mini",
        "tier": "fast",
        "web_search": False,
        "description": "Fast, low-cost variant",
    },
    # --- Google Gemini ---
    {
        "provider": "google",
        "provider_label": "Gemini",
        "model_id": "gemini-2.0-flash",
        "label": "Gemini 2.0 Flash",
        "tier": "fast",
        "web_search": False,
        "description": "Fast and cost-efficient",
    },
    {
        "provider": "google",
        "provider_label": "Gemini",
        "model_id": "gemini-1.5-pro",
        "label": "Gemini 1.5 Pro",
        "tier": "standard",
        "web_search": False,
        "description": "Long-context general model",
    },
]

API_KEY_ENV_VARS: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "google": "GOOGLE_API_KEY",
}


def get_model_catalog() -> List[Dict[str, Any]]:
    return MODEL_CATALOG


def get_providers() -> List[Dict[str, str]]:
    """Providers in catalog order, as ``{"id", "label"}`` dicts."""
    labels: Dict[str, str] = {}
    for entry in MODEL_CATALOG:
        labels.setdefault(entry["provider"], entry["provider_label"])
    return [{"id": pid, "label": label} for pid, label in labels.items()]


def get_models_for_provider(provider: str) -> List[Dict[str, Any]]:
    return [entry for entry in MODEL_CATALOG if entry["provider"] == provider]


def get_default_model_for_provider(provider: str) -> Optional[str]:
    """The provider's standard-tier model, else its first model, else None."""
    models = get_models_for_provider(provider)
    standard = [entry for entry in models if entry["tier"] == "standard"]
    chosen = (standard or models or [None])[0]
    return chosen["model_id"] if chosen else None


def validate_provider_model(provider: str, model_id: str) -> bool:
    return any(entry["model_id"] == model_id for entry in get_models_for_provider(provider))


def supports_web_search(provider: str, model_id: str) -> bool:
    """Whether deep research mode can attach live web search for this model."""
    return any(
        entry["model_id"] == model_id and entry["web_search"]
        for entry in get_models_for_provider(provider)
    )


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------

def get_provider(
    provider_name: str,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
) -> LLMProvider:
    """Build the section-drafting backend for a provider name.

    Parameters
    ----------
    provider_name :
        ``anthropic``, ``openai`` or ``google``.
    model :
        Model ID used for every call; the provider's own default otherwise.
    api_key :
        Explicit key; each provider otherwise reads its environment variable.

    Raises
    ------
    ValueError
        For a provider outside the catalog.
    """
    kwargs: Dict[str, Any] = {}
    if model:
        kwargs["default_model"] = model
    if api_key:
        kwargs["api_key"] = api_key

    if provider_name == "anthropic":
        from .anthropic_provider import AnthropicProvider
        return AnthropicProvider(**kwargs)
    if provider_name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(**kwargs)
    if provider_name == "google":
        from .google_provider import GoogleProvider
        return GoogleProvider(**kwargs)
    known = ", ".join(p["id"] for p in get_providers())
    raise ValueError(f"Unknown LLM provider: {provider_name!r} (known: {known})")
