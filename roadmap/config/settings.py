"""Environment and file-based settings.

API keys are read from the environment (``ANTHROPIC_API_KEY`` and friends;
``ROADMAP_API_KEY`` is accepted as an alias for the Anthropic key). The CLI
can additionally load a YAML or JSON config file whose keys mirror
:class:`GeneratorConfig`.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.providers.registry import (
    API_KEY_ENV_VARS,
    get_default_model_for_provider,
    validate_provider_model,
)

from .models import GeneratorConfig

logger = logging.getLogger(__name__)

KEY_ALIASES: Dict[str, tuple] = {
    "anthropic": ("ANTHROPIC_API_KEY", "ROADMAP_API_KEY"),
}


def get_api_key(provider: str = "anthropic") -> str:
    """Return the configured API key for a provider, or '' when none is set."""
    names = KEY_ALIASES.get(provider) or (API_KEY_ENV_VARS.get(provider, ""),)
    for name in names:
        value = os.environ.get(name, "").strip() if name else ""
        if value:
            return value
    return ""


def has_api_key(provider: str = "anthropic") -> bool:
    return bool(get_api_key(provider))


def load_config_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file."""
    if config_path is None:
        return {}
    path = Path(config_path)
    with open(path, encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return data


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if os.environ.get("ROADMAP_PROVIDER"):
        overrides["provider"] = os.environ["ROADMAP_PROVIDER"]
    if os.environ.get("ROADMAP_MODEL"):
        overrides["model"] = os.environ["ROADMAP_MODEL"]
    if os.environ.get("ROADMAP_STEP_DELAY"):
        overrides["step_delay_seconds"] = float(os.environ["ROADMAP_STEP_DELAY"])
    return overrides


def build_config(
    config_path: Optional[str] = None,
    **overrides: Any,
) -> GeneratorConfig:
    """Merge defaults, config file, environment and explicit overrides (last wins).

    ``mock_mode`` defaults to True when no API key is configured for the
    chosen provider.
    """
    data: Dict[str, Any] = {}
    data.update(load_config_file(config_path))
    data.update(_env_overrides())
    data.update({k: v for k, v in overrides.items() if v is not None})

    provider = data.get("provider", "anthropic")
    if "model" not in data:
        data["model"] = get_default_model_for_provider(provider) or GeneratorConfig().model
    elif not validate_provider_model(provider, data["model"]):
        logger.warning("Model %s is not in the %s catalog; using it as-is", data["model"], provider)
    if "mock_mode" not in data:
        data["mock_mode"] = not has_api_key(provider)
        if data["mock_mode"]:
            logger.info("No API key for %s; starting in demo mode", provider)
    return GeneratorConfig(**data)
