"""Local preference storage.

Only small UI preferences (currently the research mode) outlive a session.
They are kept as a JSON file under ``LOCAL_STATE_DIR``; roadmaps and
history are never written to disk.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

LOCAL_STATE_DIR = os.environ.get("LOCAL_STATE_DIR", "/tmp/roadmap_state")
PREFERENCES_FILE = "preferences.json"


def _preferences_path(state_dir: Optional[str] = None) -> Path:
    return Path(state_dir or LOCAL_STATE_DIR) / PREFERENCES_FILE


def load_preferences(state_dir: Optional[str] = None) -> Dict[str, Any]:
    """Return saved preferences, or an empty dict if none are stored."""
    path = _preferences_path(state_dir)
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable preferences file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring malformed preferences file %s", path)
        return {}
    return data


def get_preference(key: str, default: Any = None, state_dir: Optional[str] = None) -> Any:
    return load_preferences(state_dir).get(key, default)


def save_preference(key: str, value: Any, state_dir: Optional[str] = None) -> None:
    """Persist a single preference, keeping the others intact."""
    path = _preferences_path(state_dir)
    data = load_preferences(state_dir)
    data[key] = value
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug("Saved preference %s=%r to %s", key, value, path)
    except OSError as e:
        logger.warning("Could not save preference %s to %s: %s", key, path, e)
