"""
User preferences persisted between runs.

The only persisted state is whether the onboarding notice has been seen.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from common import logger as debug_logger
from common.paths import get_preferences_file

ONBOARDING_SEEN_KEY = "has_seen_onboarding_notice"


def _load_preferences(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        debug_logger.warning(f"Ignoring unreadable preferences file {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def has_seen_onboarding(path: Optional[Path] = None) -> bool:
    """Check whether the onboarding notice was already shown."""
    prefs = _load_preferences(path or get_preferences_file())
    return bool(prefs.get(ONBOARDING_SEEN_KEY, False))


def mark_onboarding_seen(path: Optional[Path] = None) -> None:
    """Record that the onboarding notice was shown."""
    path = path or get_preferences_file()
    prefs = _load_preferences(path)
    prefs[ONBOARDING_SEEN_KEY] = True
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(prefs, f, indent=2)
    except OSError as e:
        debug_logger.error(f"Failed to save preferences to {path}: {e}")
