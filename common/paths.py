"""Centralized path management for Live Flight Map.

Writable data (logs, preferences) goes to a per-user data directory rather
than the script directory.

On Windows: %LOCALAPPDATA%/LiveFlightMap/
On macOS:   ~/Library/Application Support/LiveFlightMap/
On Linux:   ~/.local/share/LiveFlightMap/

Read-only data (e.g., data/airports.json) remains in the project directory.
"""

import os
import sys
from pathlib import Path

# Application name for user data directory
APP_NAME = "LiveFlightMap"

# Project root directory (where main.py lives) - for read-only data
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()


def get_data_dir() -> Path:
    """Get the project's data directory.

    This is where the bundled airport registry lives.
    """
    return _PROJECT_ROOT / "data"


def get_static_airports_file() -> Path:
    """Get the path to the bundled static airport registry."""
    return get_data_dir() / "airports.json"


def get_user_data_dir() -> Path:
    """Get the user data directory for writable files.

    Returns:
        Path to the user data directory
    """
    if sys.platform == "win32":
        # Windows: %LOCALAPPDATA%/LiveFlightMap
        base = os.environ.get("LOCALAPPDATA")
        if not base:
            base = os.path.expanduser("~\\AppData\\Local")
        path = Path(base) / APP_NAME
    elif sys.platform == "darwin":
        path = Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        xdg_data = os.environ.get("XDG_DATA_HOME")
        if xdg_data:
            path = Path(xdg_data) / APP_NAME
        else:
            path = Path.home() / ".local" / "share" / APP_NAME

    return path


def get_user_logs_dir() -> Path:
    """Get the user logs directory."""
    return get_user_data_dir() / "logs"


def get_preferences_file() -> Path:
    """Get the path to the user's preferences file.

    Returns:
        Path to preferences.json in user data directory
    """
    return get_user_data_dir() / "preferences.json"


def ensure_user_directories() -> None:
    """Create all required user data directories if they don't exist.

    Call this at application startup to ensure directories are ready.
    """
    for directory in (get_user_data_dir(), get_user_logs_dir()):
        directory.mkdir(parents=True, exist_ok=True)
