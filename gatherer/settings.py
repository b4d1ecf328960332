import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

from gatherer.runtime_paths import resolve_user_settings_path

_SETTINGS_FILE_OVERRIDE: Optional[Path] = None
_SETTINGS_CACHE: Optional[Dict[str, Any]] = None
_SETTINGS_CACHE_PATH: Optional[Path] = None


def settings_file() -> Path:
    return resolve_user_settings_path(_SETTINGS_FILE_OVERRIDE)


def set_settings_file(path: Optional[Path]):
    global _SETTINGS_FILE_OVERRIDE, _SETTINGS_CACHE
    _SETTINGS_FILE_OVERRIDE = path
    _SETTINGS_CACHE = None


def clear_settings_cache():
    global _SETTINGS_CACHE
    _SETTINGS_CACHE = None


def load_user_settings() -> Dict[str, Any]:
    """Loads settings from the durable config directory with caching."""
    global _SETTINGS_CACHE, _SETTINGS_CACHE_PATH
    path = settings_file()
    if _SETTINGS_CACHE is not None and _SETTINGS_CACHE_PATH == path:
        return _SETTINGS_CACHE

    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    if not isinstance(payload, dict):
        return {}
    _SETTINGS_CACHE = payload
    _SETTINGS_CACHE_PATH = path
    return _SETTINGS_CACHE


def save_user_settings(settings: Dict[str, Any]):
    """Saves settings and updates cache."""
    global _SETTINGS_CACHE, _SETTINGS_CACHE_PATH
    path = settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(settings, f, indent=4)
    _SETTINGS_CACHE = settings
    _SETTINGS_CACHE_PATH = path


def get_setting(key: str, default: Any = None) -> Any:
    # Check environment first (UPPERCASE)
    env_val = os.environ.get(key.upper())
    if env_val is not None:
        return env_val

    settings = load_user_settings()
    return settings.get(key, default)


def update_setting(key: str, value: Any):
    settings = load_user_settings().copy()
    settings[key] = value
    save_user_settings(settings)
