from __future__ import annotations

import os
from pathlib import Path


def durable_root() -> Path:
    raw = os.getenv("GATHERER_DURABLE_ROOT", "").strip()
    return Path(raw) if raw else (Path.cwd() / ".gatherer" / "durable")


def resolve_user_settings_path(path: Path | None = None) -> Path:
    if path is not None:
        return path
    target = durable_root() / "config" / "user_settings.json"
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def resolve_log_root(path: str | Path | None = None) -> Path:
    if path:
        return Path(path)
    target = durable_root() / "logs"
    target.mkdir(parents=True, exist_ok=True)
    return target


def resolve_output_dir(path: str | Path | None = None) -> Path:
    if path:
        return Path(path)
    return Path.home() / "Downloads"
