# Overview: Theme preference stored in a JSON config file outside the database.

from __future__ import annotations

import json
from pathlib import Path

from flask import current_app

from ..errors import StorageError, ValidationError

THEMES = ("light", "dark", "system")
DEFAULT_THEME = "system"


def config_path() -> Path:
    path = Path(current_app.config["THEME_CONFIG_FILE"])
    if not path.is_absolute():
        path = Path(current_app.instance_path) / path
    return path


def get_theme() -> str:
    """Saved theme, or "system" when the file is missing or unreadable."""
    try:
        config = json.loads(config_path().read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return DEFAULT_THEME

    theme = config.get("theme") if isinstance(config, dict) else None
    return theme if isinstance(theme, str) else DEFAULT_THEME


def set_theme(theme: str) -> str:
    """
    Persist the theme, keeping any other keys already in the config file.

    Raises:
        ValidationError: unknown theme
        StorageError: the existing file cannot be parsed, or the write fails
    """
    if theme not in THEMES:
        raise ValidationError(f"theme must be one of: {', '.join(THEMES)}")

    path = config_path()
    config: dict = {}
    if path.exists():
        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError("Failed to read config", details={"detail": str(exc)}) from exc
        if not isinstance(config, dict):
            raise StorageError("Failed to parse config: expected a JSON object")

    config["theme"] = theme

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    except OSError as exc:
        raise StorageError("Failed to write config", details={"detail": str(exc)}) from exc

    current_app.logger.info("Theme preference set to %s", theme)
    return theme
