"""Persistent JSON settings and blame-decoration mode resolution.

Settings are a flat mapping keyed like ``git.blame.decorations``. Reads and
writes are defensive: malformed or missing files fall back to an empty mapping
and write errors are ignored.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path

from loguru import logger
from platformdirs import user_config_dir

APP_NAME = "lazyblame"
CONFIG_FILENAME = "settings.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DECORATIONS_KEY = "git.blame.decorations"
LINE_DECORATIONS_KEY = "git.blame.lineDecorations"
DECORATE_WHOLE_FILE_KEY = "git.blame.decorateWholeFile"

MODE_NONE = "none"
MODE_LINE = "line"
MODE_FILE = "file"
DECORATION_MODES = (MODE_NONE, MODE_LINE, MODE_FILE)
DEFAULT_MODE = MODE_LINE


def load_config() -> dict[str, object]:
    """Load the persisted settings object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist settings as pretty-printed JSON, ignoring filesystem errors."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def update_setting(key: str, value: object) -> None:
    """Persist a single settings key."""
    config = load_config()
    config[key] = value
    save_config(config)


def _mode_from_deprecated(settings: Mapping[str, object]) -> str:
    line_decorations = settings.get(LINE_DECORATIONS_KEY)
    if line_decorations is False:
        return MODE_NONE
    if line_decorations is True:
        return MODE_FILE if settings.get(DECORATE_WHOLE_FILE_KEY) is True else MODE_LINE
    return DEFAULT_MODE


def resolve_decorations_mode(settings: Mapping[str, object]) -> str:
    """Return ``none``, ``line`` or ``file`` for a settings snapshot.

    A valid ``git.blame.decorations`` wins. Otherwise the deprecated boolean
    keys decide, and with nothing set the mode is ``line``.
    """
    value = settings.get(DECORATIONS_KEY)
    if isinstance(value, str) and value in DECORATION_MODES:
        return value
    return _mode_from_deprecated(settings)


def migrate_decorations_setting(
    settings: Mapping[str, object],
    update: Callable[[str, str], object],
) -> str | None:
    """Write ``git.blame.decorations`` derived from the deprecated keys.

    Does nothing when the key is already set. Failures of ``update`` are
    logged and swallowed. Returns the mode written, or ``None``.
    """
    if settings.get(DECORATIONS_KEY):
        return None
    mode = _mode_from_deprecated(settings)
    try:
        update(DECORATIONS_KEY, mode)
    except Exception as exc:
        logger.debug(f"Skipping decorations setting migration: {exc}")
        return None
    return mode
