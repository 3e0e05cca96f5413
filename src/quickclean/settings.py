"""JSON-backed user settings."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from quickclean.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "quickclean"
_SETTINGS_FILE = "settings.json"

DEFAULTS: dict[str, Any] = {
    "large_files": {"min_size_mb": 100},
    "duplicates": {"min_size_mb": 1},
    "delete": {"use_trash": True},
}


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("large_files.min_size_mb")  # reads data["large_files"]["min_size_mb"]
        settings.set("delete.use_trash", False)  # writes + saves

    Keys missing from the file fall back to :data:`DEFAULTS`.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        for source in (self._data, DEFAULTS):
            node = _lookup(source, key)
            if node is not _MISSING:
                return copy.deepcopy(node)
        return default

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    @property
    def large_file_min_size_mb(self) -> float:
        return float(self.get("large_files.min_size_mb"))

    @property
    def duplicate_min_size_mb(self) -> float:
        return float(self.get("duplicates.min_size_mb"))

    @property
    def use_trash(self) -> bool:
        return bool(self.get("delete.use_trash"))

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            log.warning("Ignoring settings file %s: not a JSON object", self._path)

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)


_MISSING = object()


def _lookup(data: dict[str, Any], key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node
