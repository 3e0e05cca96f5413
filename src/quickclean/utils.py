"""Shared utility functions."""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def has_command(name: str) -> bool:
    """Check if a command exists on the system."""
    return shutil.which(name) is not None


def xdg_cache_home(home: Path | None = None) -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", (home or Path.home()) / ".cache"))


def xdg_config_home(home: Path | None = None) -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", (home or Path.home()) / ".config"))


def xdg_data_home(home: Path | None = None) -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", (home or Path.home()) / ".local" / "share"))


def xdg_state_home(home: Path | None = None) -> Path:
    """Return XDG_STATE_HOME, defaulting to ~/.local/state."""
    return Path(os.environ.get("XDG_STATE_HOME", (home or Path.home()) / ".local" / "state"))


def mib(megabytes: int | float) -> int:
    """Convert a size in MiB to bytes."""
    return int(megabytes * 1024 * 1024)


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"
