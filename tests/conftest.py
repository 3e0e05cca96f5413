"""Shared test fixtures."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

import quickclean.core.fileops as fileops
from quickclean.layout import Layout

_XDG_VARS = ("XDG_CACHE_HOME", "XDG_CONFIG_HOME", "XDG_DATA_HOME", "XDG_STATE_HOME")


@pytest.fixture(autouse=True)
def fake_trash(tmp_path, monkeypatch):
    """Redirect trash moves to a temp directory instead of the real trash."""
    trash = tmp_path / "trash"
    trash.mkdir()
    moved: list[Path] = []

    def _send2trash(path: str) -> None:
        src = Path(path)
        target = trash / f"{len(moved)}-{src.name}"
        shutil.move(str(src), str(target))
        moved.append(src)

    monkeypatch.setattr(fileops, "send2trash", _send2trash)
    return moved


@pytest.fixture
def home(tmp_path, monkeypatch):
    """An empty home directory with XDG variables unset."""
    for var in _XDG_VARS:
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def system_root(tmp_path):
    """Stand-in for ``/`` used for system-wide locations."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def mac_layout(home, system_root):
    return Layout.macos(home=home, root=system_root)


@pytest.fixture
def linux_layout(home, system_root):
    return Layout.linux(home=home, root=system_root)


def write(path: Path, data: bytes | int = 1024) -> Path:
    """Create *path* (and parents) with *data*, or that many bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data if isinstance(data, bytes) else b"x" * data)
    return path


@pytest.fixture
def make_file():
    return write
