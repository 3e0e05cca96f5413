"""Well-known filesystem locations per platform.

Scanners never hard-code paths; they read them from a :class:`Layout`.
``Layout.current()`` returns the layout for the running system, and tests
build one rooted in a temporary directory.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from pathlib import Path

from quickclean.models.entries import DeveloperCacheLocation, OrphanType
from quickclean.utils import xdg_cache_home, xdg_config_home, xdg_data_home, xdg_state_home

_MACOS_DEVELOPER_CATALOG = (
    DeveloperCacheLocation("npm Cache", ".npm", "Node.js package manager cache"),
    DeveloperCacheLocation("Yarn Cache", ".yarn/cache", "Yarn package manager cache"),
    DeveloperCacheLocation("pnpm Store", ".pnpm-store", "pnpm package manager store"),
    DeveloperCacheLocation("Cargo Cache", ".cargo/registry/cache", "Rust package registry cache"),
    DeveloperCacheLocation("CocoaPods Cache", "Library/Caches/CocoaPods", "iOS dependency manager cache"),
    DeveloperCacheLocation(
        "Xcode DerivedData", "Library/Developer/Xcode/DerivedData", "Xcode build artifacts (safe to clean)"
    ),
    DeveloperCacheLocation("Xcode Archives", "Library/Developer/Xcode/Archives", "Xcode archived builds", False),
    DeveloperCacheLocation("Gradle Cache", ".gradle/caches", "Android/Java build cache"),
    DeveloperCacheLocation(
        "Maven Repository", ".m2/repository", "Maven dependencies (partial clean recommended)", False
    ),
    DeveloperCacheLocation("Homebrew Cache", "Library/Caches/Homebrew", "Homebrew package downloads"),
    DeveloperCacheLocation("pip Cache", "Library/Caches/pip", "Python package cache"),
    DeveloperCacheLocation("VS Code Cache", "Library/Application Support/Code/Cache", "Visual Studio Code cache"),
    DeveloperCacheLocation("Android SDK Cache", "Library/Android/sdk/.temp", "Android SDK temporary files"),
    DeveloperCacheLocation("Composer Cache", ".composer/cache", "PHP Composer package cache"),
    DeveloperCacheLocation("Go Modules Cache", "go/pkg/mod/cache", "Go modules cache"),
)

_LINUX_DEVELOPER_CATALOG = (
    DeveloperCacheLocation("npm Cache", ".npm", "Node.js package manager cache"),
    DeveloperCacheLocation("Yarn Cache", ".cache/yarn", "Yarn package manager cache"),
    DeveloperCacheLocation("pnpm Store", ".local/share/pnpm/store", "pnpm package manager store"),
    DeveloperCacheLocation("Cargo Cache", ".cargo/registry/cache", "Rust package registry cache"),
    DeveloperCacheLocation("Gradle Cache", ".gradle/caches", "Android/Java build cache"),
    DeveloperCacheLocation(
        "Maven Repository", ".m2/repository", "Maven dependencies (partial clean recommended)", False
    ),
    DeveloperCacheLocation("pip Cache", ".cache/pip", "Python package cache"),
    DeveloperCacheLocation("uv Cache", ".cache/uv", "uv package cache"),
    DeveloperCacheLocation("Poetry Cache", ".cache/pypoetry", "Poetry package cache"),
    DeveloperCacheLocation("VS Code Cache", ".config/Code/Cache", "Visual Studio Code cache"),
    DeveloperCacheLocation("JetBrains Cache", ".cache/JetBrains", "JetBrains IDE caches and indexes"),
    DeveloperCacheLocation("Android SDK Cache", "Android/Sdk/.temp", "Android SDK temporary files"),
    DeveloperCacheLocation("Composer Cache", ".cache/composer", "PHP Composer package cache"),
    DeveloperCacheLocation("Go Modules Cache", "go/pkg/mod/cache", "Go modules cache"),
    DeveloperCacheLocation("Go Build Cache", ".cache/go-build", "Go compiler build cache"),
)

_DOCKER_HINT = "Docker Desktop data (use 'docker system prune' to clean)"

# Prefixes and folder names that belong to the OS or its vendor, never orphans.
_MACOS_SYSTEM_PREFIXES = ("com.apple.", "Apple", ".", "System")
_MACOS_SYSTEM_NAMES = ("CloudDocs", "Mobile Documents", "Ubiquity", "CoreData", "GameKit")
_LINUX_SYSTEM_PREFIXES = (
    ".",
    "System",
    "org.freedesktop.",
    "org.gnome.",
    "org.kde.",
    "gnome",
    "gtk-",
    "kde",
    "xdg-",
)
_LINUX_SYSTEM_NAMES = (
    "applications",
    "autostart",
    "dconf",
    "flatpak",
    "fontconfig",
    "fonts",
    "icons",
    "keyrings",
    "mime",
    "pulse",
    "recently-used",
    "systemd",
    "themes",
    "Trash",
    "user-dirs",
)

_USER_DIRS_RE = r'^XDG_{key}_DIR="(.+)"'


def _xdg_user_dir(home: Path, key: str, fallback: str) -> Path:
    """Resolve an XDG user directory such as ``DOWNLOAD`` from user-dirs.dirs."""
    dirs_file = xdg_config_home(home) / "user-dirs.dirs"
    if dirs_file.is_file():
        try:
            match = re.search(_USER_DIRS_RE.format(key=key), dirs_file.read_text(), re.MULTILINE)
        except OSError:
            match = None
        if match:
            return Path(match.group(1).replace("$HOME", str(home)))
    return home / fallback


@dataclass(frozen=True)
class Layout:
    """Every path the scanners look at."""

    home: Path
    user_cache_root: Path
    system_cache_root: Path
    app_install_dirs: tuple[Path, ...]
    app_bundle_suffix: str
    leftover_locations: tuple[tuple[Path, OrphanType], ...]
    system_prefixes: tuple[str, ...]
    system_names: tuple[str, ...]
    developer_catalog: tuple[DeveloperCacheLocation, ...]
    guarded_location: DeveloperCacheLocation
    developer_indicators: tuple[Path, ...]
    large_file_dirs: tuple[Path, ...]
    duplicate_dirs: tuple[Path, ...]

    @property
    def guarded_path(self) -> Path:
        return self.guarded_location.resolve(self.home)

    @classmethod
    def current(cls) -> Layout:
        if sys.platform == "darwin":
            return cls.macos()
        return cls.linux()

    @classmethod
    def macos(cls, home: Path | None = None, root: Path = Path("/")) -> Layout:
        """macOS layout; *root* replaces ``/`` for system-wide locations."""
        home = home or Path.home()
        library = home / "Library"
        return cls(
            home=home,
            user_cache_root=library / "Caches",
            system_cache_root=root / "Library" / "Caches",
            app_install_dirs=(root / "Applications", home / "Applications"),
            app_bundle_suffix=".app",
            leftover_locations=(
                (library / "Application Support", OrphanType.APP_SUPPORT),
                (library / "Preferences", OrphanType.PREFERENCES),
                (library / "Containers", OrphanType.CONTAINERS),
                (library / "Caches", OrphanType.CACHES),
                (library / "Logs", OrphanType.LOGS),
            ),
            system_prefixes=_MACOS_SYSTEM_PREFIXES,
            system_names=_MACOS_SYSTEM_NAMES,
            developer_catalog=_MACOS_DEVELOPER_CATALOG,
            guarded_location=DeveloperCacheLocation(
                "Docker Desktop", "Library/Containers/com.docker.docker/Data", _DOCKER_HINT, False
            ),
            developer_indicators=(
                home / ".npm",
                home / ".cargo",
                home / ".gradle",
                library / "Developer" / "Xcode",
                home / ".git",
                root / "Applications" / "Xcode.app",
                root / "Applications" / "Visual Studio Code.app",
            ),
            large_file_dirs=tuple(home / d for d in ("Downloads", "Documents", "Desktop", "Movies", "Music", "Pictures")),
            duplicate_dirs=tuple(home / d for d in ("Downloads", "Documents", "Desktop", "Pictures")),
        )

    @classmethod
    def linux(cls, home: Path | None = None, root: Path = Path("/")) -> Layout:
        """Linux layout following the XDG base directory spec."""
        home = home or Path.home()
        data_home = xdg_data_home(home)
        downloads = _xdg_user_dir(home, "DOWNLOAD", "Downloads")
        documents = _xdg_user_dir(home, "DOCUMENTS", "Documents")
        desktop = _xdg_user_dir(home, "DESKTOP", "Desktop")
        videos = _xdg_user_dir(home, "VIDEOS", "Videos")
        music = _xdg_user_dir(home, "MUSIC", "Music")
        pictures = _xdg_user_dir(home, "PICTURES", "Pictures")
        return cls(
            home=home,
            user_cache_root=xdg_cache_home(home),
            system_cache_root=root / "var" / "cache",
            app_install_dirs=(
                root / "usr" / "share" / "applications",
                root / "var" / "lib" / "flatpak" / "exports" / "share" / "applications",
                data_home / "applications",
                data_home / "flatpak" / "exports" / "share" / "applications",
            ),
            app_bundle_suffix=".desktop",
            leftover_locations=(
                (data_home, OrphanType.APP_SUPPORT),
                (xdg_config_home(home), OrphanType.PREFERENCES),
                (home / ".var" / "app", OrphanType.CONTAINERS),
                (xdg_cache_home(home), OrphanType.CACHES),
                (xdg_state_home(home), OrphanType.LOGS),
            ),
            system_prefixes=_LINUX_SYSTEM_PREFIXES,
            system_names=_LINUX_SYSTEM_NAMES,
            developer_catalog=_LINUX_DEVELOPER_CATALOG,
            guarded_location=DeveloperCacheLocation("Docker Desktop", ".docker/desktop", _DOCKER_HINT, False),
            developer_indicators=(
                home / ".npm",
                home / ".cargo",
                home / ".gradle",
                home / ".git",
                home / ".vscode",
                root / "usr" / "bin" / "code",
            ),
            large_file_dirs=(downloads, documents, desktop, videos, music, pictures),
            duplicate_dirs=(downloads, documents, desktop, pictures),
        )
