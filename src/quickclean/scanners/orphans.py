"""Scanner for leftovers of applications that are no longer installed."""

from __future__ import annotations

import configparser
import logging
import os
import plistlib
import re
import string
from pathlib import Path

from quickclean.core import fileops
from quickclean.models.entries import OrphanFile, OrphanType
from quickclean.models.scanner import Scanner, serialized

log = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"[0-9._-]+")
_DOMAIN_PREFIXES = ("com.", "org.", "net.")


def normalize_name(name: str) -> str:
    """Reduce a leftover folder name to something comparable with app names.

    ``com.tinyspeck.slackmacgap`` becomes ``slackmacgap``; version numbers
    and separators are dropped.
    """
    normalized = name.lower()
    if normalized.startswith("com."):
        normalized = normalized.split(".")[-1]
    normalized = _VERSION_RE.sub("", normalized)
    return normalized.strip()


def guess_app_name(name: str) -> str:
    """Best-effort readable application name for a leftover item."""
    app_name = name
    if name.startswith(_DOMAIN_PREFIXES):
        parts = name.split(".")
        app_name = " ".join(parts[2:]) if len(parts) >= 3 else parts[-1]
    return string.capwords(app_name)


def matches_installed(normalized: str, installed: set[str]) -> bool:
    """Bidirectional substring match against installed application names."""
    return any(normalized in app or app in normalized for app in installed)


def _bundle_identifier(bundle: Path) -> str | None:
    """Read the reverse-domain identifier from an application's manifest."""
    if bundle.suffix == ".desktop":
        stem = bundle.stem
        return stem if stem.count(".") >= 2 else None
    try:
        with open(bundle / "Contents" / "Info.plist", "rb") as f:
            info = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError):
        return None
    ident = info.get("CFBundleIdentifier") if isinstance(info, dict) else None
    return ident if isinstance(ident, str) else None


def _desktop_entry_name(path: Path) -> str | None:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError):
        return None
    return parser.get("Desktop Entry", "Name", fallback=None)


class OrphanScanner(Scanner[OrphanFile]):
    """Matches support, preference, cache and log folders against installed apps.

    Matching is deliberately permissive: anything resembling an installed
    application's name is kept, at the cost of missing some real orphans.
    """

    id = "orphans"
    name = "Leftover Files"
    description = "Support files left behind by uninstalled applications"

    def installed_app_names(self) -> set[str]:
        """Lower-cased names and identifier tails of installed applications."""
        suffix = self.layout.app_bundle_suffix
        names: set[str] = set()
        for apps_dir in self.layout.app_install_dirs:
            try:
                with os.scandir(apps_dir) as it:
                    bundles = [Path(e.path) for e in it if e.name.endswith(suffix) and not fileops.is_hidden(e.name)]
            except OSError:
                log.debug("Cannot read application directory: %s", apps_dir)
                continue

            for bundle in bundles:
                names.add(bundle.name[: -len(suffix)].lower())
                if suffix == ".desktop" and (display := _desktop_entry_name(bundle)):
                    names.add(display.lower())
                if ident := _bundle_identifier(bundle):
                    names.add(ident.split(".")[-1].lower())
        names.discard("")
        log.debug("Found %d installed application names", len(names))
        return names

    def is_system_item(self, name: str) -> bool:
        lower = name.lower()
        if any(lower.startswith(prefix.lower()) for prefix in self.layout.system_prefixes):
            return True
        return any(sys_name in name for sys_name in self.layout.system_names)

    def is_orphan(self, name: str, installed: set[str]) -> bool:
        if self.is_system_item(name):
            return False
        return not matches_installed(normalize_name(name), installed)

    @serialized
    def scan(self) -> list[OrphanFile]:
        installed = self.installed_app_names()
        orphans: list[OrphanFile] = []

        for location, orphan_type in self.layout.leftover_locations:
            orphans.extend(self._scan_location(location, orphan_type, installed))

        # A location may be listed twice on some layouts (e.g. caches).
        unique = list({o.path: o for o in orphans}.values())
        unique.sort(key=lambda o: o.size, reverse=True)
        log.info("Found %d leftover items totaling %d bytes", len(unique), sum(o.size for o in unique))
        return self._store(unique)

    def scan_default(self) -> list[OrphanFile]:
        return self.scan()

    def _scan_location(self, location: Path, orphan_type: OrphanType, installed: set[str]) -> list[OrphanFile]:
        try:
            with os.scandir(location) as it:
                names = sorted(e.name for e in it if not fileops.is_hidden(e.name))
        except OSError:
            log.debug("Cannot read leftover location: %s", location)
            return []

        return [
            OrphanFile(
                path=location / name,
                name=name,
                size=fileops.allocated_size(location / name),
                orphan_type=orphan_type,
                possible_app_name=guess_app_name(name),
            )
            for name in names
            if self.is_orphan(name, installed)
        ]
