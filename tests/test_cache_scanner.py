"""Tests for the cache scanner."""

from __future__ import annotations

import pytest

from quickclean.core.errors import OperationNotAllowed
from quickclean.core.fileops import allocated_size
from quickclean.models.entries import CacheType
from quickclean.scanners.caches import CacheScanner, classify, is_developer_related, is_safe_to_delete


@pytest.fixture
def fake_caches(mac_layout, make_file):
    user = mac_layout.user_cache_root
    system = mac_layout.system_cache_root
    make_file(user / "com.google.Chrome" / "Cache" / "data_1", 300_000)
    make_file(user / "Homebrew" / "downloads" / "pkg.tar.gz", 100_000)
    make_file(user / "com.spotify.client" / "blob", 50_000)
    make_file(user / "com.apple.Safari" / "db", 20_000)
    make_file(user / ".DS_Store", 10)
    make_file(system / "com.apple.kernelcache", 40_000)
    make_file(system / "SomeDaemon" / "state", 10_000)
    return mac_layout


class TestClassification:
    @pytest.mark.parametrize(
        "name, is_system, expected",
        [
            ("com.google.Chrome", False, CacheType.BROWSER),
            ("org.mozilla.firefox", False, CacheType.BROWSER),
            ("com.apple.WebKit.Networking", True, CacheType.BROWSER),
            ("Homebrew", False, CacheType.DEVELOPER),
            ("pip", True, CacheType.DEVELOPER),
            ("com.spotify.client", False, CacheType.APPLICATION),
            ("com.spotify.client", True, CacheType.SYSTEM),
        ],
    )
    def test_classify(self, name, is_system, expected):
        assert classify(name, is_system=is_system) is expected

    def test_developer_related_is_wider_than_type(self):
        assert is_developer_related("org.swift.swiftpm")
        assert classify("org.swift.swiftpm", is_system=False) is CacheType.APPLICATION

    @pytest.mark.parametrize("name", ["com.apple.Safari", "SystemCache", "kernelcache", "APPLE"])
    def test_unsafe_names(self, name):
        assert not is_safe_to_delete(name)

    def test_safe_name(self):
        assert is_safe_to_delete("com.spotify.client")


class TestCacheScanner:
    def test_scan_lists_top_level_items(self, fake_caches):
        scanner = CacheScanner(fake_caches)
        entries = scanner.scan()

        names = [e.name for e in entries]
        assert sorted(names) == sorted([
            "com.google.Chrome",
            "Homebrew",
            "com.spotify.client",
            "com.apple.Safari",
            "com.apple.kernelcache",
            "SomeDaemon",
        ])
        assert ".DS_Store" not in names
        assert [e.size for e in entries] == sorted((e.size for e in entries), reverse=True)
        assert entries[0].name == "com.google.Chrome"

    def test_entry_fields(self, fake_caches):
        entries = {e.name: e for e in CacheScanner(fake_caches).scan()}

        chrome = entries["com.google.Chrome"]
        assert chrome.cache_type is CacheType.BROWSER
        assert chrome.size == allocated_size(chrome.path)
        assert chrome.description == "Browser cache and temporary files"

        brew = entries["Homebrew"]
        assert brew.cache_type is CacheType.DEVELOPER
        assert brew.is_developer_related

        assert entries["SomeDaemon"].cache_type is CacheType.SYSTEM
        assert not entries["com.apple.kernelcache"].is_safe_to_delete
        assert entries["com.spotify.client"].is_safe_to_delete

    def test_missing_roots_give_empty_result(self, mac_layout):
        assert CacheScanner(mac_layout).scan() == []

    def test_delete_moves_to_trash_and_forgets(self, fake_caches, fake_trash):
        scanner = CacheScanner(fake_caches)
        scanner.scan()
        target = fake_caches.user_cache_root / "com.spotify.client"

        freed = scanner.delete(target)

        assert freed > 0
        assert not target.exists()
        assert fake_trash == [target]
        assert target not in {e.path for e in scanner.results}

    def test_delete_twice_is_harmless(self, fake_caches):
        scanner = CacheScanner(fake_caches)
        scanner.scan()
        target = fake_caches.user_cache_root / "Homebrew"
        scanner.delete(target)
        assert scanner.delete(target) == 0

    def test_refuses_unsafe_cache(self, fake_caches):
        scanner = CacheScanner(fake_caches)
        scanner.scan()
        target = fake_caches.user_cache_root / "com.apple.Safari"
        with pytest.raises(OperationNotAllowed):
            scanner.delete(target)
        assert target.exists()

    def test_vanished_unsafe_cache_is_harmless(self, fake_caches, fake_trash):
        scanner = CacheScanner(fake_caches)
        scanner.scan()
        assert scanner.delete(fake_caches.user_cache_root / "com.apple.gone") == 0
        assert fake_trash == []

    def test_delete_many_collects_errors(self, fake_caches):
        scanner = CacheScanner(fake_caches)
        scanner.scan()
        ok = fake_caches.user_cache_root / "Homebrew"
        bad = fake_caches.user_cache_root / "com.apple.Safari"

        result = scanner.delete_many([ok, bad])

        assert result.files_removed == 1
        assert result.removed == [ok]
        assert len(result.errors) == 1
        assert not result.ok

    def test_total_size(self, fake_caches):
        scanner = CacheScanner(fake_caches)
        entries = scanner.scan()
        assert scanner.total_size() == sum(e.size for e in entries)
