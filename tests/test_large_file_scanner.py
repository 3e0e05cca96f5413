"""Tests for the large file scanner."""

from __future__ import annotations

import pytest

from quickclean.layout import Layout
from quickclean.models.entries import FileCategory
from quickclean.scanners.large_files import LargeFileScanner, find_large_files
from quickclean.utils import mib


def _sized(path, size):
    """Create a sparse file of *size* bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path


@pytest.fixture
def downloads(mac_layout):
    d = mac_layout.home / "Downloads"
    _sized(d / "movie.MKV", mib(700))
    _sized(d / "backup.zip", mib(250))
    _sized(d / "notes.txt", mib(1))
    _sized(d / "nested" / "disk.iso", mib(150))
    _sized(d / ".hidden.mp4", mib(900))
    _sized(d / "Tool.app" / "Contents" / "blob.bin", mib(500))
    _sized(d / "README", mib(120))
    return d


class TestFindLargeFiles:
    def test_threshold_and_order(self, downloads):
        files = find_large_files(downloads, mib(100))
        assert [f.name for f in files] == ["movie.MKV", "backup.zip", "disk.iso", "README"]
        assert [f.size for f in files] == [mib(700), mib(250), mib(150), mib(120)]

    def test_threshold_is_inclusive(self, tmp_path):
        _sized(tmp_path / "exact.bin", mib(5))
        _sized(tmp_path / "under.bin", mib(5) - 1)
        assert [f.name for f in find_large_files(tmp_path, mib(5))] == ["exact.bin"]

    def test_categories(self, downloads):
        by_name = {f.name: f for f in find_large_files(downloads, mib(100))}
        assert by_name["movie.MKV"].category is FileCategory.VIDEO
        assert by_name["movie.MKV"].extension == "MKV"
        assert by_name["backup.zip"].category is FileCategory.ARCHIVE
        assert by_name["disk.iso"].category is FileCategory.DISK_IMAGE
        assert by_name["README"].category is FileCategory.OTHER
        assert by_name["README"].extension == ""
        assert by_name["README"].last_modified is not None

    def test_category_filter(self, downloads):
        files = find_large_files(downloads, mib(100), [FileCategory.VIDEO, FileCategory.DISK_IMAGE])
        assert [f.name for f in files] == ["movie.MKV", "disk.iso"]

    def test_empty_category_filter_matches_nothing(self, downloads):
        assert find_large_files(downloads, mib(100), []) == []

    def test_hidden_and_packages_skipped(self, downloads):
        names = {f.name for f in find_large_files(downloads, 0)}
        assert ".hidden.mp4" not in names
        assert "blob.bin" not in names

    def test_missing_directory(self, tmp_path):
        assert find_large_files(tmp_path / "nope", 0) == []


class TestLargeFileScanner:
    def test_default_threshold(self, downloads, mac_layout):
        scanner = LargeFileScanner(mac_layout)
        assert scanner.min_size == mib(100)
        assert len(scanner.scan(downloads)) == 4

    def test_configured_threshold(self, downloads, mac_layout):
        scanner = LargeFileScanner(mac_layout, min_size=mib(200))
        assert [f.name for f in scanner.scan(downloads)] == ["movie.MKV", "backup.zip"]

    def test_scan_common_merges_directories(self, downloads, mac_layout):
        _sized(mac_layout.home / "Movies" / "trip.mov", mib(300))
        _sized(mac_layout.home / "Library" / "big.bin", mib(300))
        scanner = LargeFileScanner(mac_layout)
        files = scanner.scan_common()
        assert [f.name for f in files] == ["movie.MKV", "trip.mov", "backup.zip", "disk.iso", "README"]
        assert scanner.total_size() == sum(f.size for f in files)
        assert scanner.scan_default() == files

    def test_scan_common_with_xdg_user_dirs(self, home, system_root):
        config = home / ".config"
        config.mkdir()
        (config / "user-dirs.dirs").write_text('XDG_DOWNLOAD_DIR="$HOME/Telechargements"\n')
        _sized(home / "Telechargements" / "big.tar", mib(120))
        layout = Layout.linux(home=home, root=system_root)
        files = LargeFileScanner(layout).scan_common()
        assert [f.name for f in files] == ["big.tar"]

    def test_delete_forgets_entry(self, downloads, mac_layout, fake_trash):
        scanner = LargeFileScanner(mac_layout)
        scanner.scan(downloads)
        target = downloads / "backup.zip"
        assert scanner.delete(target) == mib(250)
        assert fake_trash == [target]
        assert target not in {f.path for f in scanner.results}

    def test_delete_permanently(self, downloads, mac_layout, fake_trash):
        scanner = LargeFileScanner(mac_layout, use_trash=False)
        scanner.scan(downloads)
        target = downloads / "movie.MKV"
        scanner.delete(target)
        assert not target.exists()
        assert fake_trash == []
