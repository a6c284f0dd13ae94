"""Tests for directory scanning."""

import tempfile
from pathlib import Path

import pytest

from rtxconf.ingest.scanner import DirectoryScanner, looks_like_dump


class TestDirectoryScanner:
    def test_scan_nonexistent_directory(self):
        scanner = DirectoryScanner()
        with pytest.raises(NotADirectoryError):
            scanner.scan("/nonexistent/directory")

    def test_scan_empty_directory(self):
        scanner = DirectoryScanner()
        with tempfile.TemporaryDirectory() as tmpdir:
            assert scanner.scan(tmpdir) == []

    def test_scan_with_config_files(self, sample_config):
        scanner = DirectoryScanner()
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "hq.conf").write_text(sample_config)
            (Path(tmpdir) / "notes.txt").write_text("shopping list\n")
            configs = scanner.scan(tmpdir)
            assert [c.device_name for c in configs] == ["hq"]

    def test_content_detection(self):
        scanner = DirectoryScanner()
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "router-backup").write_text("ip route default gateway pp 1\n")
            configs = scanner.scan(tmpdir)
            assert len(configs) == 1
            assert configs[0].stream.command_count == 1

    def test_recursive_flag(self, sample_config):
        scanner = DirectoryScanner()
        with tempfile.TemporaryDirectory() as tmpdir:
            sub = Path(tmpdir) / "site-b"
            sub.mkdir()
            (sub / "b.rtx").write_text(sample_config)
            (Path(tmpdir) / "a.cfg").write_text(sample_config)
            assert [c.device_name for c in scanner.scan(tmpdir)] == ["a", "b"]
            assert [c.device_name for c in scanner.scan(tmpdir, recursive=False)] == ["a"]

    def test_vcs_directories_skipped(self, sample_config):
        scanner = DirectoryScanner()
        with tempfile.TemporaryDirectory() as tmpdir:
            git = Path(tmpdir) / ".git"
            git.mkdir()
            (git / "config").write_text("[core]\n")
            (git / "old.conf").write_text(sample_config)
            assert scanner.scan(tmpdir) == []

    def test_oversized_unknown_file_not_sniffed(self):
        scanner = DirectoryScanner(max_bytes=10)
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "dump").write_text("ip route default gateway pp 1\n")
            assert scanner.scan(tmpdir) == []


class TestLooksLikeDump:
    @pytest.mark.parametrize("head", [
        "# RTX1210 Rev.14.01.38 (Fri Jul  1 12:00:00 2022)\n",
        "# NVR510 Rev.15.01.22\n",
        "pp select 1\n",
        "login user admin encrypted XYZ\n",
    ])
    def test_recognized(self, head):
        assert looks_like_dump(head)

    @pytest.mark.parametrize("head", ["hostname R1\n", "# notes about the pp select command", ""])
    def test_rejected(self, head):
        assert not looks_like_dump(head)
