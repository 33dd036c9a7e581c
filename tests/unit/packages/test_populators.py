"""Tests for git and archive population backends."""

import subprocess
import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from wirebuild.errors import FetchError
from wirebuild.packages.downloader import DownloadError, ExtractionError, PackageDownloader
from wirebuild.packages.github_utils import GitHubURLOptimizer
from wirebuild.packages.populators import ArchivePopulator, GitPopulator


class TestGitPopulator:
    """Test the git clone backend."""

    def test_clone_command(self, tmp_path):
        """Test the clone is shallow, recursive and pinned to the tag."""
        populator = GitPopulator(git_executable="/usr/bin/git")
        cmd = populator.clone_command("https://x/xcore.git", "v1", tmp_path / "xcore")

        assert cmd == [
            "/usr/bin/git",
            "clone",
            "--depth",
            "1",
            "--branch",
            "v1",
            "--recurse-submodules",
            "--shallow-submodules",
            "--jobs=8",
            "https://x/xcore.git",
            str(tmp_path / "xcore"),
        ]

    def test_missing_git(self):
        with patch("wirebuild.packages.populators.shutil.which", return_value=None):
            with pytest.raises(FetchError) as exc_info:
                GitPopulator().find_git()

        assert "git executable not found" in str(exc_info.value)

    def test_populate_success(self, tmp_path):
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with patch("wirebuild.packages.populators.subprocess.run", return_value=completed) as run:
            GitPopulator(git_executable="git").populate("https://x/a.git", "main", tmp_path / "a")

        run.assert_called_once()
        assert run.call_args[0][0][0] == "git"

    def test_populate_failure_raises(self, tmp_path):
        """Test a non-zero git exit becomes a FetchError with stderr."""
        completed = subprocess.CompletedProcess(
            args=[], returncode=128, stdout="", stderr="fatal: repository not found"
        )
        with patch("wirebuild.packages.populators.subprocess.run", return_value=completed):
            with pytest.raises(FetchError) as exc_info:
                GitPopulator(git_executable="git").populate(
                    "https://x/a.git", "main", tmp_path / "a"
                )

        message = str(exc_info.value)
        assert "https://x/a.git" in message
        assert "repository not found" in message

    def test_populate_os_error(self, tmp_path):
        with patch("wirebuild.packages.populators.subprocess.run", side_effect=OSError("denied")):
            with pytest.raises(FetchError):
                GitPopulator(git_executable="git").populate(
                    "https://x/a.git", "main", tmp_path / "a"
                )


class TestGitHubURLOptimizer:
    """Test GitHub URL helpers."""

    def test_is_github_url(self):
        assert GitHubURLOptimizer.is_github_url("https://github.com/a/b") is True
        assert GitHubURLOptimizer.is_github_url("https://www.github.com/a/b") is True
        assert GitHubURLOptimizer.is_github_url("https://gitlab.com/a/b") is False

    def test_archive_url(self):
        assert (
            GitHubURLOptimizer.archive_url("https://github.com/LIONant-depot/xcore.git/", "v1")
            == "https://github.com/LIONant-depot/xcore/archive/v1.zip"
        )

    def test_archive_url_unchanged(self):
        url = "https://github.com/a/b/archive/refs/heads/main.zip"
        assert GitHubURLOptimizer.archive_url(url, "v1") == url


class TestArchivePopulator:
    """Test the archive backend with a fake downloader."""

    @staticmethod
    def fake_downloader(files):
        """Downloader whose download writes a zip with a single top-level dir."""

        def download(url, dest_path, show_progress=True):
            with zipfile.ZipFile(dest_path, "w") as archive:
                for name, content in files.items():
                    archive.writestr(f"xcore-main/{name}", content)
            return dest_path

        downloader = MagicMock(spec=PackageDownloader)
        downloader.download.side_effect = download
        downloader.extract_archive.side_effect = PackageDownloader().extract_archive
        return downloader

    def test_populate_moves_contents_and_writes_marker(self, tmp_path):
        downloader = self.fake_downloader({"src/a.cpp": "int a;", "README": "x"})
        populator = ArchivePopulator(downloader=downloader, show_progress=False)
        local = tmp_path / "dependencies" / "xcore"

        populator.populate("https://github.com/LIONant-depot/xcore.git", "main", local)

        downloader.download.assert_called_once()
        assert downloader.download.call_args[0][0] == (
            "https://github.com/LIONant-depot/xcore/archive/main.zip"
        )
        assert (local / "src" / "a.cpp").read_text() == "int a;"
        assert populator.has_checkout(local) is True
        # Temporary files are cleaned up
        assert sorted(p.name for p in local.parent.iterdir()) == ["xcore"]

    def test_non_github_locator_rejected(self, tmp_path):
        populator = ArchivePopulator(downloader=MagicMock(spec=PackageDownloader))

        with pytest.raises(FetchError):
            populator.populate("https://gitlab.com/a/b.git", "main", tmp_path / "b")

    def test_failed_download_leaves_no_marker(self, tmp_path):
        downloader = MagicMock(spec=PackageDownloader)
        downloader.download.side_effect = FetchError("boom")
        populator = ArchivePopulator(downloader=downloader)
        local = tmp_path / "xcore"

        with pytest.raises(FetchError):
            populator.populate("https://github.com/a/xcore", "main", local)

        assert populator.has_checkout(local) is False


class TestPackageDownloader:
    """Test archive extraction."""

    def test_extract_zip(self, tmp_path):
        archive = tmp_path / "lib.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("lib/a.h", "#pragma once")

        out = PackageDownloader().extract_archive(archive, tmp_path / "out")

        assert (Path(out) / "lib" / "a.h").exists()

    def test_unsupported_format(self, tmp_path):
        archive = tmp_path / "lib.rar"
        archive.write_bytes(b"")

        with pytest.raises(ExtractionError):
            PackageDownloader().extract_archive(archive, tmp_path / "out")

    def test_missing_archive(self, tmp_path):
        with pytest.raises(ExtractionError):
            PackageDownloader().extract_archive(tmp_path / "nope.zip", tmp_path / "out")

    def test_download_error_wraps_requests(self, tmp_path):
        """Test request failures become DownloadError (a FetchError)."""
        import requests

        with patch(
            "wirebuild.packages.downloader.requests.get",
            side_effect=requests.ConnectionError("offline"),
        ):
            with pytest.raises(FetchError) as exc_info:
                PackageDownloader().download("https://x/a.zip", tmp_path / "a.zip")

        assert "offline" in str(exc_info.value)
        assert not (tmp_path / "a.zip.tmp").exists()

    def test_download_disk_error(self, tmp_path):
        """Test a destination that cannot be created raises DownloadError."""
        (tmp_path / "blocked").write_text("file, not a folder")

        with patch("wirebuild.packages.downloader.requests.get") as get:
            with pytest.raises(DownloadError) as exc_info:
                PackageDownloader().download("https://x/a.zip", tmp_path / "blocked" / "a.zip")

        get.assert_not_called()
        assert "Failed to write" in str(exc_info.value)
