"""Backends that make a dependency's source available at a local path.

A populator knows two things: how to place a repository revision into a
directory, and which checkout marker proves a previous population finished.
The fetcher never looks at anything but the marker when deciding whether to
populate again.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from ..errors import FetchError
from .downloader import PackageDownloader
from .github_utils import GitHubURLOptimizer

logger = logging.getLogger(__name__)


class Populator:
    """Base class for dependency population backends."""

    #: Entry inside the local path whose presence marks a complete checkout
    marker_name = ".wirebuild-checkout"

    def marker(self, local_path: Path) -> Path:
        return local_path / self.marker_name

    def has_checkout(self, local_path: Path) -> bool:
        """Check for the checkout marker.

        The marker may be a file or a directory (a .git file is used by
        worktrees and submodules).
        """
        return self.marker(local_path).exists()

    def populate(self, locator: str, tag: str, local_path: Path) -> None:
        """Place the repository at ``tag`` into ``local_path``.

        Raises:
            FetchError: If population fails
        """
        raise NotImplementedError


class GitPopulator(Populator):
    """Populates dependencies with a shallow, recursive git clone."""

    marker_name = ".git"

    def __init__(self, git_executable: Optional[str] = None, jobs: int = 8):
        """Initialize the git populator.

        Args:
            git_executable: Path to git; looked up on PATH when omitted
            jobs: Parallel submodule fetch jobs
        """
        self.git_executable = git_executable
        self.jobs = jobs

    def find_git(self) -> str:
        git = self.git_executable or shutil.which("git")
        if not git:
            raise FetchError(
                "git executable not found. Install git or set fetch_method = archive "
                + "in wirebuild.ini"
            )
        return git

    def clone_command(self, locator: str, tag: str, local_path: Path) -> list:
        return [
            self.find_git(),
            "clone",
            "--depth",
            "1",
            "--branch",
            tag,
            "--recurse-submodules",
            "--shallow-submodules",
            f"--jobs={self.jobs}",
            locator,
            str(local_path),
        ]

    def populate(self, locator: str, tag: str, local_path: Path) -> None:
        cmd = self.clone_command(locator, tag, local_path)
        local_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8")
        except OSError as e:
            raise FetchError(f"Failed to run git for {locator}: {e}") from e

        if result.returncode != 0:
            raise FetchError(
                f"git clone of {locator} at '{tag}' failed "
                + f"(exit code {result.returncode}):\n{result.stderr.strip()}"
            )


class ArchivePopulator(Populator):
    """Populates dependencies from GitHub zip archives."""

    def __init__(self, downloader: Optional[PackageDownloader] = None, show_progress: bool = True):
        self.downloader = downloader or PackageDownloader()
        self.show_progress = show_progress

    def populate(self, locator: str, tag: str, local_path: Path) -> None:
        if not GitHubURLOptimizer.is_github_url(locator):
            raise FetchError(
                f"Archive fetching only supports GitHub repositories, got {locator}. "
                + "Use fetch_method = git for other hosts."
            )

        url = GitHubURLOptimizer.archive_url(locator, tag)
        local_path.mkdir(parents=True, exist_ok=True)

        # Archives often have a single top-level directory like "xcore-main"
        temp_archive = local_path.parent / f".{local_path.name}.zip"
        temp_extract = local_path.parent / f".{local_path.name}_extract"

        try:
            logger.info(f"Downloading {url}")
            self.downloader.download(url, temp_archive, show_progress=self.show_progress)
            self.downloader.extract_archive(temp_archive, temp_extract)

            contents = list(temp_extract.iterdir())
            if len(contents) == 1 and contents[0].is_dir():
                source_root = contents[0]
            else:
                source_root = temp_extract

            for item in source_root.iterdir():
                shutil.move(str(item), str(local_path / item.name))

            # Written last: only a finished population carries the marker
            self.marker(local_path).write_text(f"{locator}\n{tag}\n", encoding="utf-8")
        finally:
            if temp_extract.exists():
                shutil.rmtree(temp_extract)
            if temp_archive.exists():
                temp_archive.unlink()
