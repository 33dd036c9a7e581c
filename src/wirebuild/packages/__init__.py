"""Dependency acquisition for wirebuild.

This module handles resolving repository locators to local checkouts and
populating them with git or from downloaded archives.
"""

from .dependency_fetcher import (
    DependencyFetcher,
    DependencySpec,
    FetchResult,
    derive_dependency_name,
)
from .downloader import DownloadError, ExtractionError, PackageDownloader
from .github_utils import GitHubURLOptimizer
from .populators import ArchivePopulator, GitPopulator, Populator

__all__ = [
    "DependencyFetcher",
    "DependencySpec",
    "FetchResult",
    "derive_dependency_name",
    "PackageDownloader",
    "DownloadError",
    "ExtractionError",
    "GitHubURLOptimizer",
    "Populator",
    "GitPopulator",
    "ArchivePopulator",
]
