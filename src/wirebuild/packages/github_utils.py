"""GitHub URL utilities for wirebuild.

Converts GitHub repository locators into archive download URLs so a
dependency can be populated without a git client.
"""

from urllib.parse import urlparse


class GitHubURLOptimizer:
    """Rewrites GitHub repository URLs to zip archive URLs."""

    @staticmethod
    def is_github_url(url: str) -> bool:
        """Check if a URL is a GitHub repository URL.

        Args:
            url: The URL to check

        Returns:
            True if the URL is a GitHub repository
        """
        parsed = urlparse(url)
        return parsed.netloc.lower() in ("github.com", "www.github.com")

    @staticmethod
    def repository_url(url: str) -> str:
        """Strip trailing slashes and a .git suffix from a repository URL."""
        url = url.rstrip("/")
        if url.endswith(".git"):
            url = url[:-4]
        return url

    @classmethod
    def archive_url(cls, url: str, tag: str) -> str:
        """Build the zip download URL for a repository at a tag or branch.

        Transforms:
            https://github.com/LIONant-depot/xtextfile.git, "main"
        Into:
            https://github.com/LIONant-depot/xtextfile/archive/main.zip

        Args:
            url: GitHub repository URL
            tag: Branch or tag name

        Returns:
            Archive download URL; URLs that already point at an archive are
            returned unchanged
        """
        url = cls.repository_url(url)
        if "/archive/" in url:
            return url
        return f"{url}/archive/{tag}.zip"
