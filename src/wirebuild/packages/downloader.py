"""HTTP download and extraction of dependency archives.

The archive populator uses this instead of git: the archive for a tag is
streamed to disk (behind a tqdm progress bar when the server reports a size)
and then unpacked next to the dependency directory.
"""

import logging
import tarfile
import zipfile
from pathlib import Path
from urllib.parse import urlparse

import requests
from tqdm import tqdm

from ..errors import FetchError

logger = logging.getLogger(__name__)

TAR_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz")


class DownloadError(FetchError):
    """An archive could not be retrieved."""

    pass


class ExtractionError(FetchError):
    """An archive could not be unpacked."""

    pass


class PackageDownloader:
    """Streams archives to disk and unpacks them."""

    def __init__(self, chunk_size: int = 8192, timeout: int = 30):
        """
        Args:
            chunk_size: Bytes read per streamed chunk
            timeout: Connect/read timeout in seconds
        """
        self.chunk_size = chunk_size
        self.timeout = timeout

    def download(self, url: str, dest_path: Path, show_progress: bool = True) -> Path:
        """Stream ``url`` into ``dest_path``.

        The body is written to ``<dest_path>.tmp`` first, so ``dest_path``
        only ever holds a complete download.

        Raises:
            DownloadError: On any HTTP, connection or disk failure
        """
        dest_path = Path(dest_path)
        partial = dest_path.with_name(dest_path.name + ".tmp")

        logger.debug(f"Downloading {url} -> {dest_path}")
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                self._write_body(response, partial, url, show_progress)
            partial.replace(dest_path)
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Failed to write {url} to {dest_path}: {e}") from e
        finally:
            if partial.exists():
                partial.unlink()

        return dest_path

    def _write_body(
        self, response: requests.Response, target: Path, url: str, show_progress: bool
    ) -> None:
        size = int(response.headers.get("content-length", 0))
        label = Path(urlparse(url).path).name or url
        with open(target, "wb") as out, tqdm(
            total=size,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            desc=label,
            disable=not show_progress or size == 0,
        ) as bar:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if not chunk:
                    continue
                out.write(chunk)
                bar.update(len(chunk))

    def extract_archive(self, archive_path: Path, dest_dir: Path) -> Path:
        """Unpack a .zip or .tar.{gz,bz2,xz} archive into ``dest_dir``.

        Returns:
            ``dest_dir``

        Raises:
            ExtractionError: If the archive is missing, of an unknown
                format, or corrupt
        """
        archive_path = Path(archive_path)
        dest_dir = Path(dest_dir)
        if not archive_path.is_file():
            raise ExtractionError(f"Archive not found: {archive_path}")

        name = archive_path.name
        if name.endswith(".zip"):
            opener = self._unzip
        elif name.endswith(TAR_SUFFIXES):
            opener = self._untar
        else:
            raise ExtractionError(f"Unsupported archive format: {name}")

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            opener(archive_path, dest_dir)
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e
        return dest_dir

    @staticmethod
    def _untar(archive_path: Path, dest_dir: Path) -> None:
        with tarfile.open(archive_path, "r:*") as archive:
            archive.extractall(dest_dir, filter="data")

    @staticmethod
    def _unzip(archive_path: Path, dest_dir: Path) -> None:
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(dest_dir)
