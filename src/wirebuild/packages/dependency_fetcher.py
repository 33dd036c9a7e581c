"""Dependency acquisition for wirebuild.

Every dependency lives at ``<workspace>/dependencies/<name>``, where the name
comes from the repository locator:

    https://github.com/LIONant-depot/xtextfile.git  ->  dependencies/xtextfile

A dependency is populated at most once. An existing checkout (recognised
only by the populator's checkout marker) is reused without touching the
network. A fetched dependency may carry its own build description at
``<dep>/build/dependency/wire.py``; the fetcher reports it so the
configuration session can evaluate it.
"""

import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError, FetchError, WirebuildError
from .populators import GitPopulator, Populator

logger = logging.getLogger(__name__)

DEFAULT_TAG = "main"
DEPENDENCIES_DIR = "dependencies"
NESTED_DESCRIPTION_DIR = Path("build") / "dependency"
DESCRIPTION_FILE = "wire.py"
KNOWN_SUFFIXES = (".git", ".tar.gz", ".tar.bz2", ".tar.xz", ".zip")


def derive_dependency_name(locator: str) -> str:
    """Derive a dependency name from a repository locator.

    Takes the last path segment (``/`` or the ``:`` of scp-like git URLs)
    and strips one known VCS or archive suffix.

    Args:
        locator: Repository URL or path

    Returns:
        Dependency name, letter case preserved

    Raises:
        ConfigurationError: If no name can be derived
    """
    basename = locator.strip().replace("\\", "/").rstrip("/")
    basename = basename.rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    for suffix in KNOWN_SUFFIXES:
        if basename.endswith(suffix):
            basename = basename[: -len(suffix)]
            break

    if not basename or basename in (".", ".."):
        raise ConfigurationError(
            f"Could not extract dependency name from REPO: '{locator}'. "
            + "Pass a full repository URL, e.g. "
            + "fetch_dependency(\"https://github.com/LIONant-depot/xtextfile.git\")"
        )
    return basename


@dataclass(frozen=True)
class DependencySpec:
    """A dependency request.

    Attributes:
        locator: Repository URL
        tag: Git tag or branch
        local_path: Checkout directory, derived from the locator only
    """

    locator: str
    tag: str
    local_path: Path

    @property
    def name(self) -> str:
        return self.local_path.name

    @property
    def description_path(self) -> Path:
        """Where a nested build description would live."""
        return self.local_path / NESTED_DESCRIPTION_DIR / DESCRIPTION_FILE


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a fetch request.

    Attributes:
        spec: The resolved dependency request
        populated: True if this call placed the source on disk
        description: Nested build description to incorporate, if present
    """

    spec: DependencySpec
    populated: bool
    description: Optional[Path] = None


FetchRequest = Union[str, Tuple[str, Optional[str]]]


class DependencyFetcher:
    """Makes dependencies available under the workspace, once each."""

    def __init__(
        self,
        workspace_root: Path,
        populator: Optional[Populator] = None,
        default_tag: str = DEFAULT_TAG,
        max_workers: int = 4,
    ):
        """Initialize the fetcher.

        Args:
            workspace_root: Root under which dependencies/ is created
            populator: Population backend (git clone by default)
            default_tag: Tag used when a request does not name one
            max_workers: Thread pool size for fetch_many
        """
        self.workspace_root = Path(workspace_root)
        self.dependencies_dir = self.workspace_root / DEPENDENCIES_DIR
        self.populator = populator or GitPopulator()
        self.default_tag = default_tag
        self.max_workers = max_workers
        self._fetched: Dict[str, DependencySpec] = {}
        self._lock = threading.Lock()

    def resolve(self, locator: str, tag: Optional[str] = None) -> DependencySpec:
        """Build the DependencySpec for a request without fetching."""
        if not locator or not locator.strip():
            raise ConfigurationError(
                "fetch_dependency needs a repository URL. Example: "
                + "fetch_dependency(\"https://github.com/LIONant-depot/xtextfile.git\")"
            )
        name = derive_dependency_name(locator)
        return DependencySpec(
            locator=locator.strip(),
            tag=tag or self.default_tag,
            local_path=self.dependencies_dir / name,
        )

    @property
    def fetched(self) -> List[DependencySpec]:
        """Dependencies requested so far, in request order."""
        return list(self._fetched.values())

    def fetch(self, locator: str, tag: Optional[str] = None) -> FetchResult:
        """Ensure a dependency's source is present locally.

        Args:
            locator: Repository URL
            tag: Tag or branch; defaults to the configured default tag

        Returns:
            FetchResult telling whether population happened and which nested
            build description to incorporate

        Raises:
            ConfigurationError: If the locator is malformed
            FetchError: If population fails
        """
        spec = self.resolve(locator, tag)
        populated = self._ensure(spec)
        return self._finish(spec, populated)

    def fetch_many(self, requests: Iterable[FetchRequest]) -> List[FetchResult]:
        """Fetch several dependencies, populating them concurrently.

        Only population runs on worker threads. Results come back in request
        order so the caller can incorporate them sequentially.

        Args:
            requests: Locators, or (locator, tag) pairs

        Returns:
            One FetchResult per request, in order

        Raises:
            FetchError: The first population failure, in request order
        """
        specs = [self.resolve(*_split_request(r)) for r in requests]

        # Duplicate requests within the batch populate once
        unique: Dict[str, DependencySpec] = {}
        for spec in specs:
            unique.setdefault(spec.name, spec)

        with ThreadPoolExecutor(max_workers=max(1, self.max_workers)) as pool:
            futures = {key: pool.submit(self._ensure, spec) for key, spec in unique.items()}
            outcomes = {key: future.result() for key, future in futures.items()}

        results = []
        seen = set()
        for spec in specs:
            key = spec.name
            populated = outcomes[key] and key not in seen
            seen.add(key)
            results.append(self._finish(spec, populated))
        return results

    def _ensure(self, spec: DependencySpec) -> bool:
        key = spec.name
        with self._lock:
            previous = self._fetched.get(key)
        if previous is not None:
            if previous.locator != spec.locator or previous.tag != spec.tag:
                logger.warning(
                    f"Dependency '{spec.name}' was already fetched from {previous.locator} "
                    + f"at '{previous.tag}'; ignoring request for {spec.locator} at '{spec.tag}'"
                )
            return False

        logger.debug(f"Checking for an existing checkout of {spec.name} at {spec.local_path}")
        if self.populator.has_checkout(spec.local_path):
            logger.info(f"Skipping fetch for {spec.name}: existing checkout found")
            with self._lock:
                self._fetched[key] = spec
            return False

        if spec.local_path.exists():
            logger.warning(
                f"{spec.local_path} exists without a checkout marker; "
                + "removing partial checkout before populating"
            )
            try:
                shutil.rmtree(spec.local_path)
            except OSError as e:
                raise FetchError(
                    f"Failed to remove partial checkout of {spec.name} at {spec.local_path}: {e}"
                ) from e

        logger.info(f"Populating {spec.name} from {spec.locator} with tag {spec.tag}...")
        try:
            self.populator.populate(spec.locator, spec.tag, spec.local_path)
        except WirebuildError:
            self._discard_partial(spec)
            raise
        except OSError as e:
            self._discard_partial(spec)
            raise FetchError(f"Failed to populate {spec.name} at {spec.local_path}: {e}") from e

        with self._lock:
            self._fetched[key] = spec
        return True

    def _discard_partial(self, spec: DependencySpec) -> None:
        if spec.local_path.is_dir() and not self.populator.has_checkout(spec.local_path):
            shutil.rmtree(spec.local_path, ignore_errors=True)

    def _finish(self, spec: DependencySpec, populated: bool) -> FetchResult:
        description = spec.description_path
        if description.is_file():
            return FetchResult(spec, populated, description)
        logger.warning(
            f"No {DESCRIPTION_FILE} in {description.parent} for {spec.name}. "
            + "Skipping nested build description."
        )
        return FetchResult(spec, populated, None)


def _split_request(request: FetchRequest) -> Sequence[Optional[str]]:
    if isinstance(request, str):
        return (request, None)
    return request
