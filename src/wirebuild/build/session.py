"""
Configuration session for wirebuild projects.

A session is one evaluation of a project's build description. It owns the
component registry, the dependency fetcher and the targets, and exposes the
declarative verbs that build descriptions call:

    fetch_dependency("https://github.com/LIONant-depot/xcore.git")
    define_component("xcore", "dependencies/xcore",
        "src/xcore.cpp",
        "**Header Files",
        "src/xcore.h",
    )
    append_includes("xcore", "dependencies/xcore/src")
    materialize()

Build descriptions are Python scripts (``wire.py``) evaluated with these verbs
in their namespace. A fetched dependency can ship its own description at
``<dep>/build/dependency/wire.py``. Those are queued on a worklist that is
drained before fetch_dependency returns, so a dependency's components are
registered right where it was fetched. Each description file is evaluated at
most once per session.
"""

import logging
import runpy
from collections import deque
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from ..config import ProjectConfig
from ..errors import ConfigurationError, WirebuildError
from ..packages.dependency_fetcher import DependencyFetcher, FetchRequest, FetchResult
from ..packages.populators import ArchivePopulator, GitPopulator, Populator
from .declarations import Declaration, FileEntry, SubgroupMarker, subgroup
from .materializer import Materializer
from .registry import RegistryState
from .target import BuildTarget, TargetResolver, TargetTable

logger = logging.getLogger(__name__)

RUN_NAME = "__wirebuild__"


class ConfigurationSession:
    """State and verbs of a single configuration phase."""

    def __init__(
        self,
        workspace_root: Path,
        target_name: Optional[str] = None,
        fetcher: Optional[DependencyFetcher] = None,
        strict_amendments: bool = False,
    ):
        """Initialize a session.

        Args:
            workspace_root: Project directory; dependencies/ lives below it
            target_name: Configured target project
            fetcher: Dependency fetcher; a git based one is created if omitted
            strict_amendments: Reject amendments to undefined components
        """
        self.workspace_root = Path(workspace_root)
        self.target_name = target_name
        self.registry = RegistryState(target_name, strict_amendments=strict_amendments)
        self.targets = TargetTable()
        self.materializer = Materializer(self.registry, TargetResolver(target_name), self.targets)
        self.fetcher = fetcher or DependencyFetcher(self.workspace_root)
        # Descriptions being evaluated, outermost first
        self._chain: List[Path] = []
        self._evaluated: Set[Path] = set()

    @classmethod
    def from_config(
        cls, config: ProjectConfig, populator: Optional[Populator] = None
    ) -> "ConfigurationSession":
        """Create a session from project configuration.

        Args:
            config: Loaded project configuration
            populator: Population backend override; chosen from
                config.fetch_method when omitted
        """
        if populator is None:
            populator = ArchivePopulator() if config.fetch_method == "archive" else GitPopulator()
        fetcher = DependencyFetcher(
            config.project_dir,
            populator=populator,
            default_tag=config.default_tag,
            max_workers=config.max_workers,
        )
        return cls(
            config.project_dir,
            target_name=config.target,
            fetcher=fetcher,
            strict_amendments=config.strict_amendments,
        )

    # Declarative verbs

    def fetch_dependency(self, locator: str, tag: Optional[str] = None) -> bool:
        """Fetch a dependency and incorporate its nested build description.

        Returns:
            True if the dependency was populated by this call
        """
        result = self.fetcher.fetch(locator, tag)
        self._incorporate([result])
        return result.populated

    def fetch_dependencies(self, requests: Iterable[FetchRequest]) -> List[bool]:
        """Fetch several dependencies concurrently, then incorporate them in order."""
        results = self.fetcher.fetch_many(requests)
        self._incorporate(results)
        return [r.populated for r in results]

    def define_component(
        self, name: str, group: str, *declarations: Union[str, Declaration]
    ) -> bool:
        return self.registry.define_component(name, group, *declarations)

    def append_includes(self, name: str, *paths: str) -> None:
        self.registry.append_includes(name, *paths)

    def append_linker_paths(self, name: str, *paths: str) -> None:
        self.registry.append_linker_paths(name, *paths)

    def set_group(self, name: str, group: str) -> None:
        self.registry.set_group(name, group)

    def materialize(self, target_name: Optional[str] = None) -> BuildTarget:
        return self.materializer.materialize(target_name)

    # Build descriptions

    def namespace(self, path: Path) -> Dict[str, Any]:
        """Globals a build description is evaluated with."""
        return {
            "fetch_dependency": self.fetch_dependency,
            "fetch_dependencies": self.fetch_dependencies,
            "define_component": self.define_component,
            "append_includes": self.append_includes,
            "append_linker_paths": self.append_linker_paths,
            "set_group": self.set_group,
            "materialize": self.materialize,
            "subgroup": subgroup,
            "FileEntry": FileEntry,
            "SubgroupMarker": SubgroupMarker,
            "WORKSPACE_ROOT": self.workspace_root,
            "CURRENT_DIR": path.parent,
            "TARGET_PROJECT": self.target_name,
        }

    def evaluate(self, path: Path) -> None:
        """Evaluate a build description and everything it fetches.

        Raises:
            ConfigurationError: If the description is missing or fails
            FetchError: If a dependency cannot be fetched
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(
                f"Build description not found: {path}. "
                + "Create it or set 'description' in the [project] section of wirebuild.ini"
            )
        self._drain([path])

    def run(self, description: Path) -> TargetTable:
        """Evaluate the root description and materialize the configured target.

        The configured target is materialized only if the description did
        not materialize anything itself.

        Returns:
            All targets touched by the session
        """
        self.evaluate(description)
        if not self.materializer.materialized_targets:
            self.materialize()
        return self.targets

    def _incorporate(self, results: List[FetchResult]) -> None:
        self._drain([r.description for r in results if r.description is not None])

    def _drain(self, paths: List[Path]) -> None:
        # A nested fetch drains its own queue before control returns to the
        # description that fetched, which keeps registration order inline
        pending = deque(paths)
        while pending:
            self._evaluate_file(pending.popleft())

    def describe_chain(self) -> str:
        """Descriptions currently being evaluated, outermost first."""
        return " -> ".join(str(p) for p in self._chain)

    def _evaluate_file(self, path: Path) -> None:
        key = path.resolve()
        if key in self._evaluated:
            if key in (p.resolve() for p in self._chain):
                logger.debug(f"Dependency cycle back to {path} via {self.describe_chain()}")
            else:
                logger.debug(f"Build description {path} already evaluated in this session")
            return
        self._evaluated.add(key)

        logger.info(f"Evaluating build description {path}")
        self._chain.append(path)
        try:
            runpy.run_path(str(path), init_globals=self.namespace(path), run_name=RUN_NAME)
        except WirebuildError:
            raise
        except SyntaxError as e:
            raise ConfigurationError(
                f"Failed to load build description {path}: {e}" + self._included_from()
            ) from e
        except Exception as e:
            raise ConfigurationError(
                f"Build description {path} failed: {type(e).__name__}: {e}"
                + self._included_from()
            ) from e
        finally:
            self._chain.pop()

    def _included_from(self) -> str:
        if len(self._chain) < 2:
            return ""
        return " (included from " + " -> ".join(str(p) for p in self._chain[:-1]) + ")"
