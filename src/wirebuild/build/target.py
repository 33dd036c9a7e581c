"""Build targets and target resolution.

A BuildTarget is the artifact (executable or library) that consumes the
contributions of all registered components. Only the parts wirebuild writes
are modeled: private sources, include directories, linker search directories
and the display grouping of sources.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class BuildTarget:
    """A target and everything attached to it so far."""

    name: str
    sources: List[str] = field(default_factory=list)
    include_dirs: List[str] = field(default_factory=list)
    link_dirs: List[str] = field(default_factory=list)
    source_groups: Dict[str, List[str]] = field(default_factory=dict)

    def add_sources(self, sources: List[str]) -> None:
        self.sources.extend(sources)

    def add_include_dirs(self, dirs: List[str]) -> None:
        self.include_dirs.extend(dirs)

    def add_link_dirs(self, dirs: List[str]) -> None:
        self.link_dirs.extend(dirs)

    def add_source_groups(self, groups: Dict[str, List[str]]) -> None:
        """Merge a display partition, keeping first-seen group order."""
        for group, files in groups.items():
            self.source_groups.setdefault(group, []).extend(files)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "sources": list(self.sources),
            "include_dirs": list(self.include_dirs),
            "link_dirs": list(self.link_dirs),
            "source_groups": {k: list(v) for k, v in self.source_groups.items()},
        }


class TargetTable:
    """Targets touched during one configuration session, by name."""

    def __init__(self):
        self._targets: Dict[str, BuildTarget] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[BuildTarget]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)

    def get(self, name: str) -> BuildTarget:
        """Get a target, creating it on first use."""
        target = self._targets.get(name)
        if target is None:
            target = BuildTarget(name)
            self._targets[name] = target
        return target

    def to_dict(self) -> Dict[str, Any]:
        return {"targets": [t.to_dict() for t in self._targets.values()]}

    def save(self, path: Path) -> None:
        """Save all targets to a JSON file.

        Args:
            path: Output file path; parent directories are created
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Wrote {len(self._targets)} target(s) to {path}")


class TargetResolver:
    """Chooses the target a materialization pass applies to."""

    def __init__(self, configured_target: Optional[str] = None):
        self.configured_target = configured_target

    def resolve(self, target_name: Optional[str] = None) -> str:
        """Resolve the target name.

        Args:
            target_name: Explicit target, wins over the configured one

        Returns:
            The target name to materialize onto

        Raises:
            ConfigurationError: If no target is given or configured
        """
        if target_name:
            return target_name
        if self.configured_target:
            return self.configured_target
        raise ConfigurationError(
            "No target given and no target project configured. "
            + "Set 'target = my_project' in the [project] section of wirebuild.ini, "
            + "export WIREBUILD_TARGET, or call materialize(\"my_project\")."
        )
