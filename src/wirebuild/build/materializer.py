"""Materialization of registered components onto a build target.

A single pass over the registry index, in registration order:
1. Attach every component's files to the target sources
2. Compute the display-group partition of those files
3. Attach include directories (private)
4. Attach linker search directories (private)

The pass only reads the registry. Running it twice for the same target adds
everything twice, so it is meant to run once per target per session.
"""

import logging
from typing import Dict, List, Optional, Set

from .registry import Component, RegistryState
from .target import BuildTarget, TargetResolver, TargetTable

logger = logging.getLogger(__name__)


def partition_source_groups(component: Component) -> Dict[str, List[str]]:
    """Split a component's files into display groups.

    Files declared under a subgroup go to ``<group_path>/<subgroup>`` as
    composed when the component was defined. The remaining files go to the
    current ``group_path``, so a set_group override only moves those.

    Returns:
        Ordered mapping of group name to file paths
    """
    groups: Dict[str, List[str]] = {}
    for source in component.files:
        groups.setdefault(source.group or component.group_path, []).append(source.path)
    return groups


class Materializer:
    """Applies accumulated component state onto targets."""

    def __init__(
        self,
        registry: RegistryState,
        resolver: TargetResolver,
        targets: Optional[TargetTable] = None,
    ):
        self.registry = registry
        self.resolver = resolver
        self.targets = targets if targets is not None else TargetTable()
        self._materialized: Set[str] = set()

    @property
    def materialized_targets(self) -> Set[str]:
        return set(self._materialized)

    def materialize(self, target_name: Optional[str] = None) -> BuildTarget:
        """Apply every registered component onto a target.

        Args:
            target_name: Target to apply to; defaults to the configured target

        Returns:
            The target with all contributions attached

        Raises:
            ConfigurationError: If no target can be resolved
        """
        name = self.resolver.resolve(target_name)
        target = self.targets.get(name)

        if name in self._materialized:
            logger.warning(
                f"Target '{name}' was already materialized in this session; "
                + "its sources and directories will be added again"
            )
        self._materialized.add(name)

        logger.info(f"Processing: {', '.join(self.registry.index) or '(no components)'}")

        for component in self.registry:
            self.apply_component(component, target)

        for orphan in self.registry.orphaned_amendments():
            logger.warning(
                f"Component '{orphan}' was amended but never defined; "
                + "its include paths, linker paths and group were not applied"
            )

        return target

    def apply_component(self, component: Component, target: BuildTarget) -> None:
        """Attach one component's files, includes and linker paths."""
        if component.files:
            target.add_sources(component.file_paths)
            target.add_source_groups(partition_source_groups(component))
        else:
            logger.warning(f"No files defined for component {component.name}. Skipping sources.")

        if component.include_paths:
            logger.debug(
                f"Applying include directories for {component.name}: "
                + ", ".join(component.include_paths)
            )
            target.add_include_dirs(component.include_paths)

        if component.linker_paths:
            logger.info(
                f"Applying linker paths for {component.name}: "
                + ", ".join(component.linker_paths)
            )
            target.add_link_dirs(component.linker_paths)
