"""Component registry for a single configuration phase.

Build descriptions declare components by name from many independent places.
The registry keeps the first declaration of every component, lets later
callers amend include paths, linker paths and the display group, and records
the registration order that the materializer follows.

Identity is case-insensitive: ``define_component("Core", ...)`` and
``define_component("core", ...)`` refer to the same component. The casefolded
name is the map key, the first spelling is kept for display.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional, Union

from ..errors import ConfigurationError
from .declarations import Declaration, assign_subgroups, parse_declarations

logger = logging.getLogger(__name__)

DEPENDENCIES_DIR = "dependencies"
PROJECT_ROOT = "."


def component_key(name: str) -> str:
    """Canonical registry key for a component name."""
    return name.casefold()


@dataclass(frozen=True)
class SourceFile:
    """A component file, rooted under the component root.

    Attributes:
        path: Path rooted under the component root (e.g. dependencies/core/src/a.cpp)
        subgroup: Subgroup the file was declared under, if any
        group: Display group of a subgrouped file, composed from the group
            the component was defined with; None for ungrouped files
    """

    path: str
    subgroup: Optional[str] = None
    group: Optional[str] = None


@dataclass
class Component:
    """Accumulated metadata of one registered component."""

    name: str
    root_path: str
    group_path: str
    files: List[SourceFile] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)
    linker_paths: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return component_key(self.name)

    @property
    def is_project_component(self) -> bool:
        """True when the component is part of the configured target itself."""
        return self.root_path == PROJECT_ROOT

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.files]

    @property
    def subgroup_assignments(self) -> Dict[str, str]:
        """Map of file path to subgroup for files declared after a marker."""
        return {f.path: f.subgroup for f in self.files if f.subgroup}


@dataclass
class PendingAmendments:
    """Amendments addressed to a component that is not defined yet."""

    name: str
    include_paths: List[str] = field(default_factory=list)
    linker_paths: List[str] = field(default_factory=list)
    group_path: Optional[str] = None


def is_project_component(name: str, target_name: Optional[str]) -> bool:
    """Decide whether a component belongs to the configured target.

    A component is part of the target when the target is its unit test
    (``<name>_unit...``) or when the component name extends the target name
    and the target is not a unit test itself.

    Args:
        name: Component name
        target_name: Configured target name, if any

    Returns:
        True if the component root is the project directory
    """
    if not target_name:
        return False
    if target_name.startswith(f"{name}_unit"):
        return True
    return name.startswith(target_name) and "_unit_" not in target_name


def rooted(root: str, item: str) -> str:
    """Join a declared file onto a component root, in POSIX form."""
    return str(PurePosixPath(root) / item)


class RegistryState:
    """Process-wide component registry for one configuration phase.

    A fresh instance is created per configuration session; nothing is kept
    across sessions. The registry index is the ordered list of component keys
    in creation order. Components are never removed.

    Example:
        registry = RegistryState(target_name="app")
        registry.define_component("core", "dependencies/lib", "src/a.cpp")
        registry.append_includes("core", "/extra")
    """

    def __init__(self, target_name: Optional[str] = None, strict_amendments: bool = False):
        """Initialize an empty registry.

        Args:
            target_name: Currently configured build target, if any
            strict_amendments: Reject amendments to undefined components
        """
        self.target_name = target_name
        self.strict_amendments = strict_amendments
        self._components: Dict[str, Component] = {}
        self._index: List[str] = []
        self._pending: Dict[str, PendingAmendments] = {}

    def __contains__(self, name: str) -> bool:
        return component_key(name) in self._components

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[Component]:
        """Iterate components in registration order."""
        for key in list(self._index):
            yield self._components[key]

    @property
    def index(self) -> List[str]:
        """Registered component names (display case), in registration order."""
        return [self._components[key].name for key in self._index]

    def get(self, name: str) -> Optional[Component]:
        return self._components.get(component_key(name))

    def __getitem__(self, name: str) -> Component:
        component = self.get(name)
        if component is None:
            raise KeyError(name)
        return component

    def define_component(
        self, name: str, parent_group: str, *declarations: Union[str, Declaration]
    ) -> bool:
        """Register a component on first declaration.

        Later calls with the same name (in any letter case) return False and
        change nothing, so several dependencies may declare a shared component.

        Args:
            name: Component name
            parent_group: Parent display group; /<name> is appended to it
            *declarations: File paths relative to the component root and
                subgroup markers

        Returns:
            True if the component was created by this call

        Raises:
            ConfigurationError: If the group is missing, the name is empty or
                clashes with the configured target, or a declaration is malformed
        """
        if not name:
            raise ConfigurationError(
                "define_component needs a component name. "
                + "Example: define_component(\"xcore\", \"dependencies/xcore\", \"src/xcore.cpp\")"
            )

        if not parent_group:
            raise ConfigurationError(
                f"A GROUP argument is required for define_component({name}). "
                + "Specify a parent folder for the display group (e.g. 'dependencies/xcore'); "
                + f"/{name} will be appended (e.g. 'dependencies/xcore/{name}'). "
                + f"Example: define_component(\"{name}\", \"dependencies/xcore\", <file list>)"
            )

        if self.target_name and component_key(name) == component_key(self.target_name):
            raise ConfigurationError(
                f"Component '{name}' has the same name as the target project "
                + f"'{self.target_name}'. Its sources, include paths and linker paths "
                + "would not be applied; rename either the component or the target."
            )

        key = component_key(name)
        if key in self._components:
            logger.debug(f"Component '{name}' already defined, keeping first declaration")
            return False

        # Parse before mutating so a malformed list leaves the registry untouched
        entries = parse_declarations(declarations)

        if is_project_component(name, self.target_name):
            logger.info(
                f"Component '{name}' is part of the project '{self.target_name}', "
                + "using the project directory as its root"
            )
            root = PROJECT_ROOT
            includes: List[str] = []
        else:
            root = f"{DEPENDENCIES_DIR}/{name}"
            includes = [root]

        group_path = f"{parent_group}/{name}"
        component = Component(
            name=name,
            root_path=root,
            group_path=group_path,
            files=[
                SourceFile(rooted(root, path), sub, f"{group_path}/{sub}" if sub else None)
                for path, sub in assign_subgroups(entries)
            ],
            include_paths=includes,
        )

        pending = self._pending.pop(key, None)
        if pending is not None:
            logger.debug(f"Applying forward-declared amendments to '{name}'")
            component.include_paths.extend(pending.include_paths)
            component.linker_paths.extend(pending.linker_paths)
            if pending.group_path is not None:
                component.group_path = pending.group_path

        self._components[key] = component
        self._index.append(key)
        return True

    def append_includes(self, name: str, *paths: str) -> None:
        """Append include directories to a component, keeping order."""
        component = self.get(name)
        if component is not None:
            component.include_paths.extend(paths)
        else:
            self._forward(name, "append_includes").include_paths.extend(paths)

    def append_linker_paths(self, name: str, *paths: str) -> None:
        """Append linker search directories to a component, keeping order."""
        component = self.get(name)
        if component is not None:
            component.linker_paths.extend(paths)
        else:
            self._forward(name, "append_linker_paths").linker_paths.extend(paths)

    def set_group(self, name: str, group: str) -> None:
        """Replace the display group of a component.

        Only files declared outside a subgroup move; subgrouped files keep the
        group they were defined under.
        """
        if not group:
            raise ConfigurationError(
                f"set_group({name}) needs a group. "
                + f"Example: set_group(\"{name}\", \"dependencies/xcore/{name}\")"
            )
        component = self.get(name)
        if component is not None:
            component.group_path = group
        else:
            self._forward(name, "set_group").group_path = group

    def orphaned_amendments(self) -> List[str]:
        """Names amended but never defined."""
        return [pending.name for pending in self._pending.values()]

    def _forward(self, name: str, operation: str) -> PendingAmendments:
        if not name:
            raise ConfigurationError(f"{operation} needs a component name")
        if self.strict_amendments:
            raise ConfigurationError(
                f"{operation}({name}) targets a component that has not been defined. "
                + f"Call define_component(\"{name}\", <group>, <file list>) first, "
                + "or set strict_amendments = false to allow forward declarations."
            )
        key = component_key(name)
        pending = self._pending.get(key)
        if pending is None:
            logger.debug(f"{operation}({name}) recorded before the component was defined")
            pending = PendingAmendments(name)
            self._pending[key] = pending
        return pending
