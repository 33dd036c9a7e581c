"""wirebuild - component registry and build-graph wiring for C/C++ projects."""

from .build import (
    BuildTarget,
    Component,
    ConfigurationSession,
    FileEntry,
    RegistryState,
    SubgroupMarker,
    subgroup,
)
from .config import ProjectConfig
from .errors import ConfigurationError, FetchError, WirebuildError

__version__ = "0.1.0"

__all__ = [
    "BuildTarget",
    "Component",
    "ConfigurationSession",
    "FileEntry",
    "RegistryState",
    "SubgroupMarker",
    "subgroup",
    "ProjectConfig",
    "ConfigurationError",
    "FetchError",
    "WirebuildError",
]
