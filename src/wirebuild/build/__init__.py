"""
Component registry and linking engine for wirebuild.

This module provides:
- Declarations (file entries and subgroup markers)
- The component registry for a configuration phase
- Target resolution and the materialization pass
- The configuration session that evaluates build descriptions
"""

from .declarations import FileEntry, SubgroupMarker, parse_declarations, subgroup
from .materializer import Materializer, partition_source_groups
from .registry import Component, RegistryState, SourceFile
from .session import ConfigurationSession
from .target import BuildTarget, TargetResolver, TargetTable

__all__ = [
    "FileEntry",
    "SubgroupMarker",
    "parse_declarations",
    "subgroup",
    "Component",
    "SourceFile",
    "RegistryState",
    "BuildTarget",
    "TargetTable",
    "TargetResolver",
    "Materializer",
    "partition_source_groups",
    "ConfigurationSession",
]
