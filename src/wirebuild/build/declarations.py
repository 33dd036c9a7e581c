"""Declaration entries accepted by define_component.

A declaration list is an ordered mix of file entries and subgroup markers.
Every file that follows a marker, up to the next marker, is shown under that
marker's subgroup:

    define_component("xtexture_compiler", "dependencies/xcore",
        "source/Compiler/main.cpp",
        "**Texture_Compiler/Source Files",
        "source/Compiler/xtexture_compiler.cpp",
    )

Plain strings are converted once, at the API boundary, by
``parse_declarations``. A leading ``**`` makes a string a subgroup marker.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from ..errors import ConfigurationError

SUBGROUP_SENTINEL = "**"


@dataclass(frozen=True)
class FileEntry:
    """A source file path, relative to the component root."""

    path: str


@dataclass(frozen=True)
class SubgroupMarker:
    """Switches the display subgroup for the file entries that follow."""

    name: str


Declaration = Union[FileEntry, SubgroupMarker]


def subgroup(name: str) -> SubgroupMarker:
    """Create a subgroup marker without the string sentinel."""
    if not name:
        raise ConfigurationError("Subgroup markers need a non-empty name")
    return SubgroupMarker(name)


def to_declaration(item: Union[str, Declaration]) -> Declaration:
    """Convert a single boundary value to a declaration.

    Args:
        item: A FileEntry, a SubgroupMarker or a plain string

    Returns:
        The structured declaration

    Raises:
        ConfigurationError: If the item is empty or of an unsupported type
    """
    if isinstance(item, (FileEntry, SubgroupMarker)):
        return item
    if not isinstance(item, str):
        raise ConfigurationError(
            f"Unsupported declaration {item!r}: expected a file path string, "
            + "FileEntry or SubgroupMarker"
        )
    if item.startswith(SUBGROUP_SENTINEL):
        name = item[len(SUBGROUP_SENTINEL):]
        if not name:
            raise ConfigurationError(
                f"Subgroup marker '{item}' has no name. "
                + "Example: '**Header Files'"
            )
        return SubgroupMarker(name)
    if not item:
        raise ConfigurationError("File declarations must not be empty strings")
    return FileEntry(item)


def parse_declarations(items: Iterable[Union[str, Declaration]]) -> List[Declaration]:
    """Convert a declaration list into structured entries, keeping order."""
    return [to_declaration(item) for item in items]


def assign_subgroups(
    declarations: Iterable[Declaration],
) -> List[Tuple[str, Optional[str]]]:
    """Pair each file entry with the subgroup in effect where it was declared.

    Returns:
        List of (relative path, subgroup or None), in declaration order
    """
    current: Optional[str] = None
    assigned = []
    for entry in declarations:
        if isinstance(entry, SubgroupMarker):
            current = entry.name
        else:
            assigned.append((entry.path, current))
    return assigned
