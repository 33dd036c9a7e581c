"""Tests for declaration list parsing."""

import pytest

from wirebuild.build.declarations import (
    FileEntry,
    SubgroupMarker,
    assign_subgroups,
    parse_declarations,
    subgroup,
)
from wirebuild.errors import ConfigurationError


class TestParseDeclarations:
    """Test conversion of boundary values to declarations."""

    def test_plain_strings_are_files(self):
        assert parse_declarations(["a.cpp", "b.h"]) == [FileEntry("a.cpp"), FileEntry("b.h")]

    def test_sentinel_strings_are_markers(self):
        assert parse_declarations(["**Header Files"]) == [SubgroupMarker("Header Files")]

    def test_single_star_is_a_file(self):
        """Test only the double-star sentinel makes a marker."""
        assert parse_declarations(["*weird.cpp"]) == [FileEntry("*weird.cpp")]

    def test_empty_marker_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_declarations(["**"])

    def test_empty_file_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_declarations([""])

    def test_unsupported_type_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_declarations([42])

    def test_subgroup_helper(self):
        assert subgroup("Sources") == SubgroupMarker("Sources")
        with pytest.raises(ConfigurationError):
            subgroup("")


class TestAssignSubgroups:
    """Test subgroup assignment over a declaration stream."""

    def test_files_before_first_marker_have_no_subgroup(self):
        entries = parse_declarations(["a.h", "**Sub/Files", "b.h", "c.h"])

        assert assign_subgroups(entries) == [
            ("a.h", None),
            ("b.h", "Sub/Files"),
            ("c.h", "Sub/Files"),
        ]

    def test_trailing_marker_assigns_nothing(self):
        entries = parse_declarations(["a.h", "**Unused"])

        assert assign_subgroups(entries) == [("a.h", None)]
