"""
Tests for the winget listing parser.
"""

from wingetctl.core.models.artifact import ArtifactState, Presence
from wingetctl.core.services.winget.domain.listing_parser import (
    find_listing_row,
    parse_available_version,
    parse_listing_row,
    parse_tool_version,
)

LISTING = """\
Name              Id               Version   Source
---------------------------------------------------
Mozilla Firefox   Mozilla.Firefox  125.0.1   winget
"""

UPGRADES = """\
Name              Id               Version   Available  Source
--------------------------------------------------------------
Mozilla Firefox   Mozilla.Firefox  125.0.1   126.0      winget
"""


class TestFindListingRow:
    def test_finds_row(self):
        tokens = find_listing_row(LISTING, "Mozilla.Firefox")
        assert tokens is not None
        assert "125.0.1" in tokens

    def test_case_insensitive(self):
        assert find_listing_row(LISTING, "mozilla.firefox") is not None

    def test_whole_token_only(self):
        assert find_listing_row(LISTING, "Mozilla") is None
        assert find_listing_row(LISTING, "Mozilla.Firefox.ESR") is None

    def test_empty_text(self):
        assert find_listing_row("", "Mozilla.Firefox") is None

    def test_name_column_never_matches(self):
        text = (
            "Name                 Id                 Version\n"
            "------------------------------------------------\n"
            "Vendor.Tool Helper   Other.Helper       1.0\n"
            "Tool                 Vendor.Tool        2.5\n"
        )
        tokens = find_listing_row(text, "Vendor.Tool")
        assert tokens == ["Tool", "Vendor.Tool", "2.5"]

    def test_id_only_in_name_column(self):
        text = (
            "Name                 Id                 Version\n"
            "------------------------------------------------\n"
            "Vendor.Tool Helper   Other.Helper       1.0\n"
        )
        assert find_listing_row(text, "Vendor.Tool") is None

    def test_later_table_uses_its_own_header(self):
        text = LISTING + (
            "\n1 package has a version number that cannot be determined.\n"
            "Name    Id            Version\n"
            "----------------------------\n"
            "Tool    Vendor.Tool   Unknown\n"
        )
        assert find_listing_row(text, "Vendor.Tool") == ["Tool", "Vendor.Tool", "Unknown"]


class TestParseListingRow:
    def test_present_version(self):
        state = parse_listing_row(LISTING, "Mozilla.Firefox")
        assert state == ArtifactState.present("125.0.1")

    def test_no_row_is_unknown_version(self):
        state = parse_listing_row("something unexpected", "Mozilla.Firefox")
        assert state.presence == Presence.PRESENT_UNKNOWN_VERSION
        assert state.is_present

    def test_placeholder_version(self):
        text = "Name Id Version\n-----\nTool Vendor.Tool Unknown winget\n"
        assert parse_listing_row(text, "Vendor.Tool") == ArtifactState.unknown_version()

    def test_less_than_placeholder(self):
        text = "Vendor.Tool < 2.0"
        assert parse_listing_row(text, "Vendor.Tool") == ArtifactState.unknown_version()

    def test_headerless_id_repeated_in_name(self):
        text = "Vendor.Tool   Vendor.Tool   3.1.4   winget"
        assert parse_listing_row(text, "Vendor.Tool") == ArtifactState.present("3.1.4")

    def test_id_last_token(self):
        assert parse_listing_row("Tool Vendor.Tool", "Vendor.Tool") == ArtifactState.unknown_version()


class TestParseAvailableVersion:
    def test_available(self):
        assert parse_available_version(UPGRADES, "Mozilla.Firefox") == "126.0"

    def test_no_available_column(self):
        assert parse_available_version(LISTING, "Mozilla.Firefox") is None

    def test_source_with_digits_is_not_available(self):
        text = "Name   Id            Version  Source\n---\nTool   Vendor.Tool   1.0      mirror-2024\n"
        assert parse_available_version(text, "Vendor.Tool") is None


class TestParseToolVersion:
    def test_v_prefix(self):
        assert parse_tool_version("v1.8.1911") == "1.8.1911"

    def test_preview_suffix(self):
        assert parse_tool_version("v1.9.25180-preview") == "1.9.25180-preview"

    def test_surrounding_noise(self):
        assert parse_tool_version("\n  v1.7.10861\n") == "1.7.10861"

    def test_garbage(self):
        assert parse_tool_version("The system cannot find the file") is None
        assert parse_tool_version("") is None
