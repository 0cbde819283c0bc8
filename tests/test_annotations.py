"""Tests for description annotations."""

import pytest

from coinjar.annotations import parse_split_args, scan_description
from coinjar.exceptions import ParseError, SplitResolutionError
from coinjar.models import SplitMode


class TestScanDescription:
    """Tests for stripping leading and trailing tags."""

    def test_plain_description(self) -> None:
        """Should leave untagged text alone."""
        result = scan_description("Dinner with John")

        assert result.description == "Dinner with John"
        assert result.split is None
        assert result.date_offset == 0

    def test_trailing_even_split(self) -> None:
        """Should parse an even split listing several contacts."""
        result = scan_description("Lunch #[split(@Anna, @John)]")

        assert result.description == "Lunch"
        assert result.split is not None
        assert result.split.mode == SplitMode.EVEN
        assert result.split.contacts == ("Anna", "John")

    def test_leading_split_by(self) -> None:
        """Should parse a leading split(by ...) tag."""
        result = scan_description("#[split(by @Anna)] Concert tickets")

        assert result.description == "Concert tickets"
        assert result.split is not None
        assert result.split.mode == SplitMode.BY
        assert result.split.contacts == ("Anna",)

    def test_contact_with_spaces(self) -> None:
        """Should accept contact names with inner spaces."""
        result = scan_description("Fees #[split(@Bank of America)]")

        assert result.split is not None
        assert result.split.contacts == ("Bank of America",)

    def test_date_offset(self) -> None:
        """Should read a signed day offset."""
        assert scan_description("Taxi home #[date(-1)]").date_offset == -1
        assert scan_description("#[date(+2)] Hotel").date_offset == 2

    def test_both_tags(self) -> None:
        """Should strip a leading and a trailing tag together."""
        result = scan_description("#[date(-1)] Taxi #[split(@John)]")

        assert result.description == "Taxi"
        assert result.date_offset == -1
        assert result.split is not None

    def test_tag_in_the_middle_is_text(self) -> None:
        """Should keep tags in the middle of the text as part of the description."""
        result = scan_description("Mid #[split(@A)] text")

        assert result.description == "Mid #[split(@A)] text"
        assert result.split is None

    def test_unknown_tag(self) -> None:
        """Should reject unknown tags with their column."""
        with pytest.raises(ParseError, match="Unknown annotation") as exc:
            scan_description("Dinner #[foo]", line=7)
        assert exc.value.line == 7
        assert exc.value.column == 8

    def test_duplicate_tag(self) -> None:
        """Should reject the same tag twice."""
        with pytest.raises(ParseError, match="Duplicate date"):
            scan_description("#[date(1)] Taxi #[date(2)]")

    def test_malformed_date_offset(self) -> None:
        """Should reject a non-numeric date offset."""
        with pytest.raises(ParseError):
            scan_description("Taxi #[date(yesterday)]")


class TestParseSplitArgs:
    """Tests for split participant lists."""

    def test_empty_list(self) -> None:
        """Should reject a split without contacts."""
        with pytest.raises(SplitResolutionError):
            parse_split_args("")

    def test_missing_marker(self) -> None:
        """Should reject participants without the contact marker."""
        with pytest.raises(SplitResolutionError, match="Malformed split participant"):
            parse_split_args("John")

    def test_by_needs_one_contact(self) -> None:
        """Should reject split(by ...) with zero or several contacts."""
        with pytest.raises(SplitResolutionError):
            parse_split_args("by")
        with pytest.raises(SplitResolutionError):
            parse_split_args("by @A, @B")

    def test_duplicate_contact(self) -> None:
        """Should reject a contact listed twice."""
        with pytest.raises(SplitResolutionError, match="twice"):
            parse_split_args("@A, @A")
