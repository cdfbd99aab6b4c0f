"""Unit tests for modgraph.core.identifiers."""

from __future__ import annotations

import pytest

from modgraph.core.identifiers import (
    IdentifierResolver,
    is_numeric_identifier,
    parse_identifier_pairs,
    parse_pair,
    require_identifier_pairs,
    split_pairs,
)
from modgraph.exceptions import ValidationError


@pytest.mark.unit
class TestParsing:
    """Tests for pair splitting and parsing."""

    def test_split_trims_and_deduplicates(self) -> None:
        """Test whitespace, blanks and repeats are dropped."""
        assert split_pairs(" 5:1.0.0 ,, guid:2.0.0,5:1.0.0 ") == ["5:1.0.0", "guid:2.0.0"]

    @pytest.mark.parametrize(
        "item,expected",
        [
            ("5:1.0.0", ("5", "1.0.0")),
            (" com.example.mod : 2.0.0 ", ("com.example.mod", "2.0.0")),
            ("nocolon", None),
            ("a:b:c", None),
            (":1.0.0", None),
            ("5:", None),
        ],
    )
    def test_parse_pair(self, item: str, expected) -> None:
        """Test one pair is parsed or rejected."""
        assert parse_pair(item) == expected

    def test_malformed_pairs_skipped(self) -> None:
        """Test malformed items do not invalidate the rest."""
        assert parse_identifier_pairs(" 5:1.0.0, bad, a:b:c, guid:2.0.0 ,5:1.0.0") == [
            ("5", "1.0.0"),
            ("guid", "2.0.0"),
        ]

    def test_empty_input(self) -> None:
        """Test None and empty strings parse to nothing."""
        assert parse_identifier_pairs(None) == []
        assert parse_identifier_pairs("") == []

    @pytest.mark.parametrize(
        "identifier,expected",
        [
            ("5", True),
            ("0", False),
            ("-1", False),
            ("guid", False),
            ("5a", False),
            ("\u00b2", False),
            ("\u2460", False),
            ("\u0663", False),
        ],
    )
    def test_is_numeric_identifier(self, identifier: str, expected: bool) -> None:
        """Test only positive integers count as numeric ids."""
        assert is_numeric_identifier(identifier) is expected


@pytest.mark.unit
class TestRequireIdentifierPairs:
    """Tests for require_identifier_pairs."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_rejected(self, raw) -> None:
        """Test blank input raises a required-parameter error."""
        with pytest.raises(ValidationError, match="required and cannot be empty") as exc_info:
            require_identifier_pairs(raw)

        assert exc_info.value.parameter == "mods"
        assert exc_info.value.code == "VALIDATION_FAILED"

    def test_no_usable_pair_rejected(self) -> None:
        """Test input with only malformed pairs raises a format error."""
        with pytest.raises(ValidationError, match="Invalid mods format"):
            require_identifier_pairs("foo,bar:baz:qux")

    def test_parameter_name_in_message(self) -> None:
        """Test a custom parameter name is used in the message."""
        with pytest.raises(ValidationError, match="The installed parameter"):
            require_identifier_pairs("", parameter="installed")

    def test_valid_input(self) -> None:
        """Test valid pairs pass through."""
        assert require_identifier_pairs("5:1.0.0") == [("5", "1.0.0")]


@pytest.mark.unit
class TestIdentifierResolver:
    """Tests for IdentifierResolver."""

    def test_resolve_by_id_and_guid(self, builder) -> None:
        """Test numeric ids and guids both resolve."""
        a = builder.package("mod.a")
        a1 = builder.version(a, "1.0.0")
        b = builder.package("mod.b")
        b2 = builder.version(b, "2.0.0")
        resolver = IdentifierResolver(builder.view())

        resolved = resolver.resolve([(str(a.id), "1.0.0"), ("mod.b", "2.0.0")])

        assert resolved == [a1, b2]

    def test_unknown_and_hidden_dropped(self, builder) -> None:
        """Test pairs naming nothing visible are silently dropped."""
        a = builder.package("mod.a")
        builder.version(a, "1.0.0")
        builder.version(a, "1.1.0", published_at=None)
        hidden = builder.package("mod.hidden", disabled=True)
        builder.version(hidden, "1.0.0")
        resolver = IdentifierResolver(builder.view())

        resolved = resolver.resolve(
            [("mod.a", "9.9.9"), ("mod.a", "1.1.0"), ("mod.hidden", "1.0.0"), ("999", "1.0.0")]
        )

        assert resolved == []

    def test_unicode_digits_treated_as_guid(self, builder) -> None:
        """Test superscript and circled digits are looked up as guids, not ids."""
        a = builder.package("mod.a")
        builder.version(a, "1.0.0")
        resolver = IdentifierResolver(builder.view())

        assert resolver.resolve([("\u00b2", "1.0.0"), ("\u2460", "1.0.0")]) == []

    def test_same_version_named_twice(self, builder) -> None:
        """Test id and guid for the same version resolve once."""
        a = builder.package("mod.a")
        a1 = builder.version(a, "1.0.0")
        resolver = IdentifierResolver(builder.view())

        assert resolver.resolve_ids([("mod.a", "1.0.0"), (str(a.id), "1.0.0")]) == [a1.id]

    def test_resolve_package(self, builder) -> None:
        """Test resolve_package handles both identifier forms."""
        a = builder.package("mod.a")
        resolver = IdentifierResolver(builder.view())

        assert resolver.resolve_package(str(a.id)) == a
        assert resolver.resolve_package("mod.a") == a
        assert resolver.resolve_package("mod.missing") is None
