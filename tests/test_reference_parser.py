"""
Tests for the reference parser — completion candidates and strict parsing.
"""

import pytest

from floxref.core.models.installable import RawReference
from floxref.core.services.installable_errors import InvalidReference
from floxref.core.services.reference_parser import parse, parse_reference


class TestParseCurrentProject:
    def test_dot_is_single_candidate(self):
        assert parse(".") == [RawReference(source=".", attr_path=())]

    def test_strict_dot(self):
        assert parse_reference(".") == RawReference(source=".")


class TestParseCandidates:
    def test_full_and_shorter_candidate(self):
        candidates = parse("flox#packages.hel")
        assert candidates == [
            RawReference(source="flox", attr_path=("packages", "hel")),
            RawReference(source="flox", attr_path=("packages",)),
        ]

    def test_split_at_hash(self):
        candidates = parse("flox#pack")
        assert candidates == [
            RawReference(source="flox", attr_path=("pack",)),
            RawReference(source=None, attr_path=("flox",)),
        ]

    def test_no_separator_adds_empty_candidate(self):
        candidates = parse("hel")
        assert candidates == [
            RawReference(attr_path=("hel",)),
            RawReference(),
        ]

    def test_source_only_input(self):
        # Trailing '#' is trimmed, leaving no separator at all.
        candidates = parse("flox#")
        assert candidates == [
            RawReference(attr_path=("flox",)),
            RawReference(),
        ]

    def test_source_with_colon_and_path(self):
        candidates = parse("github:flox/floxpkgs#hello")
        assert candidates[0] == RawReference(source="github:flox/floxpkgs", attr_path=("hello",))

    @pytest.mark.parametrize("raw", ["flox#hello.", "flox#hello#", "flox#hello.#.", "flox#hello..."])
    def test_trailing_separators_stripped(self, raw):
        assert parse(raw) == parse("flox#hello")

    def test_trailing_run_only(self):
        # Separators inside the string survive; only the trailing run goes.
        candidates = parse("a.b..")
        assert candidates[0] == RawReference(attr_path=("a", "b"))
        assert candidates[1] == RawReference(attr_path=("a",))

    def test_empty_input(self):
        candidates = parse("")
        assert candidates
        assert all(c == RawReference() for c in candidates)

    def test_leading_hash_has_no_fallback(self):
        # Prefix before the last separator is empty: only the full candidate.
        assert parse("#hel") == [RawReference(attr_path=("hel",))]

    def test_quoted_segment(self):
        candidates = parse('flox#packages."my app"')
        assert candidates[0] == RawReference(source="flox", attr_path=("packages", "my app"))

    def test_invalid_candidate_dropped(self):
        # The full string has a stray quote; the shorter one is fine.
        candidates = parse('flox#hello.x"y')
        assert candidates == [RawReference(source="flox", attr_path=("hello",))]

    def test_empty_segment_everywhere_is_invalid(self):
        with pytest.raises(InvalidReference):
            parse("flox#a..b")

    def test_partial_quote_dropped(self):
        candidates = parse('flox#packages."my ap')
        assert candidates == [RawReference(source="flox", attr_path=("packages",))]

    def test_every_candidate_invalid(self):
        with pytest.raises(InvalidReference):
            parse('x#"open.more')


class TestParseReference:
    def test_source_and_path(self):
        ref = parse_reference("flox#packages.hello")
        assert ref.source == "flox"
        assert ref.attr_path == ("packages", "hello")

    def test_path_only(self):
        ref = parse_reference("hello")
        assert ref.source is None
        assert ref.attr_path == ("hello",)

    def test_empty_is_default(self):
        assert parse_reference("") == RawReference()

    def test_no_trimming(self):
        with pytest.raises(InvalidReference):
            parse_reference("flox#hello.")

    def test_error_mentions_input(self):
        with pytest.raises(InvalidReference, match="a..b"):
            parse_reference("a..b")
