"""Unit tests for slug generation."""

import pytest

from policyhub.core.slug import MAX_SLUG_LENGTH, SLUG_PATTERN, generate_slug


class TestGenerateSlug:
    """Tests for generate_slug()."""

    def test_strips_punctuation(self):
        assert generate_slug("Acme, Inc.!!") == "acme-inc"

    def test_collapses_and_trims_whitespace(self):
        assert generate_slug("  A   B  ") == "a-b"

    def test_collapses_repeated_hyphens(self):
        assert generate_slug("Foo -- Bar") == "foo-bar"

    def test_drops_non_ascii_letters(self):
        assert generate_slug("Café Crème") == "caf-crme"

    def test_keeps_digits(self):
        assert generate_slug("Team 42") == "team-42"

    def test_truncates_to_max_length(self):
        slug = generate_slug("a" * 80)
        assert len(slug) == MAX_SLUG_LENGTH

    def test_truncation_does_not_leave_trailing_hyphen(self):
        slug = generate_slug("a" * 49 + " bcd")
        assert slug == "a" * 49

    def test_only_punctuation_yields_empty(self):
        assert generate_slug("!!!") == ""

    @pytest.mark.parametrize(
        "name",
        ["Acme Widgets Ltd", "  Spaces  Everywhere ", "UPPER lower 123", "x--y__z"],
    )
    def test_result_matches_slug_pattern(self, name):
        assert SLUG_PATTERN.match(generate_slug(name))
