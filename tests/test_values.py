"""Tests for tagged values and quote sanitization."""

from __future__ import annotations

from pathlib import Path

from sysprops.values import BinarySourceValue, TextValue, sanitize, to_value


class TestSanitize:
    def test_strips_wrapping_quotes(self):
        assert sanitize(TextValue('"hello"'), True) == TextValue("hello")

    def test_disabled(self):
        assert sanitize(TextValue('"hello"'), False) == TextValue('"hello"')

    def test_strips_exactly_one_pair(self):
        assert sanitize(TextValue('""hello""'), True) == TextValue('"hello"')

    def test_empty_quoted_string(self):
        assert sanitize(TextValue('""'), True) == TextValue("")

    def test_single_quote_char_untouched(self):
        assert sanitize(TextValue('"'), True) == TextValue('"')

    def test_only_leading_quote(self):
        assert sanitize(TextValue('"hello'), True) == TextValue('"hello')

    def test_only_trailing_quote(self):
        assert sanitize(TextValue('hello"'), True) == TextValue('hello"')

    def test_empty_string(self):
        assert sanitize(TextValue(""), True) == TextValue("")

    def test_binary_source_untouched(self):
        value = BinarySourceValue('"https://example.org/a.png"')
        assert sanitize(value, True) is value


class TestToValue:
    def test_string(self):
        assert to_value("x") == TextValue("x")

    def test_path(self, tmp_path: Path):
        assert to_value(tmp_path) == BinarySourceValue(tmp_path)

    def test_already_tagged(self):
        value = TextValue("x")
        assert to_value(value) is value

    def test_other_types_become_text(self):
        assert to_value(3) == TextValue("3")
