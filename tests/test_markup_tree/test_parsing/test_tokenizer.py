"""Tests for the opening tag tokenizer."""

import logging

import pytest

from markup_tree.parsing.tokenizer import TagToken, TagTokenizer
from markup_tree.shared import MalformedTagError


@pytest.fixture
def tokenizer():
    """Create a tag tokenizer."""
    return TagTokenizer()


class TestTagTokenizer:
    """Test well-formed opening tags."""

    def test_bare_tag(self, tokenizer):
        """Test a tag without attributes."""
        token = tokenizer.tokenize("<column>")

        assert token == TagToken(tag="column", attrs={}, start=0, end=8)
        assert token.length == 8

    def test_attributes_with_whitespace(self, tokenizer):
        """Test that whitespace around keys and '=' is ignored."""
        token = tokenizer.tokenize('<a  x = "1"  y="2" >')

        assert token.tag == "a"
        assert token.attrs == {"x": "1", "y": "2"}
        assert token.end == 20

    def test_attributes_without_separating_space(self, tokenizer):
        """Test a key directly after a closing quote."""
        token = tokenizer.tokenize('<a x="1"y="2">')

        assert token.attrs == {"x": "1", "y": "2"}

    def test_boolean_attributes(self, tokenizer):
        """Test keys without values."""
        token = tokenizer.tokenize("<input disabled checked>")

        assert token.attrs == {"disabled": "", "checked": ""}

    def test_boolean_attribute_before_valued_attribute(self, tokenizer):
        """Test a bare key followed by a key with a value."""
        token = tokenizer.tokenize('<input disabled size="3">')

        assert token.attrs == {"disabled": "", "size": "3"}

    def test_quoted_value_is_literal(self, tokenizer):
        """Test that '=', '>' and spaces inside quotes are kept."""
        token = tokenizer.tokenize('<a title="x = >y">')

        assert token.attrs == {"title": "x = >y"}
        assert token.end == 18

    def test_values_are_trimmed(self, tokenizer):
        """Test that surrounding whitespace inside quotes is trimmed."""
        token = tokenizer.tokenize('<a x="  padded  ">')

        assert token.attrs == {"x": "padded"}

    def test_empty_key_is_dropped(self, tokenizer):
        """Test that a value without a key is ignored."""
        token = tokenizer.tokenize('<a ="1">')

        assert token.attrs == {}

    def test_duplicate_key_last_wins(self, tokenizer):
        """Test duplicate attribute keys."""
        token = tokenizer.tokenize('<a x="1" x="2">')

        assert token.attrs == {"x": "2"}

    def test_leading_whitespace_skipped(self, tokenizer):
        """Test whitespace before '<'."""
        token = tokenizer.tokenize("  \n<a>")

        assert token.tag == "a"
        assert token.end == 6

    def test_offset_start(self, tokenizer):
        """Test tokenizing from the middle of the markup."""
        token = tokenizer.tokenize('<a><b x="1"></b></a>', 3)

        assert token.tag == "b"
        assert token.attrs == {"x": "1"}
        assert token.start == 3
        assert token.end == 12

    def test_stops_at_first_closing_bracket(self, tokenizer):
        """Test that only the opening tag is consumed."""
        markup = "<a>rest</a>"
        token = tokenizer.tokenize(markup)

        assert markup[token.end:] == "rest</a>"


class TestTagTokenizerErrors:
    """Test malformed opening tags."""

    @pytest.mark.parametrize("markup, char", [
        ("x<a>", "x"),
        ("<>", ">"),
        ('<a"x">', "\""),
        ("<a=x>", "="),
        ("<a x=1>", "1"),
        ("<a x=>", ">"),
        ('<a x=="1">', "="),
        ('<a x "1">', "\""),
        ('<a x="1""2">', "\""),
        ("<<a>", "<"),
        ("<a<b>", "<"),
        ('<a x<y="1">', "<"),
        ("<a x <y>", "<"),
    ])
    def test_invalid_character(self, tokenizer, markup, char):
        """Test characters in invalid positions."""
        with pytest.raises(MalformedTagError) as exc_info:
            tokenizer.tokenize(markup)

        assert exc_info.value.char == char

    @pytest.mark.parametrize("markup", ["<a", '<a x="1', "<a x", ""])
    def test_unterminated(self, tokenizer, markup):
        """Test input ending before '>'."""
        with pytest.raises(MalformedTagError, match="unterminated tag") as exc_info:
            tokenizer.tokenize(markup)

        assert exc_info.value.position == len(markup)

    def test_error_reports_offset(self, tokenizer):
        """Test that the error position is the offending character."""
        with pytest.raises(MalformedTagError) as exc_info:
            tokenizer.tokenize("<a x=1>")

        assert exc_info.value.position == 5
        assert exc_info.value.tag_text == "a"


class TestTagTokenizerLogging:
    """Test debug logging of tokenized tags."""

    def test_debug_record(self, tokenizer, caplog):
        """Test the structured record emitted at DEBUG level."""
        caplog.set_level(logging.DEBUG, logger="markup_tree.parsing")

        tokenizer.tokenize('<a x="1">')

        record = next(r for r in caplog.records if r.message == "Tokenized opening tag")
        assert record.tag == "a"
        assert record.attr_count == 1
        assert record.component == "tag_tokenizer"

    def test_no_record_above_debug(self, tokenizer, caplog):
        """Test that nothing is logged when DEBUG is disabled."""
        caplog.set_level(logging.INFO, logger="markup_tree.parsing")

        tokenizer.tokenize("<a>")

        assert not [r for r in caplog.records if r.message == "Tokenized opening tag"]
