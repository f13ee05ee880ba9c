"""Tests for the children scanner."""

from typing import List

import pytest

from markup_tree.parsing import ChildrenScanner, Extra, TreeParser
from markup_tree.shared import (
    MalformedTagError,
    MismatchedCloseTagError,
    UnclosedTagError,
    UnexpectedCloseMarkerError,
)
from markup_tree.tree import Tree, plain


@pytest.fixture
def scanner():
    """Create a lenient children scanner."""
    return ChildrenScanner(TreeParser())


class TestChildrenScanner:
    """Test scanning the children of one element."""

    def test_text_until_close_tag(self, scanner):
        """Test a plain run followed by the matching close tag."""
        children: List[Tree] = []
        extra = scanner.scan("a", "<a>hi</a>", 3, children)

        assert extra == Extra(end=True, pos=9, tag="a")
        assert children == [plain("hi")]

    def test_text_is_trimmed(self, scanner):
        """Test that a plain run spans first to last non-whitespace."""
        children: List[Tree] = []
        scanner.scan("a", "<a>  hello  world \n</a>", 3, children)

        assert children == [plain("hello  world")]

    def test_whitespace_only_yields_no_children(self, scanner):
        """Test that whitespace between tags is dropped."""
        children: List[Tree] = []
        extra = scanner.scan("a", "<a> \n\t </a>", 3, children)

        assert extra.end is True
        assert children == []

    def test_slash_inside_text(self, scanner):
        """Test that '/' after text starts is part of the text."""
        children: List[Tree] = []
        scanner.scan("a", "<a>and/or</a>", 3, children)

        assert children == [plain("and/or")]

    def test_close_tag_whitespace_ignored(self, scanner):
        """Test whitespace inside a close tag."""
        children: List[Tree] = []
        extra = scanner.scan("a", "<a>x</ a >", 3, children)

        assert extra == Extra(end=True, pos=10, tag="a")

    def test_nested_element_returns_continuation(self, scanner):
        """Test that a nested element hands back the offset past it."""
        markup = "<a>pre<b>x</b>post</a>"
        children: List[Tree] = []
        extra = scanner.scan("a", markup, 3, children)

        assert extra.end is False
        assert extra.pos == markup.index("post")
        assert children == [plain("pre"), Tree("b", {}, (plain("x"),))]

        # Re-entering at the continuation offset finishes the parent
        extra = scanner.scan("a", markup, extra.pos, children)
        assert extra == Extra(end=True, pos=len(markup), tag="a")
        assert children[-1] == plain("post")

    def test_end_of_input_closes_implicitly(self, scanner):
        """Test lenient handling of a missing close tag."""
        children: List[Tree] = []
        extra = scanner.scan("a", "<a>hi", 3, children)

        assert extra == Extra(end=True, pos=5, tag="a")
        assert children == [plain("hi")]


class TestChildrenScannerErrors:
    """Test scanner error conditions."""

    def test_mismatched_close_tag(self, scanner):
        """Test a close tag naming another element."""
        with pytest.raises(MismatchedCloseTagError) as exc_info:
            scanner.scan("a", "<a>x</b>", 3, [])

        assert exc_info.value.expected == "a"
        assert exc_info.value.found == "b"
        assert exc_info.value.position == 4

    def test_unexpected_close_marker(self, scanner):
        """Test '/' between children."""
        with pytest.raises(UnexpectedCloseMarkerError) as exc_info:
            scanner.scan("a", "<a> /x</a>", 3, [])

        assert exc_info.value.position == 4

    @pytest.mark.parametrize("markup", ["<a>hi<", "<a>hi</a", "<a></"])
    def test_input_ends_inside_tag(self, scanner, markup):
        """Test input ending inside a tag."""
        with pytest.raises(MalformedTagError, match="unterminated tag"):
            scanner.scan("a", markup, 3, [])

    def test_strict_end_of_input(self):
        """Test strict handling of a missing close tag."""
        strict = ChildrenScanner(TreeParser(), strict_close_tags=True)

        with pytest.raises(UnclosedTagError) as exc_info:
            strict.scan("a", "<a>hi", 3, [])

        assert exc_info.value.tag == "a"
