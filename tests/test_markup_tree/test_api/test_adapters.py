"""Tests for lxml conversion."""

import pytest
from lxml import etree

from markup_tree.api import LxmlAdapter, ParseResult, from_lxml, parse_string, to_lxml
from markup_tree.tree import Tree, plain


class TestToLxml:
    """Test converting trees to lxml elements."""

    def test_elements_and_attributes(self):
        """Test tags, attributes and nesting."""
        element = to_lxml(parse_string('<column gap="2"><text>Hi</text></column>').tree)

        assert element.tag == "column"
        assert element.get("gap") == "2"
        assert element[0].tag == "text"
        assert element[0].text == "Hi"

    def test_plain_leaves_become_text_and_tail(self):
        """Test plain leaf placement around child elements."""
        element = to_lxml(parse_string("<p>hello <b>big</b> world</p>").tree)

        assert element.text == "hello"
        assert element[0].text == "big"
        assert element[0].tail == "world"
        assert etree.tostring(element, encoding="unicode") == "<p>hello<b>big</b>world</p>"

    @pytest.mark.parametrize("tree", [Tree(), plain("x")])
    def test_non_element_root_rejected(self, tree):
        """Test that only element roots convert."""
        with pytest.raises(ValueError):
            to_lxml(tree)


class TestFromLxml:
    """Test converting lxml elements to trees."""

    def test_from_lxml(self):
        """Test text, tail and attribute conversion."""
        element = etree.fromstring('<p k="v">  hello <b>big</b> world  </p>')

        assert from_lxml(element) == Tree(
            "p",
            {"k": "v"},
            (plain("hello"), Tree("b", {}, (plain("big"),)), plain("world")),
        )

    def test_comments_skipped_but_tail_kept(self):
        """Test that comments drop out while their tail text remains."""
        element = etree.fromstring("<a><!-- note -->after</a>")

        assert from_lxml(element) == Tree("a", {}, (plain("after"),))

    def test_namespace_dropped(self):
        """Test that namespaced tags use their local name."""
        element = etree.fromstring('<ui:a xmlns:ui="urn:ui"><ui:b>x</ui:b></ui:a>')

        assert from_lxml(element).tag == "a"
        assert from_lxml(element).children[0].tag == "b"

    def test_round_trip(self):
        """Test from_lxml(to_lxml(tree))."""
        tree = parse_string('<column><row a="1"><text>x</text>y</row></column>').tree

        assert from_lxml(to_lxml(tree)) == tree


class TestLxmlAdapter:
    """Test the adapter wrapping ParseResult conversion."""

    def test_to_target(self):
        """Test successful conversion of a parse result."""
        adapter = LxmlAdapter()
        conversion = adapter.to_target(parse_string("<a><b>x</b></a>"))

        assert conversion.success is True
        assert conversion.converted_data.tag == "a"
        assert conversion.metadata["element_count"] == 2
        assert conversion.errors == []

    def test_to_target_failed_result(self):
        """Test that failed parse results are not converted."""
        conversion = LxmlAdapter().to_target(ParseResult(success=False))

        assert conversion.success is False
        assert conversion.converted_data is None
        assert conversion.errors

    def test_to_target_invalid_tree(self):
        """Test a tree that lxml cannot represent."""
        conversion = LxmlAdapter().to_target(ParseResult(tree=plain("x")))

        assert conversion.success is False
        assert "Failed to convert to lxml" in conversion.errors[0]

    def test_from_target(self):
        """Test converting an element into a parse result."""
        adapter = LxmlAdapter(correlation_id="corr-2")
        conversion = adapter.from_target(etree.fromstring("<a><b>x</b></a>"))

        result = conversion.converted_data
        assert conversion.success is True
        assert result.tree == Tree("a", {}, (Tree("b", {}, (plain("x"),)),))
        assert result.correlation_id == "corr-2"
        assert result.performance.max_depth == 2

    def test_from_target_invalid(self):
        """Test non-element input."""
        conversion = LxmlAdapter().from_target("<a></a>")

        assert conversion.success is False
