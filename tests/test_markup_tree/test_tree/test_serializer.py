"""Tests for tree serialization."""

import json

import pytest

from markup_tree.parsing import parse
from markup_tree.tree import Tree, from_dict, from_json, plain, to_dict, to_json, to_markup


class TestToMarkup:
    """Test rendering trees back to markup."""

    def test_render_element(self):
        """Test attributes, text and explicit close tags."""
        tree = Tree("a", {"x": "1"}, (plain("hi"), Tree("br")))

        assert to_markup(tree) == '<a x="1">hi<br></br></a>'

    def test_empty_and_plain(self):
        """Test the empty tree and a plain root."""
        assert to_markup(Tree()) == ""
        assert to_markup(plain("text")) == "text"

    def test_boolean_attribute(self):
        """Test that boolean attributes render with an empty value."""
        assert to_markup(Tree("input", {"disabled": ""})) == '<input disabled=""></input>'

    def test_attribute_values_are_literal(self):
        """Test that ampersands and angle brackets are written unchanged."""
        tree = Tree("a", {"title": "a&b <c>"})

        assert to_markup(tree) == '<a title="a&b <c>"></a>'

    def test_double_quote_in_value_rejected(self):
        """Test that values containing a double quote cannot be rendered."""
        with pytest.raises(ValueError, match="title"):
            to_markup(Tree("a", {"title": 'say "hi"'}))

    @pytest.mark.parametrize("markup", [
        '<a x="1"><b>hi</b></a>',
        "<p>hello <b>big</b> world</p>",
        '<column gap="2"><row><button disabled>OK</button></row><text>T</text></column>',
        '<a title="a&b">x</a>',
        '<a href="?q=1&amp;r=2">x &amp; y</a>',
    ])
    def test_parse_render_parse(self, markup):
        """Test that rendering a parsed tree parses back to an equal tree."""
        tree = parse(markup)

        assert parse(to_markup(tree)) == tree


class TestDictAndJson:
    """Test dictionary and JSON conversion."""

    def test_to_dict(self):
        """Test nested dictionary layout."""
        tree = Tree("a", {"x": "1"}, (plain("hi"),))

        assert to_dict(tree) == {
            "tag": "a",
            "attrs": {"x": "1"},
            "children": [{"tag": "plain", "attrs": {"text": "hi"}, "children": []}],
        }

    def test_dict_round_trip(self):
        """Test from_dict(to_dict(tree))."""
        tree = parse("<a><b>x</b><c></c></a>")

        assert from_dict(to_dict(tree)) == tree

    def test_from_dict_defaults(self):
        """Test that attrs and children are optional."""
        assert from_dict({"tag": "a"}) == Tree("a")

    @pytest.mark.parametrize("data", [
        {},
        [],
        {"tag": "a", "attrs": []},
        {"tag": "a", "children": {}},
        {"tag": "a", "children": [{"attrs": {}}]},
    ])
    def test_from_dict_invalid(self, data):
        """Test malformed dictionaries."""
        with pytest.raises(ValueError):
            from_dict(data)

    def test_json_round_trip(self):
        """Test to_json and from_json."""
        tree = parse('<a k="v"><b>x</b></a>')
        text = to_json(tree)

        assert json.loads(text)["attrs"] == {"k": "v"}
        assert from_json(text) == tree

    def test_from_json_invalid(self):
        """Test malformed JSON."""
        with pytest.raises(ValueError, match="Invalid tree JSON"):
            from_json("{nope")
