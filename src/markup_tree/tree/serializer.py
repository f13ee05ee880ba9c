"""Serialization of parsed trees to markup, dictionaries and JSON."""

import json
from typing import Any, Dict, List

from .model import Tree

# Attribute values are quoted literally, with no escape sequences
QUOTE = "\""


def to_markup(tree: Tree) -> str:
    """Render a tree back to markup.

    Plain leaves emit their literal text and elements always get an explicit
    close tag, so the output of a parsed tree parses back to an equal tree
    as long as its text contains no markup characters.

    Args:
        tree: Tree to render

    Returns:
        Markup string, empty for the empty tree

    Raises:
        ValueError: If an attribute value contains a double quote

    Examples:
        >>> from markup_tree.tree.model import plain
        >>> to_markup(Tree("a", {"x": "1"}, (plain("hi"), Tree("br"))))
        '<a x="1">hi<br></br></a>'
    """
    if tree.is_empty:
        return ""
    if tree.is_plain:
        return tree.text

    parts: List[str] = [f"<{tree.tag}"]
    for key, value in tree.attrs.items():
        if QUOTE in value:
            raise ValueError(
                f"Attribute {key!r} of <{tree.tag}> contains '\"' and cannot be rendered"
            )
        parts.append(f" {key}={QUOTE}{value}{QUOTE}")
    parts.append(">")
    parts.extend(to_markup(child) for child in tree.children)
    parts.append(f"</{tree.tag}>")
    return "".join(parts)


def to_dict(tree: Tree) -> Dict[str, Any]:
    """Convert a tree to nested plain dictionaries."""
    return {
        "tag": tree.tag,
        "attrs": dict(tree.attrs),
        "children": [to_dict(child) for child in tree.children],
    }


def from_dict(data: Dict[str, Any]) -> Tree:
    """Rebuild a tree from ``to_dict`` output.

    Raises:
        ValueError: If a node is missing its tag or has malformed fields
    """
    if not isinstance(data, dict) or "tag" not in data:
        raise ValueError(f"Tree node must be a mapping with a 'tag' key, got {data!r}")

    attrs = data.get("attrs", {})
    children = data.get("children", [])
    if not isinstance(attrs, dict):
        raise ValueError(f"Attributes of <{data['tag']}> must be a mapping")
    if not isinstance(children, list):
        raise ValueError(f"Children of <{data['tag']}> must be a list")

    return Tree(
        tag=str(data["tag"]),
        attrs={str(key): str(value) for key, value in attrs.items()},
        children=tuple(from_dict(child) for child in children)
    )


def to_json(tree: Tree, indent: int = 2) -> str:
    """Serialize a tree to a JSON string."""
    return json.dumps(to_dict(tree), indent=indent)


def from_json(json_str: str) -> Tree:
    """Deserialize a tree from a JSON string.

    Raises:
        ValueError: If the JSON is invalid or does not describe a tree
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid tree JSON: {e}") from e
    return from_dict(data)
