"""Immutable parse-time tree values.

A ``Tree`` is what the parser produces: an element name, its attributes and
its ordered children. Text between tags is represented by ``plain`` leaves
carrying the literal text in their ``text`` attribute.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple

PLAIN_TAG = "plain"
TEXT_ATTRIBUTE = "text"


@dataclass(frozen=True)
class Tree:
    """Parsed markup element with structural equality.

    Examples:
        >>> Tree("b", {}, (plain("hi"),)) == Tree("b", {}, (plain("hi"),))
        True
        >>> Tree().is_empty
        True
    """

    tag: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    children: Tuple["Tree", ...] = ()

    # Attribute dicts are unhashable, trees are compared, never hashed
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        """Normalize children to a tuple."""
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def is_plain(self) -> bool:
        """Check if this tree is a plain text leaf."""
        return self.tag == PLAIN_TAG

    @property
    def is_empty(self) -> bool:
        """Check if this is the default empty tree."""
        return not self.tag and not self.attrs and not self.children

    @property
    def text(self) -> str:
        """Literal text of a plain leaf, empty string for elements."""
        if self.is_plain:
            return self.attrs.get(TEXT_ATTRIBUTE, "")
        return ""

    @property
    def full_text(self) -> str:
        """Get all text content including from child elements."""
        if self.is_plain:
            return self.text
        parts = [child.full_text for child in self.children]
        return " ".join(part for part in parts if part).strip()

    def iter(self) -> Iterator["Tree"]:
        """Iterate over this tree and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter()

    def count(self) -> int:
        """Count this tree and all descendants."""
        return sum(1 for _ in self.iter())

    def depth(self) -> int:
        """Get the depth of the deepest leaf (a single node has depth 0)."""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)


def plain(text: str) -> Tree:
    """Create a plain text leaf.

    Args:
        text: Literal text content

    Returns:
        Tree tagged ``plain`` with a single ``text`` attribute
    """
    return Tree(tag=PLAIN_TAG, attrs={TEXT_ATTRIBUTE: text})
