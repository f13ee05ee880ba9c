"""Exception hierarchy for markup parsing and live tree mutation.

Parser errors are fatal to the parse call that raised them and carry the
scanned fragment for diagnostics. Tree mutation errors are raised when a
structural operation cannot keep parent and child links consistent.
"""

from typing import Optional

# Max characters of the scanned fragment echoed in error messages
FRAGMENT_PREVIEW_LENGTH = 80


def _preview(fragment: str) -> str:
    if len(fragment) > FRAGMENT_PREVIEW_LENGTH:
        return fragment[:FRAGMENT_PREVIEW_LENGTH] + "..."
    return fragment


class MarkupTreeError(Exception):
    """Base exception for all markup-tree errors."""


class MarkupParseError(MarkupTreeError):
    """Base exception for errors raised while parsing markup."""

    def __init__(
        self,
        message: str,
        fragment: str = "",
        position: Optional[int] = None
    ) -> None:
        details = message
        if position is not None:
            details = f"{details} at offset {position}"
        if fragment:
            details = f"{details}, fragment: {_preview(fragment)!r}"
        super().__init__(details)
        self.fragment = fragment
        self.position = position


class MalformedTagError(MarkupParseError):
    """Raised when a character appears in an invalid position inside a tag."""

    def __init__(
        self,
        tag_text: str,
        char: str,
        fragment: str = "",
        position: Optional[int] = None
    ) -> None:
        if char:
            message = f"Malformed tag {tag_text!r}: unexpected character {char!r}"
        else:
            message = f"Malformed tag {tag_text!r}: unterminated tag"
        super().__init__(message, fragment, position)
        self.tag_text = tag_text
        self.char = char


class MismatchedCloseTagError(MarkupParseError):
    """Raised when a close tag does not match the currently open tag."""

    def __init__(
        self,
        expected: str,
        found: str,
        fragment: str = "",
        position: Optional[int] = None
    ) -> None:
        super().__init__(
            f"Mismatched close tag: expected </{expected}>, found </{found}>",
            fragment,
            position
        )
        self.expected = expected
        self.found = found


class UnexpectedCloseMarkerError(MarkupParseError):
    """Raised when '/' appears outside a legitimate close-tag position."""

    def __init__(
        self,
        tag: str,
        fragment: str = "",
        position: Optional[int] = None
    ) -> None:
        super().__init__(
            f"Unexpected close-tag marker '/' inside <{tag}>",
            fragment,
            position
        )
        self.tag = tag


class UnclosedTagError(MarkupParseError):
    """Raised in strict mode when input ends before a tag is closed."""

    def __init__(self, tag: str, fragment: str = "") -> None:
        super().__init__(f"Unclosed tag <{tag}> at end of input", fragment)
        self.tag = tag


class NestingDepthError(MarkupParseError):
    """Raised when elements nest deeper than the configured maximum."""

    def __init__(self, depth: int, fragment: str = "", position: Optional[int] = None) -> None:
        super().__init__(
            f"Maximum nesting depth {depth} exceeded", fragment, position
        )
        self.depth = depth


class TreeMutationError(MarkupTreeError):
    """Raised when a live tree operation would break tree consistency."""


class UnresolvableParentError(TreeMutationError):
    """Raised when a parent back-reference no longer resolves to a live node."""

    def __init__(self, index: int) -> None:
        super().__init__(f"Cannot resolve parent node #{index}")
        self.index = index


class ForeignNodeError(TreeMutationError):
    """Raised when a node owned by another live tree is passed to an operation."""
