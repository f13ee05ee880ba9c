"""Children scanner for the markup tree parser.

Scans the sibling fragments that follow an opening tag, collecting plain text
runs as leaves and handing nested elements back to the tree parser, until the
parent's close tag or the end of input is reached.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, List, Optional

from markup_tree.shared import (
    MalformedTagError,
    MismatchedCloseTagError,
    UnclosedTagError,
    UnexpectedCloseMarkerError,
    get_logger,
)
from markup_tree.tree.model import Tree, plain

if TYPE_CHECKING:
    from .parser import TreeParser


class ScanState(Enum):
    """State machine states for children scanning."""

    NONE = auto()       # Between children
    PLAIN = auto()      # Accumulating a plain text run
    BEGIN_TAG = auto()  # Just read '<'
    CLOSE_TAG = auto()  # Inside '</...>'


@dataclass
class Extra:
    """Continuation signal passed between nested scan and parse calls.

    Attributes:
        end: Whether the scan consumed the parent's matching close tag
        pos: Absolute offset one past the last consumed character
        tag: Tag name the scan was associated with
    """

    end: bool
    pos: int
    tag: str


class ChildrenScanner:
    """Scanner collecting the children of one open element."""

    def __init__(
        self,
        parser: "TreeParser",
        strict_close_tags: bool = False,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the children scanner.

        Args:
            parser: Tree parser used to parse nested elements
            strict_close_tags: Raise instead of implicitly closing at end of input
            correlation_id: Optional correlation ID for tracking requests
        """
        self.parser = parser
        self.strict_close_tags = strict_close_tags
        self.logger = get_logger(__name__, correlation_id, "children_scanner")

    def scan(
        self,
        tag: str,
        text: str,
        pos: int,
        children: List[Tree],
        depth: int = 0
    ) -> Extra:
        """Scan children of ``tag`` starting at ``pos``.

        Nested elements are parsed recursively and appended to ``children``.
        When a nested element stops short of the end of input the scan
        returns early with ``end=False`` so the caller re-enters at
        ``Extra.pos``.

        Args:
            tag: Name of the open parent element
            text: Complete markup being parsed
            pos: Offset just past the parent's opening tag or previous child
            children: List receiving parsed children
            depth: Nesting depth of the parent element

        Returns:
            Extra describing where scanning stopped

        Raises:
            MismatchedCloseTagError: If a close tag names another element
            UnexpectedCloseMarkerError: If '/' appears outside a close tag
            MalformedTagError: If input ends inside a tag
            UnclosedTagError: In strict mode, if input ends before the close tag
        """
        state = ScanState.NONE
        plain_start = plain_end = pos
        tag_start = pos

        for offset in range(pos, len(text)):
            char = text[offset]

            if state is ScanState.BEGIN_TAG:
                if char == "/":
                    state = ScanState.CLOSE_TAG
                    continue

                self._flush_plain(text, plain_start, plain_end, children)
                child, extra = self.parser.parse_fragment(text, tag_start, depth + 1)
                children.append(child)
                if extra is not None:
                    return Extra(end=False, pos=extra.pos, tag=extra.tag)
                return self._end_of_input(tag, text, pos, children)

            if state is ScanState.CLOSE_TAG:
                if char != ">":
                    continue
                close_tag = text[tag_start + 2:offset].strip()
                if close_tag != tag:
                    raise MismatchedCloseTagError(tag, close_tag, text[pos:], tag_start)

                self._flush_plain(text, plain_start, plain_end, children)
                return Extra(end=True, pos=offset + 1, tag=close_tag)

            if char == "<":
                state = ScanState.BEGIN_TAG
                tag_start = offset
            elif char == "/" and state is not ScanState.PLAIN:
                raise UnexpectedCloseMarkerError(tag, text[pos:], offset)
            elif not char.isspace():
                if state is ScanState.NONE:
                    state = ScanState.PLAIN
                    plain_start = offset
                plain_end = offset + 1

        if state is ScanState.BEGIN_TAG or state is ScanState.CLOSE_TAG:
            raise MalformedTagError(text[tag_start:].strip(), "", text[pos:], len(text))

        self._flush_plain(text, plain_start, plain_end, children)
        return self._end_of_input(tag, text, pos, children)

    def _flush_plain(
        self,
        text: str,
        start: int,
        end: int,
        children: List[Tree]
    ) -> None:
        if end > start:
            children.append(plain(text[start:end]))

    def _end_of_input(
        self,
        tag: str,
        text: str,
        pos: int,
        children: List[Tree]
    ) -> Extra:
        if self.strict_close_tags:
            raise UnclosedTagError(tag, text[pos:])

        self.logger.debug(
            "Implicitly closing tag at end of input",
            extra={"tag": tag, "children": len(children)}
        )
        return Extra(end=True, pos=len(text), tag=tag)
