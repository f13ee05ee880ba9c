"""Tag tokenizer for markup opening tags.

Scans a single opening tag such as ``<a x="1" disabled>`` with a
character-level state machine and extracts the tag name and attribute
mapping, reporting how far into the markup the tag extended.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from markup_tree.shared import MalformedTagError, get_logger


class TagState(Enum):
    """State machine states for opening tag tokenization."""

    NONE = auto()       # Before the opening '<'
    TAG = auto()        # Reading the tag name
    ATTRS = auto()      # Reading attribute keys and '='
    QUOTE = auto()      # Inside a double-quoted attribute value


@dataclass
class TagToken:
    """Tokenized opening tag."""

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    start: int = 0
    end: int = 0  # One past the closing '>'

    @property
    def length(self) -> int:
        """Number of characters consumed through the closing '>'."""
        return self.end - self.start


class TagTokenizer:
    """Opening tag tokenizer.

    Attribute values must be double-quoted. Keys and values are trimmed,
    empty keys are dropped, and a key without ``="..."`` becomes a boolean
    attribute with an empty value.

    Examples:
        >>> token = TagTokenizer().tokenize('<a  x = "1"  y="2" >')
        >>> token.tag, token.attrs, token.end
        ('a', {'x': '1', 'y': '2'}, 20)
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the tag tokenizer.

        Args:
            correlation_id: Optional correlation ID for tracking requests
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tag_tokenizer")

    def tokenize(self, text: str, pos: int = 0) -> TagToken:
        """Tokenize the opening tag starting at ``pos``.

        Args:
            text: Markup containing the tag
            pos: Offset of the tag's '<' (leading whitespace is skipped)

        Returns:
            TagToken with name, attributes and the offset one past '>'

        Raises:
            MalformedTagError: If a character appears in an invalid position
                or the input ends before '>'
        """
        state = TagState.NONE
        name: List[str] = []
        key: List[str] = []
        value: List[str] = []
        attrs: Dict[str, str] = {}
        key_done = False      # whitespace seen after a bare key
        eq_seen = False
        value_closed = False

        def fail(char: str, offset: int) -> MalformedTagError:
            return MalformedTagError("".join(name), char, text[pos:], offset)

        def flush() -> None:
            nonlocal key_done, eq_seen, value_closed
            attr_name = "".join(key).strip()
            if attr_name:
                attrs[attr_name] = "".join(value).strip()
            key.clear()
            value.clear()
            key_done = eq_seen = value_closed = False

        for offset in range(pos, len(text)):
            char = text[offset]

            if state is TagState.NONE:
                if char == "<":
                    state = TagState.TAG
                elif not char.isspace():
                    raise fail(char, offset)

            elif state is TagState.TAG:
                if char == ">":
                    if not name:
                        raise fail(char, offset)
                    return self._finish(name, attrs, pos, offset)
                if char.isspace():
                    if name:
                        state = TagState.ATTRS
                elif char in "\"=<":
                    raise fail(char, offset)
                else:
                    name.append(char)

            elif state is TagState.QUOTE:
                if char == "\"":
                    state = TagState.ATTRS
                    value_closed = True
                else:
                    value.append(char)

            elif char == ">":
                if eq_seen and not value_closed:
                    raise fail(char, offset)
                flush()
                return self._finish(name, attrs, pos, offset)

            elif char.isspace():
                if value_closed:
                    flush()
                elif key and not eq_seen:
                    key_done = True

            elif char == "=":
                if eq_seen:
                    raise fail(char, offset)
                eq_seen = True
                key_done = False

            elif char == "\"":
                if not eq_seen or value_closed:
                    raise fail(char, offset)
                state = TagState.QUOTE

            elif char == "<":
                raise fail(char, offset)

            elif value_closed or key_done:
                flush()
                key.append(char)

            elif eq_seen:
                # Unquoted attribute value
                raise fail(char, offset)

            else:
                key.append(char)

        raise fail("", len(text))

    def _finish(
        self,
        name: List[str],
        attrs: Dict[str, str],
        start: int,
        offset: int
    ) -> TagToken:
        token = TagToken(tag="".join(name), attrs=attrs, start=start, end=offset + 1)
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Tokenized opening tag",
                extra={"tag": token.tag, "attr_count": len(attrs), "end": token.end}
            )
        return token
