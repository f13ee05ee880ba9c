"""Recursive-descent tree parser.

Orchestrates the tag tokenizer and the children scanner to turn a markup
string into a ``Tree``. Every parsing step takes the complete markup plus a
cursor offset and returns the offset it advanced to.
"""

from typing import List, Optional, Tuple

from markup_tree.shared import NestingDepthError, ParserConfig, get_logger
from markup_tree.tree.model import Tree, plain

from .scanner import ChildrenScanner, Extra
from .tokenizer import TagTokenizer

CLOSE_TAG_MARKER = "</"


class TreeParser:
    """Markup to ``Tree`` parser.

    Examples:
        >>> tree = TreeParser().parse('<a x="1"><b>hi</b></a>')
        >>> tree.tag, tree.attrs, tree.children[0].full_text
        ('a', {'x': '1'}, 'hi')
        >>> TreeParser().parse("just text").attrs
        {'text': 'just text'}
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tree parser.

        Args:
            config: Parser configuration (defaults to lenient close tags)
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_parser")
        self.tokenizer = TagTokenizer(correlation_id)
        self.scanner = ChildrenScanner(
            self,
            strict_close_tags=self.config.strict_close_tags,
            correlation_id=correlation_id
        )
        self._depth_reached = 0

    def parse(self, markup: str) -> Tree:
        """Parse a markup string into a ``Tree``.

        Content following the root element is ignored; use
        ``parse_with_extra`` to detect it.

        Args:
            markup: Markup text

        Returns:
            Parsed tree, the empty ``Tree()`` for empty input, or a single
            plain leaf when the input contains no close tag

        Raises:
            MarkupParseError: On any tokenizer or scanner error
        """
        tree, _ = self.parse_with_extra(markup)
        return tree

    def parse_with_extra(self, markup: str) -> Tuple[Tree, Optional[Extra]]:
        """Parse markup and report unconsumed trailing content.

        Args:
            markup: Markup text

        Returns:
            Tuple of the parsed tree and an ``Extra`` when non-whitespace
            content follows the root element

        Raises:
            NestingDepthError: If nesting exceeds the configured maximum or
                the interpreter recursion limit
            MarkupParseError: On any tokenizer or scanner error
        """
        self.logger.debug("Parsing markup", extra={"content_length": len(markup)})
        if not markup:
            return Tree(), None

        self._depth_reached = 0
        try:
            tree, extra = self.parse_fragment(markup, 0)
        except RecursionError as e:
            # Interpreter stack ran out before max_depth was reached
            self.logger.warning(
                "Recursion limit hit while parsing nested markup",
                extra={"depth": self._depth_reached, "max_depth": self.config.max_depth}
            )
            raise NestingDepthError(self._depth_reached, markup) from e
        if extra is not None and not markup[extra.pos:].strip():
            extra = None
        return tree, extra

    def parse_fragment(
        self,
        text: str,
        pos: int = 0,
        depth: int = 0
    ) -> Tuple[Tree, Optional[Extra]]:
        """Parse the element starting at ``pos``.

        Args:
            text: Complete markup being parsed
            pos: Offset of the element's opening tag
            depth: Nesting depth of the element (root is 0)

        Returns:
            Tuple of the parsed tree and, when the element ended before the
            end of input, an unfinished ``Extra`` carrying the offset just
            past the element

        Raises:
            NestingDepthError: If ``depth`` exceeds the configured maximum
            MarkupParseError: On any tokenizer or scanner error
        """
        if depth > self.config.max_depth:
            raise NestingDepthError(self.config.max_depth, text[pos:], pos)
        self._depth_reached = max(self._depth_reached, depth)

        if text.find(CLOSE_TAG_MARKER, pos) == -1:
            return plain(text[pos:]), None

        token = self.tokenizer.tokenize(text, pos)
        children: List[Tree] = []

        extra = self.scanner.scan(token.tag, text, token.end, children, depth)
        while not extra.end:
            extra = self.scanner.scan(token.tag, text, extra.pos, children, depth)

        tree = Tree(tag=token.tag, attrs=token.attrs, children=tuple(children))
        if extra.pos < len(text):
            return tree, Extra(end=False, pos=extra.pos, tag=extra.tag)
        return tree, None


def parse(markup: str, config: Optional[ParserConfig] = None) -> Tree:
    """Parse a markup string into a ``Tree``.

    Args:
        markup: Markup text
        config: Optional parser configuration

    Returns:
        Parsed tree

    Raises:
        MarkupParseError: On malformed markup
    """
    return TreeParser(config).parse(markup)
