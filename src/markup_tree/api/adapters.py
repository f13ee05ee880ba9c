"""Conversion between parsed trees and lxml elements.

Plain leaves have no element counterpart in lxml. Text before the first child
element becomes the element's ``text`` and text after a child element becomes
that child's ``tail``.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lxml import etree

from markup_tree.shared import DiagnosticSeverity, get_logger
from markup_tree.tree import Tree, plain

from .parser import ParseResult


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


def to_lxml(tree: Tree) -> etree._Element:
    """Convert a parsed tree to an ``lxml.etree`` element.

    Args:
        tree: Tree whose root is an element

    Returns:
        Equivalent lxml element

    Raises:
        ValueError: If the root is a plain leaf or the empty tree, or a tag
            or attribute name is not a valid XML name
    """
    if tree.is_plain or tree.is_empty:
        raise ValueError("Only element trees can be converted to lxml")

    element = etree.Element(tree.tag, attrib=dict(tree.attrs))
    last_child: Optional[etree._Element] = None
    for child in tree.children:
        if child.is_plain:
            if last_child is None:
                element.text = (element.text or "") + child.text
            else:
                last_child.tail = (last_child.tail or "") + child.text
            continue
        last_child = to_lxml(child)
        element.append(last_child)
    return element


def from_lxml(element: etree._Element) -> Tree:
    """Convert an ``lxml.etree`` element to a parsed tree.

    Namespaces are dropped from tag names, comments and processing
    instructions are skipped, and text runs are trimmed the way the parser
    trims them.

    Args:
        element: lxml element

    Returns:
        Equivalent tree
    """
    children: List[Tree] = []
    if element.text and element.text.strip():
        children.append(plain(element.text.strip()))

    for child in element:
        if isinstance(child.tag, str):
            children.append(from_lxml(child))
        if child.tail and child.tail.strip():
            children.append(plain(child.tail.strip()))

    return Tree(
        tag=etree.QName(element).localname,
        attrs={str(key): str(value) for key, value in element.attrib.items()},
        children=tuple(children)
    )


class LxmlAdapter:
    """Adapter converting parse results to and from lxml.etree."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the lxml adapter.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, "lxml_adapter")

    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert a ParseResult to an lxml element.

        Args:
            parse_result: Parsed markup result

        Returns:
            ConversionResult containing the lxml element
        """
        start_time = time.time()

        if not parse_result.success:
            return self._error_result(
                "ParseResult is not successful",
                parse_result,
                start_time
            )

        try:
            element = to_lxml(parse_result.tree)
        except ValueError as e:
            return self._error_result(f"Failed to convert to lxml: {e}", parse_result, start_time)

        return ConversionResult(
            success=True,
            converted_data=element,
            original_data=parse_result,
            conversion_time_ms=(time.time() - start_time) * 1000,
            metadata={
                "lxml_version": etree.LXML_VERSION,
                "element_count": sum(1 for _ in element.iter()),
            }
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        """Convert an lxml element to a ParseResult.

        Args:
            target_data: lxml element

        Returns:
            ConversionResult containing the ParseResult
        """
        start_time = time.time()

        if not isinstance(target_data, etree._Element):
            return self._error_result(
                "Target data is not a valid lxml element",
                target_data,
                start_time
            )

        tree = from_lxml(target_data)
        parse_result = ParseResult(tree=tree, correlation_id=self.correlation_id)
        parse_result.performance.nodes_parsed = parse_result.element_count
        parse_result.performance.max_depth = tree.depth()
        parse_result.add_diagnostic(
            DiagnosticSeverity.INFO,
            f"Converted from lxml element <{tree.tag}>",
            "lxml_adapter"
        )

        return ConversionResult(
            success=True,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=(time.time() - start_time) * 1000,
            metadata={"original_tag": target_data.tag}
        )

    def _error_result(
        self,
        error_message: str,
        original_data: Any,
        start_time: float
    ) -> ConversionResult:
        self._logger.warning(error_message)
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original_data,
            conversion_time_ms=(time.time() - start_time) * 1000,
            errors=[error_message]
        )
