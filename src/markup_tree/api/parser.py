"""Core parser API with progressive disclosure for markup trees.

This module provides module-level functions for one-off parsing and a
reusable ``MarkupTreeParser`` that parses markup, reports diagnostics and
builds live node trees from the result.
"""

import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from markup_tree.parsing import TreeParser
from markup_tree.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    MarkupParseError,
    MarkupTreeConfig,
    MarkupTreeError,
    PerformanceMetrics,
    get_logger,
)
from markup_tree.tree import LiveTree, Node, Tree

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


@dataclass
class ParseResult:
    """Result object for a markup parse.

    Holds the parsed tree together with diagnostics and performance data.
    When errors are captured instead of raised, ``success`` is False and
    ``error`` holds the exception.
    """

    tree: Tree = field(default_factory=Tree)
    success: bool = True
    error: Optional[Exception] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    correlation_id: Optional[str] = None
    source: Optional[str] = None  # File path when parsed from a file

    @property
    def element_count(self) -> int:
        """Get total number of nodes in the tree, plain leaves included."""
        if self.tree.is_empty:
            return 0
        return self.tree.count()

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        )
        self.diagnostics.append(entry)

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def raise_for_error(self) -> None:
        """Re-raise the captured error, if any.

        Raises:
            MarkupParseError: The captured parse failure
            OSError: The captured file read failure
        """
        if self.error is not None:
            raise self.error
        if not self.success:
            messages = [diag.message for diag in self.diagnostics]
            raise MarkupTreeError(messages[-1] if messages else "Parse failed")

    def summary(self) -> Dict[str, Any]:
        """Get a JSON-friendly summary of the result."""
        return {
            "success": self.success,
            "source": self.source,
            "root_tag": self.tree.tag,
            "element_count": self.element_count,
            "max_depth": self.performance.max_depth,
            "processing_time_ms": self.performance.processing_time_ms,
            "error": str(self.error) if self.error is not None else None,
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }


def parse_string(
    markup: str,
    correlation_id: Optional[str] = None,
    config: Optional[MarkupTreeConfig] = None
) -> ParseResult:
    """Parse markup from a string.

    Args:
        markup: Markup content
        correlation_id: Optional correlation ID for request tracking
        config: Optional configuration (defaults to ``MarkupTreeConfig()``)

    Returns:
        ParseResult containing the tree and diagnostics

    Raises:
        MarkupParseError: On malformed markup, unless ``never_fail_mode`` is set

    Examples:
        >>> result = parse_string('<column><text size="12">Hi</text></column>')
        >>> result.success, result.tree.children[0].attrs
        (True, {'size': '12'})
    """
    return MarkupTreeParser(config, correlation_id).parse(markup)


def parse_file(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    correlation_id: Optional[str] = None,
    config: Optional[MarkupTreeConfig] = None
) -> ParseResult:
    """Parse markup from a file.

    Args:
        file_path: Path to the markup file
        encoding: Text encoding of the file
        correlation_id: Optional correlation ID for request tracking
        config: Optional configuration

    Returns:
        ParseResult containing the tree and diagnostics

    Raises:
        OSError: If the file cannot be read, unless ``never_fail_mode`` is set
        MarkupParseError: On malformed markup, unless ``never_fail_mode`` is set
    """
    return MarkupTreeParser(config, correlation_id).parse_file(file_path, encoding)


class MarkupTreeParser:
    """Configured, reusable markup parser.

    Attributes:
        config: Active configuration
        correlation_id: Correlation ID attached to logs and diagnostics

    Examples:
        Parsing and building a live tree:
        >>> parser = MarkupTreeParser()
        >>> root = parser.build('<column><text>Hi</text></column>')
        >>> root.children[0].attrs["id"].startswith("text-")
        True

        Capturing errors instead of raising:
        >>> parser = MarkupTreeParser(MarkupTreeConfig.lenient())
        >>> parser.parse('<a></b>').success
        False
    """

    def __init__(
        self,
        config: Optional[MarkupTreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the markup parser.

        Args:
            config: Configuration (defaults to ``MarkupTreeConfig()``)
            correlation_id: Optional correlation ID; generated when omitted
                and correlation tracking is enabled
        """
        self.config = config or MarkupTreeConfig()
        if correlation_id is None and self.config.global_.enable_correlation_tracking:
            correlation_id = uuid.uuid4().hex[:12]
        self.correlation_id = correlation_id

        self.logger = get_logger(__name__, self.correlation_id, "markup_tree_parser")
        self._tree_parser = TreeParser(self.config.parser, self.correlation_id)

        # Parser state for multi-parse scenarios
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def parse(self, markup: str) -> ParseResult:
        """Parse a markup string.

        Args:
            markup: Markup content

        Returns:
            ParseResult with tree, diagnostics and performance data

        Raises:
            MarkupParseError: On malformed markup, unless ``never_fail_mode`` is set
        """
        start_time = time.time()
        self.logger.info(
            "Starting parse operation",
            extra={
                "content_length": len(markup),
                "preview": (
                    markup[:PREVIEW_LENGTH] + "..."
                    if len(markup) > PREVIEW_LENGTH else markup
                )
            }
        )

        result = ParseResult(correlation_id=self.correlation_id)
        result.performance.characters_processed = len(markup)

        try:
            tree, extra = self._tree_parser.parse_with_extra(markup)
        except MarkupParseError as e:
            processing_time = (time.time() - start_time) * MS_PER_SECOND
            self._record(False, processing_time)
            if not self.config.api.never_fail_mode:
                raise
            self.logger.warning(
                f"Parse operation failed: {e}",
                extra={"processing_time_ms": processing_time, "error": str(e)}
            )
            return self._error_result(result, e, processing_time)

        result.tree = tree
        if extra is not None and self.config.api.warn_on_trailing_content:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Ignored content after root element <{tree.tag}>",
                "tree_parser",
                position=extra.pos,
                details={"trailing_length": len(markup) - extra.pos}
            )

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        result.performance.processing_time_ms = processing_time
        result.performance.nodes_parsed = result.element_count
        result.performance.max_depth = tree.depth()

        if self.config.api.include_diagnostic_info:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                f"Parsed {result.element_count} nodes",
                "api_parser",
                details={"max_depth": result.performance.max_depth}
            )

        self._record(True, processing_time)
        self.logger.info(
            "Parse completed",
            extra={
                "node_count": result.element_count,
                "processing_time_ms": processing_time,
                "total_parses": self._parse_count
            }
        )
        return result

    def parse_file(
        self,
        file_path: Union[str, Path],
        encoding: str = "utf-8"
    ) -> ParseResult:
        """Parse markup from a file.

        Args:
            file_path: Path to the markup file
            encoding: Text encoding of the file

        Returns:
            ParseResult with ``source`` set to the file path

        Raises:
            OSError: If the file cannot be read, unless ``never_fail_mode`` is set
            MarkupParseError: On malformed markup, unless ``never_fail_mode`` is set
        """
        start_time = time.time()
        path_obj = Path(file_path)
        self.logger.info(
            "Starting file parse operation",
            extra={"file_path": str(path_obj), "encoding": encoding}
        )

        try:
            content = path_obj.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as e:
            processing_time = (time.time() - start_time) * MS_PER_SECOND
            self._record(False, processing_time)
            if not self.config.api.never_fail_mode:
                raise
            self.logger.warning(
                f"File read failed: {e}",
                extra={"file_path": str(path_obj), "error": str(e)}
            )
            result = ParseResult(correlation_id=self.correlation_id, source=str(path_obj))
            return self._error_result(result, e, processing_time)

        result = self.parse(content)
        result.source = str(path_obj)
        return result

    def build(self, markup: str, live_tree: Optional[LiveTree] = None) -> Node:
        """Parse markup and build a live node tree from it.

        Ids are assigned to every node when ``assign_ids_on_build`` is set.

        Args:
            markup: Markup content
            live_tree: Arena to allocate nodes in (a new one when omitted)

        Returns:
            Root node of the built tree

        Raises:
            MarkupParseError: If parsing fails, even in ``never_fail_mode``
        """
        result = self.parse(markup)
        result.raise_for_error()

        arena = live_tree or LiveTree(self.config.tree, self.correlation_id)
        root = arena.from_tree(result.tree)
        if self.config.api.assign_ids_on_build:
            arena.idx(root)

        self.logger.debug(
            "Built live tree",
            extra={"root_index": root.index, "live_nodes": len(arena)}
        )
        return root

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

        self.logger.info("Parser statistics reset")

    def _record(self, success: bool, processing_time: float) -> None:
        self._parse_count += 1
        self._total_processing_time += processing_time
        if success:
            self._successful_parses += 1

    def _error_result(
        self,
        result: ParseResult,
        error: Exception,
        processing_time: float
    ) -> ParseResult:
        result.success = False
        result.error = error
        result.performance.processing_time_ms = processing_time
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            str(error) or type(error).__name__,
            "api_parser",
            position=getattr(error, "position", None),
            details={"error_type": type(error).__name__}
        )
        return result
