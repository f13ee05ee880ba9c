"""Shared utilities for markup parsing and live trees.

This module provides shared configuration objects, result types, exceptions
and logging utilities used across the parsing, tree and API layers.
"""

from .config import (
    ApiConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    MarkupTreeConfig,
    ParserConfig,
    TreeConfig,
)
from .exceptions import (
    ForeignNodeError,
    MalformedTagError,
    MarkupParseError,
    MarkupTreeError,
    MismatchedCloseTagError,
    NestingDepthError,
    TreeMutationError,
    UnclosedTagError,
    UnexpectedCloseMarkerError,
    UnresolvableParentError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ApiConfig",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "MarkupTreeConfig",
    "ParserConfig",
    "TreeConfig",
    "ForeignNodeError",
    "MalformedTagError",
    "MarkupParseError",
    "MarkupTreeError",
    "MismatchedCloseTagError",
    "NestingDepthError",
    "TreeMutationError",
    "UnclosedTagError",
    "UnexpectedCloseMarkerError",
    "UnresolvableParentError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
]
