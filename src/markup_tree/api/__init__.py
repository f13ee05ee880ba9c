"""Public parsing API.

Key Components:
    parse_string, parse_file: One-off parsing functions
    MarkupTreeParser: Configured, reusable parser that also builds live trees
    ParseResult: Tree plus diagnostics and performance data
    LxmlAdapter, to_lxml, from_lxml: Conversion to and from lxml.etree
"""

from .adapters import ConversionResult, LxmlAdapter, from_lxml, to_lxml
from .parser import MarkupTreeParser, ParseResult, parse_file, parse_string

__all__ = [
    "ConversionResult",
    "LxmlAdapter",
    "from_lxml",
    "to_lxml",
    "MarkupTreeParser",
    "ParseResult",
    "parse_file",
    "parse_string",
]
