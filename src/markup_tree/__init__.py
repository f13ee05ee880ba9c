"""Markup Tree.

A small recursive-descent parser that turns UI markup such as
``<column><text size="12">Hi</text></column>`` into an immutable tree, and a
live node tree with weak parent links, in-place mutation and stable
path-hash ids.

Progressive API Disclosure:
- Level 1: Simple functions - parse_string(), parse_file()
- Level 2: Configured parser - MarkupTreeParser class
- Level 3: Live trees - LiveTree and Node
"""

__version__ = "0.1.0"
__author__ = "Markup Tree Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured parser
from .api import MarkupTreeParser, ParseResult, parse_file, parse_string

# Configuration classes for advanced usage
from .shared.config import MarkupTreeConfig

# Core data structures for all API levels
from .tree import LiveTree, MutationEvent, MutationKind, Node, Tree

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse_string",
    "parse_file",

    # Level 2: Configured parser
    "MarkupTreeParser",

    # Level 3: Live trees
    "LiveTree",
    "MutationEvent",
    "MutationKind",
    "Node",

    # Result objects and data structures
    "ParseResult",
    "Tree",

    # Configuration
    "MarkupTreeConfig",
]
