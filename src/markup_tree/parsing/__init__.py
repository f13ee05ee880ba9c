"""Recursive-descent markup parser.

Key Components:
    TreeParser: Orchestrates tokenizing and scanning into a ``Tree``
    TagTokenizer: State machine for a single opening tag
    ChildrenScanner: State machine for the children of an open element
    Extra: Continuation signal between nested parse calls
"""

from .parser import TreeParser, parse
from .scanner import ChildrenScanner, Extra, ScanState
from .tokenizer import TagState, TagToken, TagTokenizer

__all__ = [
    "ChildrenScanner",
    "Extra",
    "ScanState",
    "TagState",
    "TagToken",
    "TagTokenizer",
    "TreeParser",
    "parse",
]
