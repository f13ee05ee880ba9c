"""Command-line interface for markup-tree.

This module provides CLI tools to parse markup files, print live tree ids
and profile parsing.
"""

from .main import main

__all__ = ["main"]
